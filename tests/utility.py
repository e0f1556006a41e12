"""
Helper functions for the tests
"""
from secrets import token_bytes

from bitkey.core import KEY
from bitkey.tx import TxProposal, p2pkh_script
from bitkey.wallet import ExtendedKey

__all__ = ["TREZOR_PHRASE", "ROOT_PATH", "random_txid", "make_proposal", "pubkey_at"]

# BIP39 reference phrase (entropy 00 * 16)
TREZOR_PHRASE = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"

ROOT_PATH = "m/44'/0'/0'"


def random_txid() -> str:
    return token_bytes(32).hex()


def pubkey_at(root: ExtendedKey, path: str) -> str:
    return root.derive_path(path).pubkey().hex()


def make_proposal(input_keys: list[tuple[str | None, list[str]]], coin: str = KEY.BTC,
                  address_type: str = KEY.P2PKH, required_signatures: int = 1,
                  network: str = KEY.LIVENET) -> TxProposal:
    """
    input_keys is a list of (path, public keys) pairs, one per input
    """
    change_pubkey = bytes.fromhex(input_keys[0][1][0])
    obj = {
        "coin": coin,
        "network": network,
        "addressType": address_type,
        "requiredSignatures": required_signatures,
        "inputs": [
            {"txid": random_txid(), "vout": vout, "satoshis": 10000 * (vout + 1), "path": path,
             "publicKeys": pubkeys}
            for vout, (path, pubkeys) in enumerate(input_keys)
        ],
        "outputs": [{"script": p2pkh_script(change_pubkey).hex(), "amount": 5000}],
    }
    return TxProposal.from_obj(obj)
