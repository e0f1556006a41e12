"""
Builders for the output and redeem scripts a wallet input can spend
"""
from bitkey.core import InvalidArgument
from bitkey.cryptography import hash160, sha256
from bitkey.data import push_data

__all__ = ["p2pkh_script", "p2sh_script", "p2wpkh_script", "p2wsh_script", "multisig_script", "sort_pubkeys"]

# --- OPCODES --- #
OP_0 = 0x00
OP_1 = 0x51
OP_DUP = 0x76
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_HASH160 = 0xa9
OP_CHECKSIG = 0xac
OP_CHECKMULTISIG = 0xae

MAX_MULTISIG_KEYS = 16


def _small_int(n: int) -> bytes:
    return bytes([OP_1 + n - 1])


def sort_pubkeys(pubkeys: list[bytes]) -> list[bytes]:
    """Lexicographic order of the compressed keys"""
    return sorted(pubkeys)


def p2pkh_script(pubkey: bytes) -> bytes:
    """OP_DUP OP_HASH160 <pubkey hash> OP_EQUALVERIFY OP_CHECKSIG"""
    return bytes([OP_DUP, OP_HASH160]) + push_data(hash160(pubkey)) + bytes([OP_EQUALVERIFY, OP_CHECKSIG])


def multisig_script(m: int, pubkeys: list[bytes]) -> bytes:
    """OP_m <sorted pubkeys> OP_n OP_CHECKMULTISIG"""
    n = len(pubkeys)
    if not (1 <= m <= n <= MAX_MULTISIG_KEYS):
        raise InvalidArgument(f"Invalid multisig parameters: {m}-of-{n}")
    keys = b''.join(push_data(pk) for pk in sort_pubkeys(pubkeys))
    return _small_int(m) + keys + _small_int(n) + bytes([OP_CHECKMULTISIG])


def p2sh_script(redeem_script: bytes) -> bytes:
    """OP_HASH160 <script hash> OP_EQUAL"""
    return bytes([OP_HASH160]) + push_data(hash160(redeem_script)) + bytes([OP_EQUAL])


def p2wpkh_script(pubkey: bytes) -> bytes:
    """OP_0 <pubkey hash>"""
    return bytes([OP_0]) + push_data(hash160(pubkey))


def p2wsh_script(witness_script: bytes) -> bytes:
    """OP_0 <sha256(witness script)>"""
    return bytes([OP_0]) + push_data(sha256(witness_script))
