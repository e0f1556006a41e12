"""
Tests for signing transaction proposals
"""
from random import shuffle

import pytest

from bitkey.core import KEY, XKEYS, InvalidArgument, InvalidState, EncryptedPrivateKey
from bitkey.data import decode_der_signature, PubKey
from bitkey.tx import TxProposal, InputSignature, SigHash
from bitkey.wallet import Key, KeyOptions, ExtendedKey

from tests.utility import make_proposal, pubkey_at, random_txid

PATHS = ["m/0/0", "m/0/1", "m/1/0", "m/0/0", "m/0/1"]


def verify_all(txp: TxProposal, signatures: list[str], pubkeys: list[str]) -> bool:
    tx = txp.build_tx()
    return all(
        txp.verify_signature(tx, InputSignature(i, decode_der_signature(bytes.fromhex(sig)), pubkeys[i],
                                                txp.sighash_type))
        for i, sig in enumerate(signatures)
    )


@pytest.mark.parametrize("address_type", [KEY.P2PKH, KEY.P2WPKH])
def test_single_sig(trezor_key, root_path, address_type):
    root = trezor_key.derive(None, root_path)
    paths = PATHS[:]
    shuffle(paths)
    pubkeys = [pubkey_at(root, p) for p in paths]
    txp = make_proposal([(p, [pk]) for p, pk in zip(paths, pubkeys)], address_type=address_type)

    signatures = trezor_key.sign(root_path, txp)
    assert len(signatures) == len(paths), "Expected one signature per input"
    assert verify_all(txp, signatures, pubkeys), "Signatures do not verify in input order"


@pytest.mark.parametrize("coin, address_type", [(KEY.BTC, KEY.P2SH), (KEY.BTC, KEY.P2WSH), (KEY.BCH, KEY.P2SH)])
def test_multisig(trezor_key, root_path, coin, address_type):
    root = trezor_key.derive(None, root_path)
    cosigner = Key.create().derive(None, root_path)

    input_keys, my_pubkeys = [], []
    for path in PATHS:
        mine = pubkey_at(root, path)
        my_pubkeys.append(mine)
        input_keys.append((path, [pubkey_at(cosigner, path), mine]))
    txp = make_proposal(input_keys, coin=coin, address_type=address_type, required_signatures=2)

    signatures = trezor_key.sign(root_path, txp)
    assert len(signatures) == len(PATHS), "Expected one signature per input"
    assert verify_all(txp, signatures, my_pubkeys), "Multisig signatures do not verify"


def test_bch_uses_forkid(trezor_key, root_path):
    root = trezor_key.derive(None, root_path)
    pubkey = pubkey_at(root, "m/0/0")
    btc = make_proposal([("m/0/0", [pubkey])])
    bch = TxProposal.from_obj({**btc.to_obj(), "coin": KEY.BCH})

    assert bch.sighash_type == SigHash.ALL_FORKID, "BCH should sign with SIGHASH_ALL | FORKID"
    assert btc.sighash(btc.build_tx(), 0) != bch.sighash(bch.build_tx(), 0), "BCH digest should differ from BTC"
    assert trezor_key.sign(root_path, btc) != trezor_key.sign(root_path, bch), "BCH signature should differ"


def test_deterministic(trezor_key, encrypted_key, root_path, password):
    root = trezor_key.derive(None, root_path)
    txp = make_proposal([(p, [pubkey_at(root, p)]) for p in PATHS])

    first = trezor_key.sign(root_path, txp)
    assert trezor_key.sign(root_path, txp) == first, "Signing is not deterministic"
    assert encrypted_key.sign(root_path, txp, password) == first, "Encrypted key signed differently"
    assert trezor_key.sign(root_path, txp.to_obj()) == first, "Dict proposal signed differently"


def test_der_encoding(trezor_key, root_path):
    root = trezor_key.derive(None, root_path)
    txp = make_proposal([("m/0/0", [pubkey_at(root, "m/0/0")])])
    signature = trezor_key.sign(root_path, txp)[0]

    assert signature == signature.lower(), "Signature hex should be lowercase"
    assert signature.startswith("30"), "Signature should be a DER sequence"
    r, s = decode_der_signature(bytes.fromhex(signature))
    assert r > 0 and s > 0, "Signature values should be positive"


def test_encrypted_without_password(encrypted_key, root_path, monkeypatch):
    pubkey = PubKey(1).hex()
    txp = make_proposal([("m/0/0", [pubkey])])

    def no_derivation(*args, **kwargs):
        raise AssertionError("Derivation ran before the password check")

    monkeypatch.setattr(Key, "derive", no_derivation)
    with pytest.raises(EncryptedPrivateKey):
        encrypted_key.sign(root_path, txp)


def test_missing_path(trezor_key, root_path):
    root = trezor_key.derive(None, root_path)
    txp = make_proposal([("m/0/0", [pubkey_at(root, "m/0/0")]), (None, [pubkey_at(root, "m/0/1")])])
    with pytest.raises(InvalidState):
        trezor_key.sign(root_path, txp)


def test_underivable_path(trezor_key, root_path):
    root = trezor_key.derive(None, root_path)
    txp = make_proposal([("m/0/x", [pubkey_at(root, "m/0/0")])])
    with pytest.raises(InvalidArgument):
        trezor_key.sign(root_path, txp)


def test_incomplete_coverage(trezor_key, root_path):
    root = trezor_key.derive(None, root_path)
    foreign = PubKey(12345).hex()
    txp = make_proposal([("m/0/0", [pubkey_at(root, "m/0/0")]), ("m/0/1", [foreign])])
    with pytest.raises(InvalidState):
        trezor_key.sign(root_path, txp)


def test_eth_not_signable(trezor_key, root_path):
    root = trezor_key.derive(None, root_path)
    txp = make_proposal([("m/0/0", [pubkey_at(root, "m/0/0")])], coin=KEY.ETH)
    with pytest.raises(InvalidArgument):
        trezor_key.sign(root_path, txp)


def test_malformed_proposal():
    with pytest.raises(InvalidArgument):
        TxProposal.from_obj({"coin": "btc", "inputs": []})
    with pytest.raises(InvalidArgument):
        TxProposal.from_obj({"coin": "btc", "inputs": [{"txid": random_txid()}]})
    with pytest.raises(InvalidArgument):
        TxProposal.from_obj({"coin": "btc", "addressType": "P2TR",
                             "inputs": [{"txid": random_txid(), "vout": 0, "satoshis": 1}]})


def test_input_paths_use_compliant_derivation():
    # A root whose private key has a leading zero byte, so the two hardened derivations differ
    root = ExtendedKey(b'\x00' + bytes(range(1, 32)), b'\x07' * 32, depth=0, parent_fingerprint=b'\x00' * 4,
                       child_number=0, version=XKEYS.MAINNET_PRIVATE)
    key = Key.from_extended_private_key(root.address(), KeyOptions(non_compliant_derivation=True))

    compliant_child = root.derive_path("m/0'")
    legacy_child = root.derive_path("m/0'", compliant=False)
    assert compliant_child != legacy_child, "Leading zero key should derive a different hardened child"
    assert key.derive(None, "m/0'") == legacy_child, "Key derivation should honor the non-compliant flag"

    pubkey = compliant_child.pubkey().hex()
    txp = make_proposal([("m/0'", [pubkey])])
    signatures = key.sign("m", txp)
    assert len(signatures) == 1, "Expected one signature"
    assert verify_all(txp, signatures, [pubkey]), "Input key should come from compliant derivation"
