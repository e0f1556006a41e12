"""
We generate deterministic signatures and verify them
"""
from secrets import token_bytes, randbelow

import pytest

from bitkey.core import ECDSAError
from bitkey.cryptography import ecdsa, verify_ecdsa, rfc6979_nonce, SECP256K1, sha256
from bitkey.data import encode_der_signature, decode_der_signature


def random_private_key() -> int:
    while True:
        priv_key = randbelow(SECP256K1.order)
        if priv_key != 0:
            return priv_key


def test_ecdsa():
    priv_key = random_private_key()
    pub_key = SECP256K1.multiply_generator(priv_key)

    messages = [token_bytes(n) for n in (16, 32, 64)]
    signatures = [ecdsa(priv_key, m) for m in messages]

    for msg, sig in zip(messages, signatures):
        assert verify_ecdsa(sig, msg, pub_key), "Failed to verify ECDSA signature for random data"


def test_deterministic_low_s():
    priv_key = random_private_key()
    msg = sha256(token_bytes(32))

    sig1 = ecdsa(priv_key, msg)
    sig2 = ecdsa(priv_key, msg)
    assert sig1 == sig2, "Same key and message gave different signatures"
    assert sig1[1] <= SECP256K1.order // 2, "Signature s value is not low"


def test_rfc6979_known_vector():
    """
    Private key 1 signing sha256("Satoshi Nakamoto")
    """
    msg = sha256(b"Satoshi Nakamoto")
    k = next(rfc6979_nonce(1, msg))
    assert k == int("8F8A276C19F4149656B280621E358CCE24F5F52542772691EE69063B74F15D15", 16), \
        "RFC6979 nonce does not match known vector"

    r, s = ecdsa(1, msg)
    assert r == int("934b1ea10a4b3c1757e2b0c017d0b6143ce3c9a7e6a4a49860d7a6ab210ee3d8", 16), "r mismatch"
    assert s == int("2442ce9d2b916064108014783e923ec36b49743e2ffa1c4496f01a512aafd9e5", 16), "s mismatch"


def test_wrong_key_fails():
    priv_key = random_private_key()
    other_pub = SECP256K1.multiply_generator(random_private_key())
    msg = sha256(token_bytes(16))
    assert not verify_ecdsa(ecdsa(priv_key, msg), msg, other_pub), "Signature verified against the wrong key"


def test_der_roundtrip():
    r, s = ecdsa(random_private_key(), sha256(b"der"))
    der = encode_der_signature(r, s)
    assert der[0] == 0x30, "DER signature must start with a sequence tag"
    assert decode_der_signature(der) == (r, s), "DER decoding did not recover (r, s)"


def test_private_key_out_of_bounds():
    with pytest.raises(ECDSAError):
        ecdsa(0, sha256(b"zero"))
    with pytest.raises(ECDSAError):
        ecdsa(SECP256K1.order, sha256(b"order"))
