"""
Methods to create and verify a signature created using ECDSA

Nonces are derived deterministically from the private key and message (RFC 6979, HMAC-SHA256), so signing the same
message with the same key always yields the same signature.
"""
from typing import Tuple

from bitkey.core.exceptions import ECDSAError
from bitkey.cryptography.ecc import SECP256K1, Point
from bitkey.cryptography.hash_functions import hmac_sha256

__all__ = ["ecdsa", "verify_ecdsa", "rfc6979_nonce"]

curve = SECP256K1


def _bits_to_int(message: bytes) -> int:
    """Keep the n leftmost bits of the message"""
    n = curve.order
    z = int.from_bytes(message, 'big')
    excess = len(message) * 8 - n.bit_length()
    if excess > 0:
        z >>= excess
    return z


def rfc6979_nonce(private_key: int, message: bytes, extra_entropy: bytes = b''):
    """
    Yields candidate nonces k in [1, n-1] following RFC 6979 section 3.2.

    The generator continues the HMAC_DRBG chain if the caller rejects a candidate (r == 0 or s == 0).
    """
    n = curve.order
    qlen = (n.bit_length() + 7) // 8

    x = private_key.to_bytes(qlen, "big")
    h1 = (_bits_to_int(message) % n).to_bytes(qlen, "big")

    v = b'\x01' * 32
    k = b'\x00' * 32
    k = hmac_sha256(k, v + b'\x00' + x + h1 + extra_entropy)
    v = hmac_sha256(k, v)
    k = hmac_sha256(k, v + b'\x01' + x + h1 + extra_entropy)
    v = hmac_sha256(k, v)

    while True:
        t = b''
        while len(t) < qlen:
            v = hmac_sha256(k, v)
            t += v
        candidate = _bits_to_int(t[:qlen])
        if 1 <= candidate < n:
            yield candidate
        k = hmac_sha256(k, v + b'\x00')
        v = hmac_sha256(k, v)


def ecdsa(private_key: int, message: bytes) -> Tuple[int, int]:
    """
    Generates a deterministic ECDSA signature (r, s) for the given private key and message hash.

    Algorithm:
    ----------
    1) Compute z as the integer value of the first n bits of message hash.
    2) Take the next RFC 6979 nonce k.
    3) Calculate curve point (x, y) = k * generator.
    4) Compute r = x (mod n) and s = k^(-1)(z + r * private_key) (mod n).
    5) If r or s is 0, repeat from step 2.
    6) Return (r, s) with low s as per BIP-62.
    """
    n = curve.order
    if not (1 <= private_key < n):
        raise ECDSAError("Private key out of bounds for ECDSA")

    z = _bits_to_int(message)

    for k in rfc6979_nonce(private_key, message):
        x, _ = curve.multiply_generator(k)
        r = x % n
        if r == 0:
            continue

        s = (pow(k, -1, n) * (z + r * private_key)) % n
        if s == 0:
            continue

        if s > n // 2:
            s = n - s
        return r, s


def verify_ecdsa(signature: tuple, message: bytes, public_key: Point | tuple) -> bool:
    """
    We verify that the given signature corresponds to the public_key for the given message hash.

    Algorithm
    --------
    1) Verify that (r,s) are integers in the interval [1,n-1]
    2) Let z be the integer value of the first n bits of the message hash
    3) Let u1 = z * s^(-1) (mod n) and u2 = r * s^(-1) (mod n)
    4) Calculate the curve point (x,y) = (u1 * generator) + (u2 * public_key)
    5) If r = x (mod n), the signature is valid.
    """
    n = curve.order
    r, s = signature

    if not (1 <= r < n):
        raise ECDSAError(f"ECDSA r value {r} out of bounds.")
    if not (1 <= s < n):
        raise ECDSAError(f"ECDSA s value {s} out of bounds.")

    public_key = public_key if isinstance(public_key, Point) else Point(*public_key)
    z = _bits_to_int(message)

    s_inv = pow(s, -1, n)
    u1 = (z * s_inv) % n
    u2 = (r * s_inv) % n

    final_pt = curve.add_points(curve.multiply_generator(u1), curve.scalar_multiplication(u2, public_key))
    if not final_pt:
        return False
    return r == final_pt.x % n
