"""
Methods for encoding and decoding keys and signatures
"""
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature, decode_dss_signature

from bitkey.core import DataEncodingError
from bitkey.cryptography import hash256

__all__ = ["encode_base58", "decode_base58", "encode_base58check", "decode_base58check", "encode_der_signature",
           "decode_der_signature"]

# --- BASE58 ENCODING --- #
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
CHECKSUM_BYTES = 4


def encode_base58(data: bytes) -> str:
    """
    Encode bytes to base58. Every leading zero byte becomes a leading '1'.
    """
    n = int.from_bytes(data, "big")
    encoded = ""
    while n > 0:
        n, remainder = divmod(n, 58)
        encoded = BASE58_ALPHABET[remainder] + encoded

    leading_zeros = len(data) - len(data.lstrip(b'\x00'))
    return "1" * leading_zeros + encoded


def decode_base58(data: str) -> bytes:
    """
    Decode a base58 string to bytes. Every leading '1' becomes a leading zero byte.
    """
    total = 0
    for char in data:
        index = BASE58_ALPHABET.find(char)
        if index == -1:
            raise DataEncodingError(f"Invalid base58 character: {char!r}")
        total = total * 58 + index

    body = total.to_bytes((total.bit_length() + 7) // 8, "big") if total else b''
    leading_ones = len(data) - len(data.lstrip("1"))
    return b'\x00' * leading_ones + body


def encode_base58check(data: bytes) -> str:
    """
    Base58 of data || first 4 bytes of HASH256(data)
    """
    return encode_base58(data + hash256(data)[:CHECKSUM_BYTES])


def decode_base58check(data: str) -> bytes:
    """
    Decode base58check and verify the checksum. Returns the payload without checksum.
    """
    decoded = decode_base58(data)
    if len(decoded) < CHECKSUM_BYTES:
        raise DataEncodingError("Base58check data too short")
    payload, checksum = decoded[:-CHECKSUM_BYTES], decoded[-CHECKSUM_BYTES:]
    if hash256(payload)[:CHECKSUM_BYTES] != checksum:
        raise DataEncodingError("Decoded checksum does not equal given checksum")
    return payload


# --- DER SIGNATURES --- #

def encode_der_signature(r: int, s: int) -> bytes:
    """
    Encodes ECDSA integers r and s into a DER-encoded signature.
    """
    return encode_dss_signature(r, s)


def decode_der_signature(der_sig: bytes) -> tuple[int, int]:
    """
    Decodes a DER-encoded ECDSA signature back into integers r and s.
    """
    try:
        return decode_dss_signature(der_sig)
    except ValueError as e:
        raise DataEncodingError("Malformed DER signature") from e
