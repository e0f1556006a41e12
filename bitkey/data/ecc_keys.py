"""
Public key serialization and private key helpers
"""
import json
import secrets

from bitkey.core import ECC, ECCPrivateKeyError, PubKeyError
from bitkey.cryptography import SECP256K1, Point, hash160

__all__ = ["PubKey", "validate_private_key", "random_private_key"]


def validate_private_key(private_key: int | bytes) -> int:
    """
    Returns the private key as an integer, raising if it is not in [1, n-1]
    """
    private_key = int.from_bytes(private_key, "big") if isinstance(private_key, bytes) else private_key
    if not (1 <= private_key < SECP256K1.order):
        raise ECCPrivateKeyError("Private key out of bounds")
    return private_key


def random_private_key() -> int:
    while True:
        candidate = secrets.randbelow(SECP256K1.order)
        if candidate != 0:
            return candidate


class PubKey:
    """
    Used for serializing a public key in BitKey
    """
    __slots__ = ("x", "y")

    def __init__(self, private_key: int | bytes):
        private_key = validate_private_key(private_key)
        self.x, self.y = SECP256K1.multiply_generator(private_key)

    # --- OVERRIDES --- #
    def __eq__(self, other) -> bool:
        if not isinstance(other, PubKey):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))

    # --- CLASS METHODS --- #
    @classmethod
    def from_point(cls, point: Point):
        if not point or not SECP256K1.is_point_on_curve(point):
            raise PubKeyError("Given point not on SECP256K1 curve")

        obj = object.__new__(cls)
        obj.x, obj.y = point
        return obj

    @classmethod
    def from_compressed(cls, compressed_pubkey: bytes):
        if len(compressed_pubkey) != 33:
            raise PubKeyError("Compressed pubkey must be 33 bytes")
        prefix = compressed_pubkey[0]
        if prefix not in (0x02, 0x03):
            raise PubKeyError("Invalid prefix for compressed pubkey")
        x = int.from_bytes(compressed_pubkey[1:], "big")
        if not (0 < x < SECP256K1.p):
            raise PubKeyError("x out of range")
        if not SECP256K1.is_x_on_curve(x):
            raise PubKeyError("Given x coordinate not on curve")

        y = SECP256K1.find_y_from_x(x)
        if (y & 1) != (prefix & 1):
            y = SECP256K1.p - y

        obj = object.__new__(cls)
        obj.x, obj.y = x, y
        return obj

    @classmethod
    def from_hex(cls, pubkey_hex: str):
        try:
            return cls.from_compressed(bytes.fromhex(pubkey_hex))
        except ValueError as e:
            raise PubKeyError(f"Invalid pubkey hex: {pubkey_hex}") from e

    # --- FORMATTING --- #

    def compressed(self) -> bytes:
        y_byte = b'\x02' if self.y % 2 == 0 else b'\x03'
        return y_byte + self.x.to_bytes(ECC.COORD_BYTES, "big")

    def uncompressed(self) -> bytes:
        return b'\x04' + self.x.to_bytes(ECC.COORD_BYTES, "big") + self.y.to_bytes(ECC.COORD_BYTES, "big")

    def to_point(self) -> Point:
        return Point(self.x, self.y)

    def pubkey_hash(self) -> bytes:
        return hash160(self.compressed())

    def hex(self) -> str:
        return self.compressed().hex()

    # --- DISPLAY --- #
    def to_dict(self):
        return {
            "x": self.x,
            "y": self.y,
            "compressed": self.compressed().hex(),
            "pubkey_hash": self.pubkey_hash().hex()
        }

    def to_json(self):
        return json.dumps(self.to_dict(), indent=2)
