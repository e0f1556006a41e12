"""
Extended Keys (xpub/xprv) Implementation for BitKey
Implements BIP32 Hierarchical Deterministic key derivation, including the non-compliant hardened derivation used by
wallets created before the padding fix.
"""
import json
from io import BytesIO

from bitkey.core import ExtendedKeyError, DataEncodingError, ReadError, XKEYS, ECC, get_stream, read_stream, \
    read_int
from bitkey.cryptography import SECP256K1, hash160, hmac_sha512, hash256
from bitkey.data import encode_base58check, decode_base58check, PubKey

__all__ = ["ExtendedKey", "parse_path"]

MAINNET_PRV = XKEYS.MAINNET_PRIVATE
MAINNET_PUB = XKEYS.MAINNET_PUBLIC
TESTNET_PRV = XKEYS.TESTNET_PRIVATE
TESTNET_PUB = XKEYS.TESTNET_PUBLIC
HARDENED_INDEX = XKEYS.HARDENED_OFFSET
SEED_KEY = XKEYS.SEED_KEY

PRIVATE_VERSIONS = (MAINNET_PRV, TESTNET_PRV)
PUBLIC_VERSIONS = (MAINNET_PUB, TESTNET_PUB)
PUBLIC_FOR = {MAINNET_PRV: MAINNET_PUB, TESTNET_PRV: TESTNET_PUB}


def parse_path(path: str) -> list[int]:
    """
    Parse "m/44'/0'/0'" (or "m/0/3") into child indices. A trailing ' or h marks a hardened index.
    """
    parts = path.strip().split("/")
    if parts[0] not in ("m", "M"):
        raise ExtendedKeyError(f"Derivation path must start with 'm': {path}")

    indices = []
    for part in parts[1:]:
        hardened = part.endswith(("'", "h", "H"))
        digits = part[:-1] if hardened else part
        if not digits.isdigit():
            raise ExtendedKeyError(f"Invalid path component {part!r} in {path}")
        index = int(digits)
        if index >= HARDENED_INDEX:
            raise ExtendedKeyError(f"Path index out of range: {part}")
        indices.append(index + HARDENED_INDEX if hardened else index)
    return indices


class ExtendedKey:
    """
    Base class for extended keys (xpub/xprv)
    Implements BIP32 hierarchical deterministic key derivation
    """
    __slots__ = ('version', 'depth', 'parent_fingerprint', 'child_number', 'chain_code', 'key_data')

    def __init__(self,
                 key_data: bytes,
                 chain_code: bytes,
                 depth: int,
                 parent_fingerprint: bytes,
                 child_number: int,
                 version: bytes,
                 ):
        """
        Args:
            key_data: Key data (32 bytes for private, 33 bytes for public)
            chain_code: Chain code for key derivation (32 bytes)
            depth: Depth in the derivation path
            parent_fingerprint: Fingerprint of parent key (4 bytes)
            child_number: Child key index
            version: Version bytes (determines key type and network)
        """
        # --- Validation --- #
        if len(parent_fingerprint) != 4:
            raise ExtendedKeyError("Parent fingerprint must be 4 bytes")
        if len(chain_code) != XKEYS.CHAIN_LENGTH:
            raise ExtendedKeyError("Chain code must be 32 bytes")
        if len(key_data) not in (32, 33):
            raise ExtendedKeyError("Key data must be 32 bytes (private) or 33 bytes (public)")
        if not (0 <= depth <= XKEYS.MAX_DEPTH):
            raise ExtendedKeyError(f"Depth out of range: {depth}")
        if version not in PRIVATE_VERSIONS + PUBLIC_VERSIONS:
            raise ExtendedKeyError(f"Unknown version bytes: {version.hex()}")
        if (len(key_data) == 32) != (version in PRIVATE_VERSIONS):
            raise ExtendedKeyError("Version bytes do not match key type")
        if len(key_data) == 32 and not (0 < int.from_bytes(key_data, "big") < SECP256K1.order):
            raise ExtendedKeyError("Private key out of range")

        self.version = version
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.child_number = child_number
        self.chain_code = chain_code
        self.key_data = key_data

    # --- OVERRIDES --- #

    def __eq__(self, other) -> bool:
        """
        Two ExtendedKey objects are equal if and only if their serialized bytes are equal
        """
        if not isinstance(other, ExtendedKey):
            return False
        return self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __repr__(self):
        kind = "xprv" if self.is_private else "xpub"
        return f"ExtendedKey({kind}, depth={self.depth}, child={self.child_number})"

    # --- CLASS METHODS --- #

    @classmethod
    def from_master_seed(cls, seed: bytes, version: bytes = MAINNET_PRV):
        # 1. Run the HMAC-512
        seed_hash = hmac_sha512(key=SEED_KEY, message=seed)

        # 2. Get private_key in bytes and chain code
        privkey, chain_code = seed_hash[:32], seed_hash[32:]

        # 3. Use 0 values for remaining params
        return cls(privkey, chain_code, depth=0, parent_fingerprint=b'\x00' * 4, child_number=0, version=version)

    @classmethod
    def from_address(cls, address: str):
        """
        Given a base58check string (xprv..., tpub...), we decode and return the from_serial method
        """
        try:
            payload = decode_base58check(address)
        except DataEncodingError as e:
            raise ExtendedKeyError(f"Malformed extended key: {e}") from e
        if len(payload) != XKEYS.SERIAL_LENGTH:
            raise ExtendedKeyError(f"Extended key payload must be {XKEYS.SERIAL_LENGTH} bytes")
        return cls.from_serial(payload + hash256(payload)[:XKEYS.CHECKSUM_LENGTH])

    @classmethod
    def from_serial(cls, byte_stream: bytes | BytesIO):
        """
        We read in the serialized extended key and verify the checksum
        """
        stream = get_stream(byte_stream)

        try:
            version = read_stream(stream, 4, "version")
            depth = read_int(stream, 1, "depth")
            parent_fingerprint = read_stream(stream, 4, "parent_fingerprint")
            child_number = read_int(stream, 4, "index")
            chain_code = read_stream(stream, XKEYS.CHAIN_LENGTH, "chain_code")
            key_data = read_stream(stream, 33, "key_data")
            checksum = read_stream(stream, XKEYS.CHECKSUM_LENGTH, "checksum")
        except ReadError as e:
            raise ExtendedKeyError(str(e)) from e

        # Verify checksum
        preimage = (version + depth.to_bytes(1, "big") + parent_fingerprint + child_number.to_bytes(4, "big") +
                    chain_code + key_data)
        if hash256(preimage)[:XKEYS.CHECKSUM_LENGTH] != checksum:
            raise ExtendedKeyError("Decoding error. Checksum doesn't match serial value")

        if version in PRIVATE_VERSIONS:
            if key_data[0] != 0:
                raise ExtendedKeyError("Private key data must be prefixed with a zero byte")
            key_data = key_data[1:]
        elif key_data[0] not in (0x02, 0x03):
            raise ExtendedKeyError("Invalid public key prefix")

        return cls(key_data, chain_code, depth, parent_fingerprint, child_number, version)

    # --- PROPERTIES --- #
    @property
    def is_private(self):
        return len(self.key_data) == 32

    @property
    def is_public(self):
        return len(self.key_data) == 33

    @property
    def is_mainnet(self):
        return self.version in (MAINNET_PRV, MAINNET_PUB)

    @property
    def is_testnet(self):
        return self.version in (TESTNET_PRV, TESTNET_PUB)

    @property
    def private_key_int(self) -> int:
        if not self.is_private:
            raise ExtendedKeyError("Public extended key has no private key")
        return int.from_bytes(self.key_data, "big")

    # --- METHODS --- #

    def to_bytes(self):
        """
        returns the serialized version of the key
        version || depth || parent fingerprint || index || chain code || key data || checksum
        """
        key_data = b'\x00' + self.key_data if self.is_private else self.key_data
        preimage = b''.join([
            self.version,
            self.depth.to_bytes(1, "big"),
            self.parent_fingerprint,
            self.child_number.to_bytes(4, "big"),
            self.chain_code,
            key_data
        ])
        return preimage + hash256(preimage)[:XKEYS.CHECKSUM_LENGTH]

    def address(self) -> str:
        return encode_base58check(self.to_bytes()[:-XKEYS.CHECKSUM_LENGTH])

    def pubkey(self) -> PubKey:
        if self.is_private:
            return PubKey(self.private_key_int)
        return PubKey.from_compressed(self.key_data)

    def fingerprint(self) -> bytes:
        """
        First 4 bytes of HASH160 of the compressed public key
        """
        return hash160(self.pubkey().compressed())[:4]

    def derive_child(self, index: int, compliant: bool = True):
        """
        Derive a child at the given index.

        Non-compliant derivation serializes the parent private key without left zero padding for hardened children,
        so it only produces a different child when the private key starts with a zero byte.
        """
        if not (0 <= index <= XKEYS.MAX_INDEX):
            raise ExtendedKeyError(f"Child index out of range: {index}")
        if self.depth >= XKEYS.MAX_DEPTH:
            raise ExtendedKeyError("Maximum derivation depth reached")

        index_bytes = index.to_bytes(4, "big")

        if index >= HARDENED_INDEX:
            if self.is_public:
                raise ExtendedKeyError("Cannot derive hardened child from public key")
            if compliant:
                privkey = self.key_data
            else:
                priv_int = self.private_key_int
                privkey = priv_int.to_bytes((priv_int.bit_length() + 7) // 8, "big")
            data = b'\x00' + privkey + index_bytes
        else:
            data = self.pubkey().compressed() + index_bytes

        # --- HMAC SHA512 --- #
        key_hash = hmac_sha512(key=self.chain_code, message=data)
        tweak_int = int.from_bytes(key_hash[:32], "big")
        child_chain_code = key_hash[32:]

        # Invalid tweak: BIP32 moves on to the next index
        if tweak_int >= SECP256K1.order:
            return self.derive_child(index + 1, compliant)

        if self.is_private:
            child_priv_key = (self.private_key_int + tweak_int) % SECP256K1.order
            if child_priv_key == 0:
                return self.derive_child(index + 1, compliant)
            child_key_data = child_priv_key.to_bytes(ECC.COORD_BYTES, "big")
        else:
            child_pt = SECP256K1.add_points(self.pubkey().to_point(), SECP256K1.multiply_generator(tweak_int))
            if not child_pt:
                return self.derive_child(index + 1, compliant)
            child_key_data = PubKey.from_point(child_pt).compressed()

        return ExtendedKey(
            version=self.version,
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint(),
            child_number=index,
            chain_code=child_chain_code,
            key_data=child_key_data
        )

    def derive_path(self, path: str, compliant: bool = True) -> "ExtendedKey":
        key = self
        for index in parse_path(path):
            key = key.derive_child(index, compliant)
        return key

    def get_pubkey(self) -> "ExtendedKey":
        """
        Return the corresponding public ExtendedKey
        """
        if self.is_public:
            return self

        return ExtendedKey(
            key_data=self.pubkey().compressed(),
            depth=self.depth,
            parent_fingerprint=self.parent_fingerprint,
            child_number=self.child_number,
            chain_code=self.chain_code,
            version=PUBLIC_FOR[self.version]
        )

    def with_version(self, version: bytes) -> "ExtendedKey":
        """
        Rebuild this private key under another network tag. The private key is serialized as 64 hex characters,
        left padded with zeros, before the key is reconstructed.
        """
        if not self.is_private:
            raise ExtendedKeyError("Only private extended keys can be re-tagged")
        privkey_hex = format(self.private_key_int, "x").rjust(ECC.PRIVKEY_HEX_CHARS, "0")
        return ExtendedKey(
            key_data=bytes.fromhex(privkey_hex),
            chain_code=self.chain_code,
            depth=self.depth,
            parent_fingerprint=self.parent_fingerprint,
            child_number=self.child_number,
            version=version
        )

    def to_testnet(self) -> "ExtendedKey":
        return self.with_version(TESTNET_PRV)

    # --- DISPLAY --- #
    def to_dict(self):
        first_key = "prvkey" if self.is_private else "pubkey"
        return {
            first_key: self.key_data.hex(),
            "chain_code": self.chain_code.hex(),
            "depth": self.depth,
            "parent_fingerprint": self.parent_fingerprint.hex(),
            "child_number": self.child_number,
            "version": self.version.hex(),
            "address": self.address()
        }

    def to_json(self):
        return json.dumps(self.to_dict(), indent=2)
