"""
Password based encryption of the master secret

Envelopes are JSON objects in the SJCL layout so that keys encrypted by older wallet clients still decrypt:

    {"iv": b64, "v": 1, "iter": int, "ks": int, "ts": int, "mode": "ccm", "adata": "", "cipher": "aes",
     "salt": b64, "ct": b64(ciphertext || tag)}

The AES key is the first `ks` bits of PBKDF2-HMAC-SHA256(password, salt, iter). AES-CCM uses the first 15 - L bytes
of the IV as nonce, where L is the smallest length field (>= 2) able to hold the message length.
"""
import base64
import binascii
import json
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESCCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from bitkey.core import CIPHER, DecryptionFailed, EncryptionFailed, InvalidArgument

__all__ = ["CipherOptions", "encrypt", "decrypt"]

PBKDF2_LENGTH = 32


@dataclass(frozen=True)
class CipherOptions:
    """
    {iter: PBKDF2 iteration count}
    {ks: AES key size in bits}
    {ts: CCM tag size in bits}
    """
    iter: int = CIPHER.ITERATIONS
    ks: int = CIPHER.KEY_SIZE
    ts: int = CIPHER.TAG_SIZE

    def __post_init__(self):
        if not isinstance(self.iter, int) or self.iter < 1:
            raise InvalidArgument(f"Invalid iteration count: {self.iter}")
        if self.ks not in CIPHER.KEY_SIZES:
            raise InvalidArgument(f"Invalid key size: {self.ks}")
        if self.ts not in CIPHER.TAG_SIZES:
            raise InvalidArgument(f"Invalid tag size: {self.ts}")

    @classmethod
    def from_obj(cls, obj: dict | None):
        obj = obj or {}
        return cls(
            iter=obj.get("iter", CIPHER.ITERATIONS),
            ks=obj.get("ks", CIPHER.KEY_SIZE),
            ts=obj.get("ts", CIPHER.TAG_SIZE),
        )


# --- INTERNAL --- #

def _derive_key(password: str, salt: bytes, iterations: int, key_size: int) -> bytes:
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=PBKDF2_LENGTH, salt=salt, iterations=iterations)
    return kdf.derive(password.encode("utf-8"))[:key_size // 8]


def _ccm_nonce(iv: bytes, message_length: int) -> bytes:
    length_field = 2
    while length_field < 4 and message_length >> (8 * length_field):
        length_field += 1
    length_field = max(length_field, 15 - len(iv))
    return iv[:15 - length_field]


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


# --- API --- #

def encrypt(password: str, plaintext: str, options: CipherOptions | None = None) -> str:
    """
    Encrypt plaintext under password and return the JSON envelope
    """
    if not isinstance(password, str) or not password:
        raise InvalidArgument("A non-empty password string is required for encryption")

    options = options or CipherOptions()
    salt = os.urandom(CIPHER.SALT_BYTES)
    iv = os.urandom(CIPHER.IV_BYTES)
    data = plaintext.encode("utf-8")

    key = _derive_key(password, salt, options.iter, options.ks)
    ct = AESCCM(key, tag_length=options.ts // 8).encrypt(_ccm_nonce(iv, len(data)), data, None)
    if not ct:
        raise EncryptionFailed("Could not encrypt")

    envelope = {
        "iv": _b64(iv),
        "v": CIPHER.VERSION,
        "iter": options.iter,
        "ks": options.ks,
        "ts": options.ts,
        "mode": CIPHER.MODE,
        "adata": "",
        "cipher": CIPHER.CIPHER,
        "salt": _b64(salt),
        "ct": _b64(ct),
    }
    return json.dumps(envelope, separators=(",", ":"))


def decrypt(password: str, envelope: str) -> str:
    """
    Decrypt a JSON envelope. Any failure (wrong password, tampered or malformed envelope) raises DecryptionFailed.
    """
    if not isinstance(password, str):
        raise DecryptionFailed("Could not decrypt")

    try:
        obj = json.loads(envelope)
        if obj.get("mode", CIPHER.MODE) != CIPHER.MODE or obj.get("cipher", CIPHER.CIPHER) != CIPHER.CIPHER:
            raise DecryptionFailed(f"Unsupported cipher mode: {obj.get('cipher')}-{obj.get('mode')}")
        if obj.get("adata"):
            raise DecryptionFailed("Envelopes with associated data are not supported")

        options = CipherOptions.from_obj(obj)
        iv = base64.b64decode(obj["iv"])
        salt = base64.b64decode(obj["salt"])
        ct = base64.b64decode(obj["ct"])

        key = _derive_key(password, salt, options.iter, options.ks)
        tag_bytes = options.ts // 8
        nonce = _ccm_nonce(iv, len(ct) - tag_bytes)
        data = AESCCM(key, tag_length=tag_bytes).decrypt(nonce, ct, None)
    except (InvalidTag, InvalidArgument, AttributeError, KeyError, TypeError, ValueError, binascii.Error) as e:
        raise DecryptionFailed("Could not decrypt") from e

    return data.decode("utf-8")
