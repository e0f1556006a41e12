"""
The BitKey standard formats and constants
"""
from typing import Final

__all__ = ["ECC", "WALLET", "XKEYS", "KEY", "CIPHER", "TX"]


class ECC:
    COORD_BYTES: Final[int] = 32
    PRIVKEY_HEX_CHARS: Final[int] = 64


class WALLET:
    """
    We provide a Mnemonic dictionary which is BIP39 compliant. This forces the Mnemonic to be of a certain size
    depending on the entropy byte length chosen
    """
    MNEMONIC: Final[dict] = {
        16: {"bit_length": 128, "word_count": 12, "checksum_bits": 4},
        20: {"bit_length": 160, "word_count": 15, "checksum_bits": 5},
        24: {"bit_length": 192, "word_count": 18, "checksum_bits": 6},
        28: {"bit_length": 224, "word_count": 21, "checksum_bits": 7},
        32: {"bit_length": 256, "word_count": 24, "checksum_bits": 8},
    }
    DEFAULT_ENTROPY_BYTES: Final[int] = 16
    DEFAULT_LANGUAGE: Final[str] = "en"

    # Short language codes -> python-mnemonic word list names
    LANGUAGES: Final[dict] = {
        "en": "english",
        "es": "spanish",
        "ja": "japanese",
        "zh": "chinese_simplified",
        "fr": "french",
        "it": "italian",
    }


class XKEYS:
    """
    Constants related to the extended public and private keys
    """
    SEED_KEY = b'Bitcoin seed'
    CHAIN_LENGTH = 32
    MAX_DEPTH = 255
    SERIAL_LENGTH = 78
    CHECKSUM_LENGTH = 4

    # Version bytes for different key types
    MAINNET_PRIVATE = bytes.fromhex("0488ade4")
    MAINNET_PUBLIC = bytes.fromhex("0488b21e")
    TESTNET_PRIVATE = bytes.fromhex("04358394")
    TESTNET_PUBLIC = bytes.fromhex("043587cf")

    # Hardened derivation threshold
    HARDENED_OFFSET = 0x80000000
    MAX_INDEX = 0xffffffff


class KEY:
    """
    Master key schema and the derivation contract with previously created wallets
    """
    VERSION: Final[int] = 1

    LIVENET: Final[str] = "livenet"
    TESTNET: Final[str] = "testnet"
    NETWORKS: Final[tuple] = ("livenet", "testnet")

    BTC: Final[str] = "btc"
    BCH: Final[str] = "bch"
    ETH: Final[str] = "eth"
    COINS: Final[tuple] = ("btc", "bch", "eth")

    # BIP44 coin types
    COIN_TYPES: Final[dict] = {"btc": "0", "bch": "145", "eth": "60"}
    TESTNET_COIN_TYPE: Final[str] = "1"
    LEGACY_BCH_COIN_TYPE: Final[str] = "0"

    SINGLE_SIG_PURPOSE: Final[str] = "44"
    MULTISIG_PURPOSE: Final[str] = "48"

    PATHS: Final[dict] = {
        "REQUEST_KEY": "m/1'/0",
        "REQUEST_KEY_AUTH": "m/2",
    }

    P2PKH: Final[str] = "P2PKH"
    P2SH: Final[str] = "P2SH"
    P2WPKH: Final[str] = "P2WPKH"
    P2WSH: Final[str] = "P2WSH"
    SCRIPT_TYPES: Final[tuple] = ("P2PKH", "P2SH", "P2WPKH", "P2WSH")


class CIPHER:
    """
    Password encryption envelope defaults. These match SJCL so envelopes written by older clients decrypt.
    """
    VERSION: Final[int] = 1
    ITERATIONS: Final[int] = 10000
    KEY_SIZE: Final[int] = 128  # bits
    TAG_SIZE: Final[int] = 64  # bits
    MODE: Final[str] = "ccm"
    CIPHER: Final[str] = "aes"
    SALT_BYTES: Final[int] = 8
    IV_BYTES: Final[int] = 16
    KEY_SIZES: Final[tuple] = (128, 192, 256)
    TAG_SIZES: Final[tuple] = (64, 96, 128)


class TX:
    """
    Transaction byte sizes and sighash values
    """
    TXID: Final[int] = 32
    VOUT: Final[int] = 4
    SEQUENCE: Final[int] = 4
    AMOUNT: Final[int] = 8
    VERSION: Final[int] = 4
    LOCKTIME: Final[int] = 4
    DEFAULT_VERSION: Final[int] = 1
    DEFAULT_SEQUENCE: Final[int] = 0xffffffff
    SIGHASH_ALL: Final[int] = 0x01
    SIGHASH_FORKID: Final[int] = 0x40
    MAX_COMPACTSIZE: Final[int] = 0xffffffffffffffff
