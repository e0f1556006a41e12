"""
The custom exceptions used throughout BitKey
"""
__all__ = ["ReadError", "StreamError", "WriteError", "ECDSAError", "ECCPrivateKeyError", "PubKeyError",
           "ExtendedKeyError", "DataEncodingError", "StorageError", "WalletError", "UnsupportedLanguage",
           "InvalidArgument", "UnknownCoin", "BadKeyVersion", "InvalidState", "EncryptedPrivateKey",
           "PasswordRequired", "DecryptionFailed", "AlreadyEncrypted", "NotEncrypted", "NoSecretPresent",
           "EncryptionFailed"]


class DataEncodingError(Exception):
    """
    For use in encoding/decoding algorithms
    """
    pass


class StreamError(Exception):
    """
    Catchall for stream errors
    """
    pass


class ReadError(StreamError):
    """
    For when trying to read data of length n from the stream and receiving data of length < n
    """
    pass


class WriteError(StreamError):
    """
    For when writing data that would be otherwise out of bounds
    """
    pass


class ECCPrivateKeyError(Exception):
    """
    For if the private key is out of bounds
    """
    pass


class ECDSAError(Exception):
    """
    Raised during ECDSA operations for out of bounds values
    """
    pass


class PubKeyError(Exception):
    """
    Used for Pubkey errors
    """
    pass


class ExtendedKeyError(Exception):
    """Custom exception for extended key operations"""
    pass


class StorageError(Exception):
    """
    Raised by the wallet store for malformed records
    """
    pass


# --- WALLET ERRORS --- #

class WalletError(Exception):
    """
    Parent class for Wallet errors
    """
    pass


class UnsupportedLanguage(WalletError):
    """
    The requested mnemonic language has no word list
    """
    pass


class InvalidArgument(WalletError):
    """
    Malformed path, words, extended key or options
    """
    pass


class UnknownCoin(InvalidArgument):
    """
    Coin not in the derivation table
    """
    pass


class BadKeyVersion(WalletError):
    """
    Serialized key has a schema version other than the current one
    """
    pass


class InvalidState(WalletError):
    """
    A required secret field is missing, or both variants are present
    """
    pass


class EncryptedPrivateKey(WalletError):
    """
    Signing attempted on an encrypted key without a password
    """
    pass


class PasswordRequired(WalletError):
    """
    Private keys are encrypted, a password is needed
    """
    pass


class DecryptionFailed(WalletError):
    """
    Wrong password or corrupt ciphertext
    """
    pass


class AlreadyEncrypted(WalletError):
    pass


class NotEncrypted(WalletError):
    pass


class NoSecretPresent(WalletError):
    pass


class EncryptionFailed(WalletError):
    pass
