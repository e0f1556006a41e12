"""
The Mnemonic class - a BIP39 phrase in one of the supported word lists, used for seed retrieval.

Word lists, checksums and seed stretching come from python-mnemonic.
"""
import os

from mnemonic import Mnemonic as _WordList
from mnemonic.mnemonic import ConfigurationError

from bitkey.core import WALLET, UnsupportedLanguage, InvalidArgument, get_logger

__all__ = ["Mnemonic", "supported_languages"]

logger = get_logger(__name__)

DEFAULT_ENTROPY_BYTELEN = WALLET.DEFAULT_ENTROPY_BYTES  # 16 bytes | 12 words
ALLOWED_ENTROPY_BYTELEN = WALLET.MNEMONIC.keys()

_wordlists: dict[str, _WordList] = {}


def supported_languages() -> list[str]:
    return list(WALLET.LANGUAGES)


def _get_wordlist(language: str) -> _WordList:
    if language not in WALLET.LANGUAGES:
        raise UnsupportedLanguage(f"Unsupported language: {language}")
    if language not in _wordlists:
        _wordlists[language] = _WordList(WALLET.LANGUAGES[language])
    return _wordlists[language]


class Mnemonic:
    __slots__ = ("phrase", "language")

    def __init__(self, phrase: str, language: str = WALLET.DEFAULT_LANGUAGE):
        """
        Wraps an existing phrase. Use `generate` for a fresh one and `from_phrase` to validate user input.
        """
        self.phrase = phrase
        self.language = language

    def __repr__(self):
        return f"Mnemonic(language={self.language!r}, words={len(self.words)})"

    @property
    def words(self) -> list[str]:
        return self.phrase.split()

    @classmethod
    def generate(cls, language: str = WALLET.DEFAULT_LANGUAGE, entropy_bytelen: int = DEFAULT_ENTROPY_BYTELEN):
        """
        Generate phrases from fresh entropy until one passes the word list's own check
        """
        if entropy_bytelen not in ALLOWED_ENTROPY_BYTELEN:
            raise InvalidArgument(
                f"Entropy byte length {entropy_bytelen} not BIP39 compliant. Must be one of "
                f"{list(ALLOWED_ENTROPY_BYTELEN)}")

        wordlist = _get_wordlist(language)
        attempts = 0
        while True:
            attempts += 1
            phrase = wordlist.to_mnemonic(os.urandom(entropy_bytelen))
            if wordlist.check(phrase):
                break
        logger.debug(f"Generated {language} mnemonic after {attempts} attempt(s)")
        return cls(phrase, language)

    @classmethod
    def from_phrase(cls, words: str | list[str], language: str | None = None):
        """
        Validate a user supplied phrase. When no language is given it is detected from the words.
        """
        phrase = " ".join(words) if isinstance(words, (list, tuple)) else (words or "")
        phrase = " ".join(phrase.split())
        if not phrase:
            raise InvalidArgument("Mnemonic words are required")

        if language is None:
            language = cls.detect_language(phrase)

        if not _get_wordlist(language).check(phrase):
            raise InvalidArgument("Mnemonic phrase doesn't pass checksum validation")
        return cls(phrase, language)

    @staticmethod
    def detect_language(phrase: str) -> str:
        try:
            name = _WordList.detect_language(phrase)
        except ConfigurationError as e:
            raise InvalidArgument(f"Could not detect mnemonic language: {e}") from e

        for code, wordlist_name in WALLET.LANGUAGES.items():
            if wordlist_name == name:
                return code
        raise InvalidArgument(f"Mnemonic words belong to an unsupported language: {name}")

    def is_valid(self) -> bool:
        return _get_wordlist(self.language).check(self.phrase)

    def to_seed(self, passphrase: str | None = None) -> bytes:
        """
        BIP39 seed: PBKDF2-HMAC-SHA512(NFKD(phrase), "mnemonic" + NFKD(passphrase), 2048)
        """
        return _WordList.to_seed(self.phrase, passphrase or "")
