"""
Tests for mnemonic generation, validation and seeds
"""
import pytest
from mnemonic import Mnemonic as WordList

from bitkey.core import WALLET, UnsupportedLanguage, InvalidArgument
from bitkey.wallet import Mnemonic, supported_languages

from tests.utility import TREZOR_PHRASE

TREZOR_SEED = ("c55257c360c07c72029aebc1b53c05ed0362ada38ead3e3e9efa3708e53495531f09a6987599d18264c1e1c92f2cf141630c7a3c4ab"
               "7c81b2f001698e7463b04")


@pytest.mark.parametrize("language", supported_languages())
def test_generated_phrase_is_valid(language):
    mnemonic = Mnemonic.generate(language)
    assert WordList(WALLET.LANGUAGES[language]).check(mnemonic.phrase), \
        f"Generated {language} phrase fails the word list check"
    assert len(mnemonic.words) == 12, "Default entropy should give 12 words"


def test_generate_24_words():
    mnemonic = Mnemonic.generate(entropy_bytelen=32)
    assert len(mnemonic.words) == 24, "32 bytes of entropy should give 24 words"
    assert mnemonic.is_valid(), "Generated phrase is not valid"


def test_unsupported_language():
    with pytest.raises(UnsupportedLanguage):
        Mnemonic.generate("klingon")


def test_bad_entropy_length():
    with pytest.raises(InvalidArgument):
        Mnemonic.generate(entropy_bytelen=15)


def test_known_seed():
    mnemonic = Mnemonic.from_phrase(TREZOR_PHRASE)
    assert mnemonic.language == "en", "English phrase not detected"
    assert mnemonic.to_seed("TREZOR").hex() == TREZOR_SEED, "Seed does not match BIP39 reference vector"


def test_from_word_list():
    mnemonic = Mnemonic.from_phrase(TREZOR_PHRASE.split(), language="en")
    assert mnemonic.phrase == TREZOR_PHRASE, "Word list input should join to the phrase"


def test_invalid_phrase():
    bad_checksum = " ".join(["abandon"] * 12)
    with pytest.raises(InvalidArgument):
        Mnemonic.from_phrase(bad_checksum, language="en")
    with pytest.raises(InvalidArgument):
        Mnemonic.from_phrase("")
    with pytest.raises(InvalidArgument):
        Mnemonic.from_phrase([])
