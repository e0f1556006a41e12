"""
Fixtures used in the tests
"""
import pytest

from bitkey.database import WalletStore
from bitkey.wallet import Key, KeyOptions

from tests.utility import TREZOR_PHRASE, ROOT_PATH

PASSWORD = "correct horse"


@pytest.fixture()
def trezor_key() -> Key:
    return Key.from_mnemonic(TREZOR_PHRASE, language="en")


@pytest.fixture()
def legacy_key() -> Key:
    options = KeyOptions(use_legacy_coin_type=True, use_legacy_purpose=True)
    return Key.from_mnemonic(TREZOR_PHRASE, options=options, language="en")


@pytest.fixture()
def encrypted_key() -> Key:
    key = Key.from_mnemonic(TREZOR_PHRASE, language="en")
    key.encrypt(PASSWORD)
    return key


@pytest.fixture()
def password() -> str:
    return PASSWORD


@pytest.fixture()
def root_path() -> str:
    return ROOT_PATH


@pytest.fixture()
def wallet_store(tmp_path):
    store = WalletStore(tmp_path / "db_files" / "test_wallets.db")
    yield store
    store.close()
