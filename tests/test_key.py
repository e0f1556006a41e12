"""
Tests for master key creation, the encrypted/plaintext state machine and serialization
"""
import json

import pytest

from bitkey.core import KEY, UnsupportedLanguage, InvalidArgument, InvalidState, BadKeyVersion, PasswordRequired, \
    DecryptionFailed, AlreadyEncrypted, NotEncrypted
from bitkey.wallet import Key, KeyOptions, Mnemonic, ExtendedKey, PlaintextSecret, EncryptedSecret, \
    supported_languages

from tests.utility import TREZOR_PHRASE


# --- SEED SOURCE --- #

@pytest.mark.parametrize("language", supported_languages())
def test_create(language):
    key = Key.create(language)
    revealed = key.get()

    assert Mnemonic(revealed.mnemonic, language).is_valid(), f"Created {language} mnemonic fails the check"
    assert revealed.xprv.startswith("xprv"), "Master key should always carry the mainnet tag"
    assert key.fingerprint == ExtendedKey.from_address(revealed.xprv).fingerprint().hex(), "Fingerprint mismatch"
    assert key.mnemonic_has_passphrase is False, "No passphrase was given"
    assert key.compliant_derivation, "Derivation should be compliant by default"


def test_create_unsupported_language():
    with pytest.raises(UnsupportedLanguage):
        Key.create("xx")


def test_from_mnemonic(trezor_key):
    seed = Mnemonic(TREZOR_PHRASE).to_seed()
    expected = ExtendedKey.from_master_seed(seed)

    revealed = trezor_key.get()
    assert revealed.xprv == expected.address(), "Master xprv does not match the seed derivation"
    assert revealed.mnemonic == TREZOR_PHRASE, "Mnemonic not stored"
    assert trezor_key.fingerprint == expected.fingerprint().hex(), "Fingerprint mismatch"


def test_from_mnemonic_flags():
    options = KeyOptions(passphrase="TREZOR", use_legacy_coin_type=True, use_legacy_purpose=True,
                         non_compliant_derivation=True)
    key = Key.from_mnemonic(TREZOR_PHRASE, options=options)
    plain = Key.from_mnemonic(TREZOR_PHRASE)

    assert key.mnemonic_has_passphrase is True, "Passphrase flag not set"
    assert key.get().xprv != plain.get().xprv, "Passphrase should change the master key"
    assert key.use0_for_bch and key.use44_for_multisig, "Legacy flags not set"
    assert key.compliant_derivation is False, "non_compliant_derivation should clear compliant_derivation"


def test_from_mnemonic_invalid():
    with pytest.raises(InvalidArgument):
        Key.from_mnemonic("")
    with pytest.raises(InvalidArgument):
        Key.from_mnemonic(" ".join(["abandon"] * 12), language="en")


def test_from_extended_private_key(trezor_key):
    xprv = trezor_key.get().xprv
    imported = Key.from_extended_private_key(xprv, KeyOptions(use_legacy_coin_type=True))

    revealed = imported.get()
    assert revealed.xprv == xprv, "Imported xprv changed"
    assert revealed.mnemonic is None, "Import from xprv has no mnemonic"
    assert imported.mnemonic_has_passphrase is None, "Passphrase provenance is unknown for xprv imports"
    assert imported.use0_for_bch, "Legacy coin type flag not set"
    assert imported.fingerprint == trezor_key.fingerprint, "Fingerprint mismatch"


def test_from_extended_private_key_invalid(trezor_key):
    xpub = ExtendedKey.from_address(trezor_key.get().xprv).get_pubkey().address()
    for bad in ("", "xprvnotakey", xpub):
        with pytest.raises(InvalidArgument):
            Key.from_extended_private_key(bad)


# --- SECRET VAULT --- #

def test_encrypt_decrypt_round_trip(trezor_key, password):
    original = trezor_key.get()
    trezor_key.encrypt(password)

    assert trezor_key.is_priv_key_encrypted(), "Key should be encrypted"
    assert isinstance(trezor_key.secret, EncryptedSecret), "Secret should be the encrypted variant"
    assert original.xprv not in trezor_key.to_json(), "Plaintext xprv still present after encrypt"
    assert TREZOR_PHRASE not in trezor_key.to_json(), "Plaintext mnemonic still present after encrypt"

    trezor_key.decrypt(password)
    assert isinstance(trezor_key.secret, PlaintextSecret), "Secret should be the plaintext variant"
    assert "Encrypted" not in trezor_key.to_json(), "Ciphertext still present after decrypt"
    revealed = trezor_key.get()
    assert (revealed.xprv, revealed.mnemonic) == (original.xprv, original.mnemonic), "Round trip changed secret"


def test_state_errors(trezor_key, password):
    with pytest.raises(NotEncrypted):
        trezor_key.decrypt(password)

    trezor_key.encrypt(password)
    with pytest.raises(AlreadyEncrypted):
        trezor_key.encrypt(password)


def test_wrong_password_keeps_state(encrypted_key):
    before = encrypted_key.secret
    with pytest.raises(DecryptionFailed):
        encrypted_key.decrypt("wrong password")
    assert encrypted_key.secret is before, "Failed decrypt mutated the stored secret"
    assert encrypted_key.is_priv_key_encrypted(), "Failed decrypt changed the state"


def test_get(encrypted_key, password):
    with pytest.raises(PasswordRequired):
        encrypted_key.get()
    with pytest.raises(DecryptionFailed):
        encrypted_key.get("wrong password")

    revealed = encrypted_key.get(password)
    assert revealed.mnemonic == TREZOR_PHRASE, "Revealed mnemonic mismatch"
    assert encrypted_key.is_priv_key_encrypted(), "get() should not decrypt the stored secret"


def test_check_password(trezor_key, encrypted_key, password):
    assert trezor_key.check_password(password) is None, "Unencrypted key has no password to check"
    assert encrypted_key.check_password(password) is True, "Correct password rejected"
    assert encrypted_key.check_password("wrong password") is False, "Wrong password accepted"


@pytest.mark.parametrize("encrypted", [False, True])
def test_fingerprint_backfill(trezor_key, password, encrypted):
    expected = trezor_key.fingerprint
    if encrypted:
        trezor_key.encrypt(password)
    obj = trezor_key.to_obj()
    obj["fingerPrint"] = None
    legacy = Key.from_obj(obj)

    revealed = legacy.get(password if encrypted else None)
    assert revealed.fingerprint_updated, "Fingerprint should be back-filled on first reveal"
    assert legacy.fingerprint == expected, "Back-filled fingerprint mismatch"
    assert not legacy.get(password if encrypted else None).fingerprint_updated, "Fingerprint back-filled twice"


def test_derive(trezor_key, encrypted_key, password):
    expected = ExtendedKey.from_address(trezor_key.get().xprv).derive_path("m/44'/0'/0'")
    assert trezor_key.derive(None, "m/44'/0'/0'") == expected, "Derived key mismatch"
    assert encrypted_key.derive(password, "m/44'/0'/0'") == expected, "Derived key mismatch for encrypted key"

    with pytest.raises(InvalidArgument):
        trezor_key.derive(None, "")
    with pytest.raises(InvalidArgument):
        trezor_key.derive(None, "44'/0'")
    with pytest.raises(PasswordRequired):
        encrypted_key.derive(None, "m/44'/0'/0'")


# --- SERIALIZATION --- #

@pytest.mark.parametrize("encrypted", [False, True])
def test_serialization_round_trip(trezor_key, password, encrypted):
    if encrypted:
        trezor_key.encrypt(password)
    restored = Key.from_json(trezor_key.to_json())

    assert restored.to_obj() == trezor_key.to_obj(), "Serialization round trip changed the key"
    assert restored.match(trezor_key), "Restored key has a different id"
    assert restored.is_priv_key_encrypted() == encrypted, "Restored key state mismatch"


def test_serialized_fields(trezor_key):
    obj = trezor_key.to_obj()
    assert obj["version"] == KEY.VERSION, "Version not serialized"
    assert set(obj) == {"xPrivKey", "mnemonic", "mnemonicHasPassphrase", "fingerPrint", "compliantDerivation",
                        "BIP45", "use0forBCH", "use44forMultisig", "version", "id"}, "Unexpected serialized fields"
    assert json.loads(trezor_key.to_json()) == obj, "JSON does not match object form"


def test_bad_version(trezor_key):
    obj = trezor_key.to_obj()
    for version in (2, 0, None, "1"):
        obj["version"] = version
        with pytest.raises(BadKeyVersion):
            Key.from_obj(obj)


def test_invalid_state(trezor_key, encrypted_key):
    missing = trezor_key.to_obj()
    del missing["xPrivKey"]
    with pytest.raises(InvalidState):
        Key.from_obj(missing)

    both = trezor_key.to_obj()
    both["xPrivKeyEncrypted"] = encrypted_key.to_obj()["xPrivKeyEncrypted"]
    with pytest.raises(InvalidState):
        Key.from_obj(both)
