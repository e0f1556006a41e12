"""
The Key class - a wallet owner's master secret and everything derived from it

A Key holds its secret as exactly one of
    PlaintextSecret(xprv, mnemonic)
    EncryptedSecret(xprv envelope, mnemonic envelope)
so the private key and mnemonic are always encrypted and decrypted together.

Compatibility flags:
    use0_for_bch:           BCH accounts use coin type 0 instead of 145
    use44_for_multisig:     multisig accounts use purpose 44 instead of 48
    compliant_derivation:   False selects the non-compliant hardened child derivation for paths derived from the
                            master key. Input paths below a signing root are always compliant.
"""
import json
import uuid
from dataclasses import dataclass

from bitkey.core import KEY, XKEYS, WALLET, InvalidArgument, InvalidState, BadKeyVersion, EncryptedPrivateKey, \
    PasswordRequired, DecryptionFailed, AlreadyEncrypted, NotEncrypted, NoSecretPresent, EncryptionFailed, \
    ExtendedKeyError, ECCPrivateKeyError, get_logger
from bitkey.cryptography import CipherOptions, encrypt, decrypt
from bitkey.data import PubKey, validate_private_key, random_private_key
from bitkey.tx import TxProposal
from bitkey.wallet.credentials import Credentials, CredentialOptions, AccessGrant, sign_request_pub_key
from bitkey.wallet.derivation import get_base_address_derivation_path
from bitkey.wallet.mnemonic import Mnemonic
from bitkey.wallet.signer import sign_proposal
from bitkey.wallet.xkeys import ExtendedKey

__all__ = ["Key", "KeyOptions", "PlaintextSecret", "EncryptedSecret", "RevealedSecret"]

logger = get_logger(__name__)

REQUEST_KEY = KEY.PATHS["REQUEST_KEY"]


@dataclass(frozen=True)
class KeyOptions:
    """
    {passphrase: BIP39 passphrase mixed into the seed}
    {use_legacy_coin_type: BCH uses coin type 0}
    {use_legacy_purpose: multisig uses purpose 44}
    {non_compliant_derivation: selects non-compliant child-key derivation instead of compliant}
    """
    passphrase: str | None = None
    use_legacy_coin_type: bool = False
    use_legacy_purpose: bool = False
    non_compliant_derivation: bool = False


@dataclass(frozen=True)
class PlaintextSecret:
    xprv: str
    mnemonic: str | None = None


@dataclass(frozen=True)
class EncryptedSecret:
    xprv: str
    mnemonic: str | None = None


@dataclass(frozen=True)
class RevealedSecret:
    xprv: str
    mnemonic: str | None = None
    fingerprint_updated: bool = False


def _parse_xprv(xprv: str) -> ExtendedKey:
    try:
        key = ExtendedKey.from_address(xprv)
    except (ExtendedKeyError, TypeError) as e:
        raise InvalidArgument(f"Invalid extended private key: {e}") from e
    if not key.is_private:
        raise InvalidArgument("Extended key is not a private key")
    return key


class Key:
    __slots__ = ("version", "id", "secret", "fingerprint", "mnemonic_has_passphrase", "use0_for_bch",
                 "use44_for_multisig", "compliant_derivation", "bip45")

    def __init__(self,
                 secret: PlaintextSecret | EncryptedSecret,
                 fingerprint: str | None = None,
                 mnemonic_has_passphrase: bool | None = None,
                 use0_for_bch: bool = False,
                 use44_for_multisig: bool = False,
                 compliant_derivation: bool = True,
                 bip45: bool | None = None,
                 key_id: str | None = None,
                 version: int = KEY.VERSION):
        if not isinstance(secret, (PlaintextSecret, EncryptedSecret)) or not secret.xprv:
            raise InvalidState("Key requires a plaintext or encrypted private key")

        self.version = version
        self.id = key_id or str(uuid.uuid4())
        self.secret = secret
        self.fingerprint = fingerprint
        self.mnemonic_has_passphrase = mnemonic_has_passphrase
        self.use0_for_bch = use0_for_bch
        self.use44_for_multisig = use44_for_multisig
        self.compliant_derivation = compliant_derivation
        self.bip45 = bip45

    def __repr__(self):
        state = "encrypted" if self.is_priv_key_encrypted() else "plaintext"
        return f"Key(id={self.id!r}, {state}, fingerprint={self.fingerprint!r})"

    def match(self, other: "Key") -> bool:
        return self.id == other.id

    # --- SEED SOURCE --- #

    @classmethod
    def _from_master(cls, xprv: ExtendedKey, mnemonic: Mnemonic | None, options: KeyOptions,
                     mnemonic_has_passphrase: bool | None):
        return cls(
            secret=PlaintextSecret(xprv.address(), mnemonic.phrase if mnemonic else None),
            fingerprint=xprv.fingerprint().hex(),
            mnemonic_has_passphrase=mnemonic_has_passphrase,
            use0_for_bch=options.use_legacy_coin_type,
            use44_for_multisig=options.use_legacy_purpose,
            compliant_derivation=not options.non_compliant_derivation,
        )

    @classmethod
    def _from_mnemonic_obj(cls, mnemonic: Mnemonic, options: KeyOptions):
        seed = mnemonic.to_seed(options.passphrase)
        xprv = ExtendedKey.from_master_seed(seed, XKEYS.MAINNET_PRIVATE)
        return cls._from_master(xprv, mnemonic, options, bool(options.passphrase))

    @classmethod
    def create(cls, language: str = WALLET.DEFAULT_LANGUAGE, options: KeyOptions | None = None):
        """
        New key from a freshly generated mnemonic in the given language
        """
        options = options or KeyOptions()
        key = cls._from_mnemonic_obj(Mnemonic.generate(language), options)
        logger.debug(f"Created key {key.id}")
        return key

    @classmethod
    def from_mnemonic(cls, words: str | list[str], options: KeyOptions | None = None, language: str | None = None):
        if not words:
            raise InvalidArgument("Mnemonic words are required")
        options = options or KeyOptions()
        return cls._from_mnemonic_obj(Mnemonic.from_phrase(words, language), options)

    @classmethod
    def from_extended_private_key(cls, xprv: str, options: KeyOptions | None = None):
        """
        Import a serialized xprv. The mnemonic is unknown, so mnemonic_has_passphrase stays None.
        """
        if not xprv or not isinstance(xprv, str):
            raise InvalidArgument("An extended private key string is required")
        options = options or KeyOptions()
        return cls._from_master(_parse_xprv(xprv), None, options, None)

    # --- SECRET VAULT --- #

    def is_priv_key_encrypted(self) -> bool:
        return isinstance(self.secret, EncryptedSecret)

    def check_password(self, password: str) -> bool | None:
        """
        None if the key is not encrypted, otherwise whether password decrypts it
        """
        if not self.is_priv_key_encrypted():
            return None
        try:
            decrypt(password, self.secret.xprv)
        except DecryptionFailed:
            return False
        return True

    def _decrypt_secret(self, password: str) -> PlaintextSecret:
        try:
            xprv = decrypt(password, self.secret.xprv)
            mnemonic = decrypt(password, self.secret.mnemonic) if self.secret.mnemonic else None
        except DecryptionFailed:
            logger.error(f"Could not decrypt key {self.id}")
            raise
        return PlaintextSecret(xprv, mnemonic)

    def get(self, password: str | None = None) -> RevealedSecret:
        """
        Reveal the private key and mnemonic without changing the stored state.

        A key stored without a fingerprint gets it computed from the revealed private key.
        """
        if self.is_priv_key_encrypted():
            if not password:
                raise PasswordRequired("Private keys are encrypted, a password is needed")
            plaintext = self._decrypt_secret(password)
        else:
            plaintext = self.secret

        fingerprint_updated = False
        if not self.fingerprint:
            self.fingerprint = _parse_xprv(plaintext.xprv).fingerprint().hex()
            fingerprint_updated = True
            logger.debug(f"Backfilled fingerprint for key {self.id}")

        return RevealedSecret(plaintext.xprv, plaintext.mnemonic, fingerprint_updated)

    def encrypt(self, password: str, cipher_options: CipherOptions | None = None):
        if self.is_priv_key_encrypted():
            raise AlreadyEncrypted("Private key already encrypted")
        if not self.secret.xprv:
            raise NoSecretPresent("No private key to encrypt")

        xprv_ct = encrypt(password, self.secret.xprv, cipher_options)
        mnemonic_ct = encrypt(password, self.secret.mnemonic, cipher_options) if self.secret.mnemonic else None
        if not xprv_ct or (self.secret.mnemonic and not mnemonic_ct):
            raise EncryptionFailed("Could not encrypt")

        self.secret = EncryptedSecret(xprv_ct, mnemonic_ct)
        logger.debug(f"Encrypted key {self.id}")

    def decrypt(self, password: str):
        if not self.is_priv_key_encrypted():
            raise NotEncrypted("Private key is not encrypted")

        self.secret = self._decrypt_secret(password)
        logger.debug(f"Decrypted key {self.id}")

    def derive(self, password: str | None, path: str) -> ExtendedKey:
        if not path or not isinstance(path, str):
            raise InvalidArgument("No path given to derive")

        root = _parse_xprv(self.get(password).xprv)
        if not root.is_mainnet:
            root = root.with_version(XKEYS.MAINNET_PRIVATE)
        try:
            return root.derive_path(path, self.compliant_derivation)
        except ExtendedKeyError as e:
            raise InvalidArgument(f"Cannot derive {path}: {e}") from e

    # --- CREDENTIALS --- #

    def get_base_address_derivation_path(self, coin: str, network: str, account: int, n: int) -> str:
        return get_base_address_derivation_path(coin, network, account, n, use44_for_multisig=self.use44_for_multisig,
                                                use0_for_bch=self.use0_for_bch)

    def create_credentials(self, password: str | None, options: CredentialOptions | dict) -> Credentials:
        if isinstance(options, dict):
            options = CredentialOptions.from_obj(options)
        elif not isinstance(options, CredentialOptions):
            raise InvalidArgument("Credential options are required")

        path = self.get_base_address_derivation_path(options.coin, options.network, options.account, options.n)
        xpriv = self.derive(password, path)
        request_priv_key = self.derive(password, REQUEST_KEY).private_key_int

        if options.network == KEY.TESTNET:
            xpriv = xpriv.to_testnet()

        logger.debug(f"Creating {options.coin}/{options.network} credentials at {path} for key {self.id}")
        return Credentials.from_derived_key(xpriv, options, path, self.id, request_priv_key)

    def create_access(self, password: str | None, path: str, request_priv_key: str | None = None) -> AccessGrant:
        """
        Sign a request key (generated when none is given) with the key at path
        """
        if not path or not isinstance(path, str):
            raise InvalidArgument("A derivation path string is required")

        if request_priv_key:
            try:
                priv = validate_private_key(int(request_priv_key, 16))
            except (ValueError, TypeError, ECCPrivateKeyError) as e:
                raise InvalidArgument("Invalid request private key") from e
        else:
            priv = random_private_key()

        xpriv = self.derive(password, path)
        signature = sign_request_pub_key(PubKey(priv).hex(), xpriv)
        return AccessGrant(signature=signature, request_priv_key=format(priv, "064x"))

    # --- SIGNING --- #

    def sign(self, root_path: str, txp: TxProposal | dict, password: str | None = None) -> list[str]:
        if not root_path or not isinstance(root_path, str):
            raise InvalidArgument("A root path string is required")
        if self.is_priv_key_encrypted() and not password:
            raise EncryptedPrivateKey("Private key is encrypted, cannot sign")

        if isinstance(txp, dict):
            txp = TxProposal.from_obj(txp)

        root = self.derive(password, root_path)
        return sign_proposal(root, txp)

    # --- SERIALIZATION --- #

    def to_obj(self) -> dict:
        return _SERIALIZERS[self.version][0](self)

    @classmethod
    def from_obj(cls, obj: dict):
        version = obj.get("version") if isinstance(obj, dict) else None
        if type(version) is not int or version != KEY.VERSION:
            raise BadKeyVersion(f"Bad Key version: {version}")
        return _SERIALIZERS[version][1](obj)

    def to_json(self) -> str:
        return json.dumps(self.to_obj())

    @classmethod
    def from_json(cls, data: str):
        try:
            obj = json.loads(data)
        except (TypeError, ValueError) as e:
            raise InvalidArgument("Serialized key is not valid JSON") from e
        return cls.from_obj(obj)


# --- VERSIONED SERIALIZERS --- #

def _to_obj_v1(key: Key) -> dict:
    obj = {}
    if key.is_priv_key_encrypted():
        obj["xPrivKeyEncrypted"] = key.secret.xprv
        if key.secret.mnemonic:
            obj["mnemonicEncrypted"] = key.secret.mnemonic
    else:
        obj["xPrivKey"] = key.secret.xprv
        if key.secret.mnemonic:
            obj["mnemonic"] = key.secret.mnemonic

    obj.update({
        "mnemonicHasPassphrase": key.mnemonic_has_passphrase,
        "fingerPrint": key.fingerprint,
        "compliantDerivation": key.compliant_derivation,
        "BIP45": key.bip45,
        "use0forBCH": key.use0_for_bch,
        "use44forMultisig": key.use44_for_multisig,
        "version": key.version,
        "id": key.id,
    })
    return obj


def _from_obj_v1(obj: dict) -> Key:
    xprv, xprv_encrypted = obj.get("xPrivKey"), obj.get("xPrivKeyEncrypted")
    mnemonic, mnemonic_encrypted = obj.get("mnemonic"), obj.get("mnemonicEncrypted")

    if xprv and xprv_encrypted:
        raise InvalidState("Serialized key holds both a plaintext and an encrypted private key")
    if not xprv and not xprv_encrypted:
        raise InvalidState("Serialized key holds no private key")

    if xprv:
        if mnemonic_encrypted:
            raise InvalidState("Mnemonic is encrypted but the private key is not")
        secret = PlaintextSecret(xprv, mnemonic or None)
    else:
        if mnemonic:
            raise InvalidState("Private key is encrypted but the mnemonic is not")
        secret = EncryptedSecret(xprv_encrypted, mnemonic_encrypted or None)

    return Key(
        secret=secret,
        fingerprint=obj.get("fingerPrint"),
        mnemonic_has_passphrase=obj.get("mnemonicHasPassphrase"),
        use0_for_bch=bool(obj.get("use0forBCH", False)),
        use44_for_multisig=bool(obj.get("use44forMultisig", False)),
        compliant_derivation=obj.get("compliantDerivation") is not False,
        bip45=obj.get("BIP45"),
        key_id=obj.get("id"),
        version=obj["version"],
    )


_SERIALIZERS = {
    1: (_to_obj_v1, _from_obj_v1),
}
