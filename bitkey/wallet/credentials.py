"""
Credentials: the account level material a master key hands to a wallet service.

Credentials carry the account xpub and a request key pair. They never carry the master private key or the account
xprv.
"""
from dataclasses import dataclass, asdict

from bitkey.core import KEY, InvalidArgument, DataEncodingError, ExtendedKeyError, PubKeyError, ECDSAError, \
    get_logger
from bitkey.cryptography import ecdsa, verify_ecdsa, hash256, sha256
from bitkey.data import PubKey, encode_der_signature, decode_der_signature
from bitkey.wallet.derivation import validate_account, validate_signer_count
from bitkey.wallet.xkeys import ExtendedKey

__all__ = ["Credentials", "CredentialOptions", "AccessGrant", "sign_request_pub_key", "verify_request_pub_key",
           "xpub_to_copayer_id"]

logger = get_logger(__name__)

REQUEST_KEY_AUTH = KEY.PATHS["REQUEST_KEY_AUTH"]
LEGACY_FLAGS = ("use_legacy_coin_type", "use_legacy_purpose", "use0forBCH", "use44forMultisig")


def _message_hash(text: str) -> bytes:
    return hash256(text.encode("utf-8"))


def sign_request_pub_key(request_pub_key: str, xpriv: ExtendedKey) -> str:
    """
    Sign the request public key hex with the REQUEST_KEY_AUTH child of the account key. Returns DER hex.
    """
    auth_key = xpriv.derive_path(REQUEST_KEY_AUTH)
    r, s = ecdsa(auth_key.private_key_int, _message_hash(request_pub_key))
    return encode_der_signature(r, s).hex()


def verify_request_pub_key(request_pub_key: str, signature: str, xpub: str) -> bool:
    """
    True if signature is a request key signature made by the owner of the account xpub
    """
    try:
        auth_pubkey = ExtendedKey.from_address(xpub).derive_path(REQUEST_KEY_AUTH).pubkey()
        r, s = decode_der_signature(bytes.fromhex(signature))
        return verify_ecdsa((r, s), _message_hash(request_pub_key), auth_pubkey.to_point())
    except (ExtendedKeyError, DataEncodingError, ECDSAError, PubKeyError, ValueError) as e:
        logger.debug(f"Request key signature rejected: {e}")
        return False


def xpub_to_copayer_id(coin: str, xpub: str) -> str:
    text = xpub if coin == KEY.BTC else coin + xpub
    return sha256(text.encode("utf-8")).hex()


@dataclass(frozen=True)
class CredentialOptions:
    """
    {coin: one of btc, bch, eth}
    {network: livenet or testnet}
    {account: account index, hardened in the path}
    {n: number of signers; 1 is a single signer wallet}
    {address_type: defaults to P2PKH for n == 1, P2SH otherwise}
    {wallet_priv_key: shared wallet key for multisig coordination}
    """
    coin: str
    network: str
    account: int
    n: int
    address_type: str | None = None
    wallet_priv_key: str | None = None

    def __post_init__(self):
        if self.coin not in KEY.COINS:
            raise InvalidArgument(f"Invalid coin: {self.coin}")
        if self.network not in KEY.NETWORKS:
            raise InvalidArgument(f"Invalid network: {self.network}")
        validate_account(self.account)
        validate_signer_count(self.n)
        if self.address_type is not None and self.address_type not in KEY.SCRIPT_TYPES:
            raise InvalidArgument(f"Invalid address type: {self.address_type}")

    @classmethod
    def from_obj(cls, obj: dict):
        """
        Build options from a caller dict. The legacy derivation flags belong to the master key and are rejected.
        """
        passed_flags = [flag for flag in LEGACY_FLAGS if flag in obj]
        if passed_flags:
            raise InvalidArgument(f"Legacy derivation flags are master key options: {passed_flags}")
        try:
            return cls(**obj)
        except TypeError as e:
            raise InvalidArgument(f"Invalid credential options: {e}") from e

    @property
    def resolved_address_type(self) -> str:
        if self.address_type:
            return self.address_type
        return KEY.P2PKH if self.n == 1 else KEY.P2SH


@dataclass(frozen=True)
class AccessGrant:
    signature: str
    request_priv_key: str


@dataclass(frozen=True)
class Credentials:
    coin: str
    network: str
    account: int
    n: int
    xpub_key: str
    root_path: str
    key_id: str
    request_priv_key: str
    request_pub_key: str
    request_pub_key_signature: str
    address_type: str
    copayer_id: str
    wallet_priv_key: str | None = None

    @classmethod
    def from_derived_key(cls, xpriv: ExtendedKey, options: CredentialOptions, root_path: str, key_id: str,
                         request_priv_key: int):
        xpub_key = xpriv.get_pubkey().address()
        request_pub_key = PubKey(request_priv_key).hex()
        return cls(
            coin=options.coin,
            network=options.network,
            account=options.account,
            n=options.n,
            xpub_key=xpub_key,
            root_path=root_path,
            key_id=key_id,
            request_priv_key=format(request_priv_key, "064x"),
            request_pub_key=request_pub_key,
            request_pub_key_signature=sign_request_pub_key(request_pub_key, xpriv),
            address_type=options.resolved_address_type,
            copayer_id=xpub_to_copayer_id(options.coin, xpub_key),
            wallet_priv_key=options.wallet_priv_key,
        )

    def verify(self) -> bool:
        return verify_request_pub_key(self.request_pub_key, self.request_pub_key_signature, self.xpub_key)

    # --- SERIALIZATION --- #
    def to_obj(self) -> dict:
        return asdict(self)

    @classmethod
    def from_obj(cls, obj: dict):
        try:
            return cls(**obj)
        except TypeError as e:
            raise InvalidArgument(f"Malformed credentials: {e}") from e
