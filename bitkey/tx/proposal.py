"""
Transaction proposals: the unsigned spend a wallet is asked to sign, one derivation path per input.

Wire format (camelCase, as produced by the wallet service):

    {"coin": "btc", "network": "livenet", "addressType": "P2SH", "requiredSignatures": 2,
     "lockTime": 0, "version": 1,
     "inputs": [{"txid": hex, "vout": int, "satoshis": int, "path": "m/0/3", "publicKeys": [hex, ...],
                 "sequence": int}],
     "outputs": [{"script": hex, "amount": int}]}
"""
from dataclasses import dataclass

from bitkey.core import KEY, TX, InvalidArgument, get_logger
from bitkey.data import PubKey, encode_der_signature
from bitkey.tx.scripts import p2pkh_script, multisig_script
from bitkey.tx.sighash import SigHash, SignatureEngine
from bitkey.tx.tx import TxInput, TxOutput, Transaction

__all__ = ["ProposalInput", "ProposalOutput", "TxProposal", "InputSignature"]

logger = get_logger(__name__)
engine = SignatureEngine()

SEGWIT_TYPES = (KEY.P2WPKH, KEY.P2WSH)
SINGLE_KEY_TYPES = (KEY.P2PKH, KEY.P2WPKH)


def _hex_to_bytes(value: str, name: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"Invalid hex for {name}: {value!r}") from e


@dataclass(frozen=True)
class ProposalInput:
    txid: str
    vout: int
    satoshis: int
    path: str | None
    public_keys: tuple[str, ...]
    sequence: int = TX.DEFAULT_SEQUENCE

    @classmethod
    def from_obj(cls, obj: dict):
        try:
            return cls(
                txid=obj["txid"],
                vout=int(obj["vout"]),
                satoshis=int(obj["satoshis"]),
                path=obj.get("path"),
                public_keys=tuple(pk.lower() for pk in obj.get("publicKeys", [])),
                sequence=int(obj.get("sequence", TX.DEFAULT_SEQUENCE)),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InvalidArgument(f"Malformed proposal input: {e}") from e

    def to_obj(self) -> dict:
        return {
            "txid": self.txid,
            "vout": self.vout,
            "satoshis": self.satoshis,
            "path": self.path,
            "publicKeys": list(self.public_keys),
            "sequence": self.sequence,
        }


@dataclass(frozen=True)
class ProposalOutput:
    script_pubkey: str
    amount: int

    @classmethod
    def from_obj(cls, obj: dict):
        try:
            return cls(script_pubkey=obj["script"], amount=int(obj["amount"]))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidArgument(f"Malformed proposal output: {e}") from e

    def to_obj(self) -> dict:
        return {"script": self.script_pubkey, "amount": self.amount}


@dataclass(frozen=True)
class InputSignature:
    """
    A signature for one input, before DER serialization
    """
    input_index: int
    signature: tuple[int, int]
    public_key: str
    sighash: SigHash

    def to_der(self) -> bytes:
        return encode_der_signature(*self.signature)


@dataclass
class TxProposal:
    coin: str
    network: str
    inputs: list[ProposalInput]
    outputs: list[ProposalOutput]
    required_signatures: int = 1
    address_type: str = KEY.P2PKH
    lock_time: int = 0
    version: int = TX.DEFAULT_VERSION

    def __post_init__(self):
        if self.coin not in KEY.COINS:
            raise InvalidArgument(f"Invalid coin: {self.coin}")
        if self.network not in KEY.NETWORKS:
            raise InvalidArgument(f"Invalid network: {self.network}")
        if self.address_type not in KEY.SCRIPT_TYPES:
            raise InvalidArgument(f"Unsupported address type: {self.address_type}")
        if not self.inputs:
            raise InvalidArgument("Proposal has no inputs")
        if self.required_signatures < 1:
            raise InvalidArgument("Proposal requires at least one signature")

    @classmethod
    def from_obj(cls, obj: dict):
        try:
            return cls(
                coin=obj.get("coin", KEY.BTC),
                network=obj.get("network", KEY.LIVENET),
                inputs=[ProposalInput.from_obj(i) for i in obj["inputs"]],
                outputs=[ProposalOutput.from_obj(o) for o in obj.get("outputs", [])],
                required_signatures=int(obj.get("requiredSignatures", 1)),
                address_type=obj.get("addressType", KEY.P2PKH),
                lock_time=int(obj.get("lockTime", 0)),
                version=int(obj.get("version", TX.DEFAULT_VERSION)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidArgument(f"Malformed transaction proposal: {e}") from e

    def to_obj(self) -> dict:
        return {
            "coin": self.coin,
            "network": self.network,
            "addressType": self.address_type,
            "requiredSignatures": self.required_signatures,
            "lockTime": self.lock_time,
            "version": self.version,
            "inputs": [i.to_obj() for i in self.inputs],
            "outputs": [o.to_obj() for o in self.outputs],
        }

    # --- TX BUILDING --- #

    def build_tx(self) -> Transaction:
        """
        The canonical unsigned transaction: empty script sigs, inputs and outputs in proposal order
        """
        if self.coin == KEY.ETH:
            raise InvalidArgument("Account based coins have no UTXO transaction to sign")

        inputs = []
        for i in self.inputs:
            txid = _hex_to_bytes(i.txid, "txid")
            if len(txid) != TX.TXID:
                raise InvalidArgument(f"txid must be {TX.TXID} bytes: {i.txid}")
            inputs.append(TxInput(txid[::-1], i.vout, b'', i.sequence))

        outputs = [TxOutput(o.amount, _hex_to_bytes(o.script_pubkey, "output script")) for o in self.outputs]
        return Transaction(inputs=inputs, outputs=outputs, locktime=self.lock_time, version=self.version)

    def script_code(self, proposal_input: ProposalInput) -> bytes:
        """
        P2PKH script for single key inputs, the sorted multisig script for P2SH and P2WSH
        """
        pubkeys = [_hex_to_bytes(pk, "public key") for pk in proposal_input.public_keys]
        if not pubkeys:
            raise InvalidArgument(f"Input {proposal_input.txid}:{proposal_input.vout} has no public keys")

        if self.address_type in SINGLE_KEY_TYPES:
            if len(pubkeys) != 1:
                raise InvalidArgument(f"{self.address_type} input must carry exactly one public key")
            return p2pkh_script(pubkeys[0])
        return multisig_script(self.required_signatures, pubkeys)

    @property
    def sighash_type(self) -> SigHash:
        return SigHash.ALL_FORKID if self.coin == KEY.BCH else SigHash.ALL

    def sighash(self, tx: Transaction, input_index: int) -> bytes:
        proposal_input = self.inputs[input_index]
        script_code = self.script_code(proposal_input)

        if self.coin == KEY.BCH or self.address_type in SEGWIT_TYPES:
            return engine.get_segwit_sighash(tx, input_index, script_code, proposal_input.satoshis,
                                                   self.sighash_type)
        return engine.get_legacy_sighash(tx, input_index, script_code, self.sighash_type)

    # --- SIGNATURES --- #

    def get_signatures(self, tx: Transaction, private_key: int) -> list[InputSignature]:
        """
        One signature for every input whose public keys include the key for private_key
        """
        pubkey_hex = PubKey(private_key).hex()
        signatures = []
        for index, proposal_input in enumerate(self.inputs):
            if pubkey_hex not in proposal_input.public_keys:
                continue
            message_hash = self.sighash(tx, index)
            signatures.append(InputSignature(
                input_index=index,
                signature=engine.sign_message(private_key, message_hash),
                public_key=pubkey_hex,
                sighash=self.sighash_type
            ))
        logger.debug(f"Key {pubkey_hex[:8]}... signed {len(signatures)} of {len(self.inputs)} inputs")
        return signatures

    def verify_signature(self, tx: Transaction, signature: InputSignature) -> bool:
        message_hash = self.sighash(tx, signature.input_index)
        return engine.verify_message(signature.signature, message_hash, PubKey.from_hex(signature.public_key))
