"""
The classes for BitKey unsigned transactions
"""
import json

from bitkey.core import TX
from bitkey.cryptography import hash256
from bitkey.data import write_compact_size

__all__ = ["TxInput", "TxOutput", "Transaction"]


class TxInput:
    """
    =============================================================================
    |   name            |   data type   |   format              |   byte size   |
    =============================================================================
    |   txid            |   bytes       |   natural byte order  |   32          |
    |   vout            |   int         |   little-endian       |   4           |
    |   scriptsig_size  |               |   compactSize         |   var         |
    |   scriptsig       |   bytes       |   script bytes        |   var         |
    |   sequence        |   int         |   little-endian       |   4           |
    =============================================================================
    """
    __slots__ = ("txid", "vout", "scriptsig", "sequence")

    def __init__(self, txid: bytes, vout: int, scriptsig: bytes = b'', sequence: int = TX.DEFAULT_SEQUENCE):
        self.txid = txid
        self.vout = vout
        self.scriptsig = scriptsig
        self.sequence = sequence

    @property
    def outpoint(self) -> bytes:
        return self.txid + self.vout.to_bytes(TX.VOUT, "little")

    def clone(self) -> "TxInput":
        return TxInput(self.txid, self.vout, self.scriptsig, self.sequence)

    def to_bytes(self) -> bytes:
        """
        txid || vout || scriptsig_size || scriptsig || sequence
        """
        parts = [
            self.outpoint,
            write_compact_size(len(self.scriptsig)),
            self.scriptsig,
            self.sequence.to_bytes(TX.SEQUENCE, "little")
        ]
        return b''.join(parts)

    def to_dict(self) -> dict:
        return {
            "txid": self.txid[::-1].hex(),
            "vout": self.vout,
            "scriptsig": self.scriptsig.hex(),
            "sequence": self.sequence
        }


class TxOutput:
    """
    -----------------------------------------------------------------
    |   Field               |   Byte Size   |   Format              |
    -----------------------------------------------------------------
    |   Amount              |   8           |   little-endian       |
    |   scriptpubkey_size   |   var         |   CompactSize         |
    |   scriptpubkey        |   var         |   Script              |
    -----------------------------------------------------------------
    """
    __slots__ = ("amount", "scriptpubkey")

    def __init__(self, amount: int, scriptpubkey: bytes):
        self.amount = amount
        self.scriptpubkey = scriptpubkey

    def to_bytes(self) -> bytes:
        """
        amount || scriptpubkey_size || scriptpubkey
        """
        return self.amount.to_bytes(TX.AMOUNT, "little") + write_compact_size(len(self.scriptpubkey)) + \
            self.scriptpubkey

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "scriptpubkey": self.scriptpubkey.hex()
        }


class Transaction:
    """
    Unsigned transaction in legacy serialization (no marker, flag or witness)
    -------------------------------------------------------------
    |   Field           |   Byte Size   |   Format              |
    -------------------------------------------------------------
    |   Version         |   4           |   little-endian       |
    |   input_count     |   var         |   CompactSize         |
    |   inputs          |   var         |   TxInput             |
    |   output_count    |   var         |   CompactSize         |
    |   outputs         |   var         |   TxOutput            |
    |   locktime        |   4           |   little-endian       |
    -------------------------------------------------------------
    """
    __slots__ = ("version", "inputs", "outputs", "locktime")

    def __init__(self, inputs: list[TxInput] = None, outputs: list[TxOutput] = None, locktime: int = 0,
                 version: int = TX.DEFAULT_VERSION):
        self.inputs = inputs or []
        self.outputs = outputs or []
        self.locktime = locktime
        self.version = version

    def clone(self) -> "Transaction":
        return Transaction(
            inputs=[i.clone() for i in self.inputs],
            outputs=[TxOutput(o.amount, o.scriptpubkey) for o in self.outputs],
            locktime=self.locktime,
            version=self.version
        )

    def to_bytes(self) -> bytes:
        parts = [
            self.version.to_bytes(TX.VERSION, "little"),
            write_compact_size(len(self.inputs)),
            b''.join(i.to_bytes() for i in self.inputs),
            write_compact_size(len(self.outputs)),
            b''.join(o.to_bytes() for o in self.outputs),
            self.locktime.to_bytes(TX.LOCKTIME, "little")
        ]
        return b''.join(parts)

    @property
    def txid(self) -> bytes:
        return hash256(self.to_bytes())

    def to_dict(self) -> dict:
        return {
            "txid": self.txid[::-1].hex(),
            "version": self.version,
            "inputs": [i.to_dict() for i in self.inputs],
            "outputs": [o.to_dict() for o in self.outputs],
            "locktime": self.locktime
        }

    def to_json(self):
        return json.dumps(self.to_dict(), indent=2)
