"""
The SignatureEngine class, used to compute transaction digests and sign them
"""
from enum import IntEnum

from bitkey.core import TX, InvalidArgument
from bitkey.cryptography import ecdsa, verify_ecdsa, hash256
from bitkey.data import write_compact_size, PubKey

__all__ = ["SigHash", "SignatureEngine"]


class SigHash(IntEnum):
    ALL = TX.SIGHASH_ALL
    ALL_FORKID = TX.SIGHASH_ALL | TX.SIGHASH_FORKID

    def for_hashing(self) -> bytes:
        """
        The sighash integer padded to 4 bytes, as appended to the digest preimage
        """
        return self.value.to_bytes(4, "little")


class SignatureEngine:
    """Digest and ECDSA operations for transaction inputs"""

    # --- SIGHASH ALGORITHMS --- #

    def get_legacy_sighash(self, tx, input_index: int, script_code: bytes, sighash: SigHash = SigHash.ALL) -> bytes:
        """
        Computes the legacy message hash for signing:
            1. Remove all existing script_sigs
            2. Put the script code (scriptpubkey or redeem script) in the script_sig for the input
            3. Append the sighash type as 4 bytes at the end of the serialized tx data
            4. Hash the serialized tx data
        """
        if not (0 <= input_index < len(tx.inputs)):
            raise InvalidArgument(f"Input index {input_index} out of range")

        tx_copy = tx.clone()

        # 1. Remove all existing scriptsigs
        for i in tx_copy.inputs:
            i.scriptsig = b''

        # 2. Script code in the signing input
        tx_copy.inputs[input_index].scriptsig = script_code

        # 3 + 4
        return hash256(tx_copy.to_bytes() + sighash.for_hashing())

    def get_segwit_sighash(self, tx, input_index: int, script_code: bytes, amount: int,
                           sighash: SigHash = SigHash.ALL) -> bytes:
        """
        BIP143 digest. Also used by BCH with the FORKID sighash type.
        """
        if not (0 <= input_index < len(tx.inputs)):
            raise InvalidArgument(f"Input index {input_index} out of range")

        # 1. version
        serialized_version = tx.version.to_bytes(TX.VERSION, "little")

        # 2. hash256 of every outpoint and every sequence
        hashed_inputs = hash256(b''.join(txin.outpoint for txin in tx.inputs))
        hashed_sequences = hash256(b''.join(txin.sequence.to_bytes(TX.SEQUENCE, "little") for txin in tx.inputs))

        # 3. Outpoint, script code, amount and sequence of the input we're signing
        my_input = tx.inputs[input_index]
        serialized_script_code = write_compact_size(len(script_code)) + script_code
        serialized_amount = amount.to_bytes(TX.AMOUNT, "little")
        my_sequence = my_input.sequence.to_bytes(TX.SEQUENCE, "little")

        # 4. hash256 of every output
        hashed_outputs = hash256(b''.join(txout.to_bytes() for txout in tx.outputs))

        # 5. Locktime
        serialized_locktime = tx.locktime.to_bytes(TX.LOCKTIME, "little")

        preimage = (
                serialized_version + hashed_inputs + hashed_sequences + my_input.outpoint + serialized_script_code +
                serialized_amount + my_sequence + hashed_outputs + serialized_locktime + sighash.for_hashing()
        )
        return hash256(preimage)

    # --- SIGNING --- #

    def sign_message(self, private_key: int, message_hash: bytes) -> tuple[int, int]:
        return ecdsa(private_key, message_hash)

    def verify_message(self, signature: tuple[int, int], message_hash: bytes, pubkey: PubKey) -> bool:
        return verify_ecdsa(signature, message_hash, pubkey.to_point())
