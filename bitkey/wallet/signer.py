"""
Signs transaction proposals with keys derived below a wallet root
"""
from bitkey.core import ExtendedKeyError, InvalidArgument, InvalidState, get_logger
from bitkey.tx import TxProposal
from bitkey.wallet.xkeys import ExtendedKey

__all__ = ["sign_proposal"]

logger = get_logger(__name__)


def _derive_input_keys(root: ExtendedKey, txp: TxProposal) -> list[int]:
    """
    One private key per distinct input path, in first-seen order. Input paths always use compliant derivation.
    """
    derived = {}
    for proposal_input in txp.inputs:
        path = proposal_input.path
        if not path:
            raise InvalidState("Input derivation path not available (signing transaction)")
        if path in derived:
            continue
        try:
            derived[path] = root.derive_path(path).private_key_int
        except ExtendedKeyError as e:
            raise InvalidArgument(f"Cannot derive input key at {path}: {e}") from e
    return list(derived.values())


def sign_proposal(root: ExtendedKey, txp: TxProposal) -> list[str]:
    """
    Returns one DER hex signature per input, ordered by input index.

    Each derived key signs every input listing its public key. The signatures of all keys are flattened and
    stably sorted by input index, so ties keep the order in which they were produced.
    """
    private_keys = _derive_input_keys(root, txp)
    tx = txp.build_tx()

    signatures = [sig for key in private_keys for sig in txp.get_signatures(tx, key)]
    signatures.sort(key=lambda s: s.input_index)

    covered = [s.input_index for s in signatures]
    if covered != list(range(len(txp.inputs))):
        logger.error(f"Signatures cover inputs {covered} of {len(txp.inputs)}")
        raise InvalidState("Signatures do not cover every input exactly once")

    return [s.to_der().hex() for s in signatures]
