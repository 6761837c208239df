from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from chunkproof_core.logutil import get_logger
from chunkproof_core.merkle import verify_inclusion
from chunkproof_core.models import InclusionProof

log = get_logger("chunkproof.sdk")


def _check(proof: InclusionProof, chunk: bytes, trusted_root_hex: Optional[str]) -> bool:
    if trusted_root_hex is not None and trusted_root_hex.lower() != proof.root_hex:
        log.debug("proof root %s does not match trusted root", proof.root_hex)
        return False
    return verify_inclusion(chunk, proof.to_entries(), proof.root)


def verify_proof_document(
    doc: Dict[str, Any], chunk: bytes, trusted_root_hex: Optional[str] = None
) -> bool:
    """Return True if ``chunk`` is included under the document's root.

    The root embedded in the document is only as trustworthy as its source;
    pass ``trusted_root_hex`` to pin it to a root obtained out of band.
    Malformed documents yield False.
    """
    try:
        proof = InclusionProof.model_validate(doc)
    except ValidationError:
        return False
    return _check(proof, chunk, trusted_root_hex)


def verify_proof_file(
    path: Union[str, Path], chunk: bytes, trusted_root_hex: Optional[str] = None
) -> bool:
    """Same as verify_proof_document, reading the canonical JSON from ``path``."""
    try:
        raw = Path(path).read_bytes()
    except OSError:
        return False
    try:
        proof = InclusionProof.model_validate_json(raw)
    except ValidationError:
        return False
    return _check(proof, chunk, trusted_root_hex)
