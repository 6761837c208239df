from __future__ import annotations
import hashlib

# Fixed primitive. Leaf and internal digests share it with no prefix byte, so a
# 40-byte chunk equal to two concatenated child digests hashes like that
# internal node (second-preimage weakness, left as is).
DIGEST_SIZE = hashlib.sha1().digest_size
ALGORITHM = "sha1"


def _h(b: bytes) -> bytes:
    return hashlib.sha1(b).digest()


def leaf_digest(data: bytes) -> bytes:
    return _h(data)


def node_digest(left: bytes, right: bytes) -> bytes:
    """Digest of an internal node: H(left ++ right), order as given."""
    return _h(left + right)


def to_hex(digest: bytes) -> str:
    """Lowercase hex form of a digest. Display only."""
    return digest.hex()


def from_hex(s: str) -> bytes:
    """Decode a hex digest with strict length validation."""
    if not isinstance(s, str) or len(s) != 2 * DIGEST_SIZE:
        raise ValueError(f"digest must be {2 * DIGEST_SIZE} hex characters")
    try:
        b = bytes.fromhex(s)
    except (TypeError, ValueError) as e:
        raise ValueError("invalid hex digest") from e
    if len(b) != DIGEST_SIZE:
        raise ValueError(f"digest must be {DIGEST_SIZE} bytes, got {len(b)}")
    return b
