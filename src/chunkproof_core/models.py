from __future__ import annotations
from typing import List, Literal, Optional, Sequence

import rfc8785
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

from .digest import ALGORITHM, from_hex, leaf_digest, to_hex
from .merkle import MerkleTree, ProofEntry, Side


def _check_hex(v: str) -> str:
    from_hex(v)
    if v != v.lower():
        raise ValueError("digest hex must be lowercase")
    return v


class ProofStep(BaseModel):
    """One sibling in a serialized proof; ``side`` is where the sibling sits."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    side: Literal["L", "R"]
    digest_hex: StrictStr

    @field_validator("digest_hex")
    @classmethod
    def _digest_is_hex(cls, v: str) -> str:
        return _check_hex(v)


class InclusionProof(BaseModel):
    """Portable inclusion proof for one chunk against a root digest.

    ``steps`` are ordered bottom-up, exactly as ``MerkleTree.proof`` returns
    them. ``leaf_index`` and ``chunk_count`` are informational; verification
    only depends on the chunk bytes, the steps and the root.
    """

    model_config = ConfigDict(extra="forbid")

    algorithm: Literal["sha1"] = ALGORITHM
    root_hex: StrictStr
    leaf_index: StrictInt = Field(ge=0)
    chunk_count: StrictInt = Field(ge=2)
    steps: List[ProofStep] = Field(min_length=1)

    @field_validator("root_hex")
    @classmethod
    def _root_is_hex(cls, v: str) -> str:
        return _check_hex(v)

    @classmethod
    def from_entries(
        cls,
        entries: Sequence[ProofEntry],
        root: bytes,
        leaf_index: int,
        chunk_count: int,
    ) -> "InclusionProof":
        return cls(
            root_hex=to_hex(root),
            leaf_index=leaf_index,
            chunk_count=chunk_count,
            steps=[ProofStep(side=e.side.value, digest_hex=to_hex(e.digest)) for e in entries],
        )

    @classmethod
    def for_chunk(cls, tree: MerkleTree, chunk: bytes) -> Optional["InclusionProof"]:
        """Proof document for ``chunk``, or None when it is not in ``tree``."""
        leaf = tree.find_leaf(leaf_digest(chunk))
        if leaf is None:
            return None
        return cls.from_entries(tree.proof(chunk), tree.root, leaf.index, len(tree))

    @property
    def root(self) -> bytes:
        return from_hex(self.root_hex)

    def to_entries(self) -> List[ProofEntry]:
        return [ProofEntry(Side(s.side), from_hex(s.digest_hex)) for s in self.steps]

    def canonical_bytes(self) -> bytes:
        """Deterministic canonical JSON bytes per RFC8785."""
        return rfc8785.dumps(self.model_dump(mode="json"))
