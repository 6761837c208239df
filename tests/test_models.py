import json

import pytest
from pydantic import ValidationError

from chunkproof_core.merkle import MerkleTree
from chunkproof_core.models import InclusionProof, ProofStep
from tests._helpers import make_chunks


@pytest.fixture
def tree8():
    return MerkleTree.from_chunks(make_chunks(8))


def test_for_chunk(tree8):
    chunk = make_chunks(8)[6]
    doc = InclusionProof.for_chunk(tree8, chunk)
    assert doc.leaf_index == 6
    assert doc.chunk_count == 8
    assert doc.root == tree8.root
    assert doc.to_entries() == tree8.proof(chunk)
    assert [s.side for s in doc.steps] == ["R", "L", "L"]


def test_for_missing_chunk_is_none(tree8):
    assert InclusionProof.for_chunk(tree8, b"absent") is None


def test_canonical_bytes(tree8):
    doc = InclusionProof.for_chunk(tree8, make_chunks(8)[1])
    raw = doc.canonical_bytes()
    assert raw == InclusionProof.for_chunk(tree8, make_chunks(8)[1]).canonical_bytes()
    assert b" " not in raw
    parsed = json.loads(raw)
    assert list(parsed) == sorted(parsed)
    assert parsed["algorithm"] == "sha1"
    assert InclusionProof.model_validate_json(raw) == doc


def _doc(tree8, **overrides):
    d = InclusionProof.for_chunk(tree8, make_chunks(8)[0]).model_dump(mode="json")
    d.update(overrides)
    return d


@pytest.mark.parametrize(
    "overrides",
    [
        {"root_hex": "AB" * 20},
        {"root_hex": "ab" * 19},
        {"leaf_index": -1},
        {"leaf_index": "1"},
        {"chunk_count": 1},
        {"steps": []},
        {"algorithm": "sha256"},
        {"extra": True},
    ],
)
def test_invalid_documents(tree8, overrides):
    with pytest.raises(ValidationError):
        InclusionProof.model_validate(_doc(tree8, **overrides))


@pytest.mark.parametrize(
    "step",
    [
        {"side": "C", "digest_hex": "00" * 20},
        {"side": "L", "digest_hex": "00" * 21},
        {"side": "L", "digest_hex": b"\x00" * 20},
        {"side": "L"},
    ],
)
def test_invalid_steps(step):
    with pytest.raises(ValidationError):
        ProofStep.model_validate(step)


def test_for_chunk_colliding_leaf_keeps_its_position():
    from chunkproof_core.digest import leaf_digest

    forged = leaf_digest(b"a") + leaf_digest(b"b")
    tree = MerkleTree.from_chunks([b"a", b"b", forged, b"d"])
    doc = InclusionProof.for_chunk(tree, forged)
    assert doc.leaf_index == 2
    assert len(doc.steps) == 2


def test_spaced_hex_rejected(tree8):
    spaced = " ".join(tree8.root.hex()[i : i + 2] for i in range(0, 40, 2))
    with pytest.raises(ValidationError):
        InclusionProof.model_validate(_doc(tree8, root_hex=spaced))
    with pytest.raises(ValidationError):
        ProofStep.model_validate({"side": "L", "digest_hex": " " + "00" * 20})
