import sys
from pathlib import Path

import pytest

# Ensure the 'src' directory is on sys.path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def four_chunks():
    return [bytes([0]), bytes([1]), bytes([2]), bytes([3])]


@pytest.fixture
def tree4(four_chunks):
    from chunkproof_core.merkle import MerkleTree

    return MerkleTree.from_chunks(four_chunks)
