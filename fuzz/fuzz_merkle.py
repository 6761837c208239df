"""Fuzz harness for tree construction & proof round-trips."""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from chunkproof_core.merkle import ChunkCountError, MerkleTree


def TestOneInput(data: bytes):  # noqa: N802
    if not data:
        return
    # Split data deterministically into chunks (bounded count)
    size = max(1, min(32, data[0]))
    chunks = [data[i : i + size] for i in range(1, min(len(data), 1 + size * 64), size)]
    try:
        tree = MerkleTree.from_chunks(chunks)
    except ChunkCountError:
        return
    if 2 ** tree.depth != len(chunks):
        raise RuntimeError("depth does not match chunk count")
    idx = data[-1] % len(chunks)
    proof = tree.proof(chunks[idx])
    if len(proof) != tree.depth:
        raise RuntimeError("proof length does not match depth")
    if not tree.verify(proof, chunks[idx]):
        raise RuntimeError("valid inclusion proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
