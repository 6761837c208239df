"""Inclusion proof fuzzing with mutated proofs and chunks."""
from __future__ import annotations
import atheris
import sys
import random

with atheris.instrument_imports():
    from chunkproof_core.merkle import MerkleTree, ProofEntry, verify_inclusion


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    # Derive chunk size, leaf count & mutation seed
    seed = int.from_bytes(data[:4], "little")
    random.seed(seed)
    chunk_len = 1 + (data[4] % 32)
    count = 2 ** (1 + data[5] % 4)
    body = data[6:]
    chunks = [body[i : i + chunk_len] for i in range(0, chunk_len * count, chunk_len)]
    if len(chunks[-1]) != chunk_len:
        return
    tree = MerkleTree.from_chunks(chunks)
    idx = seed % count
    proof = list(tree.proof(chunks[idx]))
    # With some probability, flip one byte of one sibling digest
    if random.random() < 0.3:
        pos = random.randrange(len(proof))
        side, sib = proof[pos]
        at = random.randrange(len(sib))
        mutated = sib[:at] + bytes([sib[at] ^ 0x01]) + sib[at + 1 :]
        proof[pos] = ProofEntry(side, mutated)
        if verify_inclusion(chunks[idx], proof, tree.root):
            raise RuntimeError("tampered proof unexpectedly verified")
    elif random.random() < 0.3:
        other = chunks[idx] + b"\x00"
        if verify_inclusion(other, proof, tree.root):
            raise RuntimeError("foreign chunk unexpectedly verified")
    elif not verify_inclusion(chunks[idx], proof, tree.root):
        raise RuntimeError("valid proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
