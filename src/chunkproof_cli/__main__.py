from __future__ import annotations
import logging
import pathlib
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich import print
from rich.table import Table

from chunkproof_core.digest import to_hex
from chunkproof_core.logutil import setup_logging
from chunkproof_core.merkle import ChunkCountError, MerkleTree, verify_inclusion
from chunkproof_core.models import InclusionProof
from chunkproof_core.settings import settings

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    setup_logging(logging.DEBUG if verbose else settings.log_level)


def _read_file(path: str) -> bytes:
    try:
        return pathlib.Path(path).read_bytes()
    except OSError as e:
        print(f"[red]Cannot read {path}: {e.strerror or e}[/red]")
        raise typer.Exit(code=2)


def _read_chunks(path: str, chunk_size: Optional[int]) -> List[bytes]:
    size = chunk_size or settings.chunk_size
    data = _read_file(path)
    return [data[i : i + size] for i in range(0, len(data), size)]


def _load_tree(chunks: List[bytes]) -> MerkleTree:
    try:
        return MerkleTree.from_chunks(chunks)
    except ChunkCountError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)


def _chunk_at(chunks: List[bytes], index: int) -> bytes:
    if not 0 <= index < len(chunks):
        print(f"[red]Chunk index {index} out of range (0..{len(chunks) - 1})[/red]")
        raise typer.Exit(code=2)
    return chunks[index]


@app.command()
def root(
    path: str,
    chunk_size: Optional[int] = typer.Option(None, min=1, help="Chunk size in bytes"),
):
    """Print the root digest and depth of the tree over FILE's chunks."""
    tree = _load_tree(_read_chunks(path, chunk_size))
    print({"root": to_hex(tree.root), "depth": tree.depth, "chunks": len(tree)})


@app.command()
def prove(
    path: str,
    index: int,
    chunk_size: Optional[int] = typer.Option(None, min=1, help="Chunk size in bytes"),
    out: Optional[str] = typer.Option(None, help="Write the proof here instead of stdout"),
):
    """Emit a canonical JSON inclusion proof for chunk INDEX of FILE."""
    chunks = _read_chunks(path, chunk_size)
    tree = _load_tree(chunks)
    doc = InclusionProof.for_chunk(tree, _chunk_at(chunks, index))
    if doc is None:  # pragma: no cover - every chunk of the file is a leaf
        print("[red]Chunk not found in tree[/red]")
        raise typer.Exit(code=1)
    if out is None:
        typer.echo(doc.canonical_bytes().decode())
        return
    pathlib.Path(out).write_bytes(doc.canonical_bytes())
    print(f"[green]Wrote proof to {out}[/green]")


@app.command()
def verify(
    path: str,
    index: int,
    proof_path: str,
    chunk_size: Optional[int] = typer.Option(None, min=1, help="Chunk size in bytes"),
    root: Optional[str] = typer.Option(None, "--root", help="Trusted root digest (hex)"),
):
    """Check chunk INDEX of FILE against the proof in PROOF_PATH."""
    chunk = _chunk_at(_read_chunks(path, chunk_size), index)
    try:
        doc = InclusionProof.model_validate_json(_read_file(proof_path))
    except ValidationError as e:
        print(f"[red]Malformed proof: {e.error_count()} error(s)[/red]")
        raise typer.Exit(code=2)
    ok = verify_inclusion(chunk, doc.to_entries(), doc.root)
    if root is not None and root.lower() != doc.root_hex:
        ok = False
    print({"proof_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def show(
    path: str,
    chunk_size: Optional[int] = typer.Option(None, min=1, help="Chunk size in bytes"),
):
    """List every node of the tree breadth-first."""
    tree = _load_tree(_read_chunks(path, chunk_size))
    tree.show()
    table = Table("depth", "side", "digest", "chunk")
    for node in tree.walk():
        table.add_row(
            str(node.depth),
            node.side.value,
            to_hex(node.digest),
            "" if node.index is None else str(node.index),
        )
    print(table)


if __name__ == "__main__":
    app()
