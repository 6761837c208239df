"""Binary hash tree over a power-of-two list of chunks, with inclusion proofs.

Leaves hash the raw chunk, internal nodes hash the concatenation of their
children's digests (left first). A proof is the list of sibling digests from
the leaf up to the level below the root, each tagged with the side the sibling
sits on, so a verifier holding only the root digest can replay it.
"""
from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Sequence

from .digest import DIGEST_SIZE, leaf_digest, node_digest
from .logutil import get_logger
from .settings import settings

log = get_logger("chunkproof.merkle")


class ChunkCountError(ValueError):
    """Raised when the chunk count is below two or not a power of two."""

    def __init__(self, count: int):
        super().__init__(f"chunk count must be a power of two >= 2, got {count}")
        self.count = count


class Side(str, Enum):
    LEFT = "L"
    RIGHT = "R"
    ROOT = "C"


class ProofEntry(NamedTuple):
    side: Side
    digest: bytes


@dataclass(frozen=True, eq=False)
class Node:
    digest: bytes
    side: Side
    depth: int = 0
    left: Optional["Node"] = field(default=None, repr=False)
    right: Optional["Node"] = field(default=None, repr=False)
    payload: Optional[bytes] = field(default=None, repr=False)
    index: Optional[int] = None  # position in the chunk list, leaves only

    @property
    def is_leaf(self) -> bool:
        return self.payload is not None and self.left is None and self.right is None


def _is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def _tagged(node: Node, side: Side) -> Node:
    return node if node.side is side else replace(node, side=side)


@dataclass
class MerkleTree:
    root_node: Node
    leaves: List[Node]  # in chunk order
    _leaf_index: Dict[bytes, int] = field(default_factory=dict, repr=False)

    @classmethod
    def from_chunks(cls, chunks: Sequence[bytes]) -> "MerkleTree":
        n = len(chunks)
        if n < 2 or not _is_power_of_two(n):
            raise ChunkCountError(n)
        queue = deque(
            Node(
                digest=leaf_digest(bytes(c)),
                side=Side.LEFT if i % 2 == 0 else Side.RIGHT,
                payload=bytes(c),
                index=i,
            )
            for i, c in enumerate(chunks)
        )
        # Each level has an even count, so pairs never straddle two levels.
        # A new parent is tagged ROOT until it is itself paired.
        while len(queue) > 1:
            first = _tagged(queue.popleft(), Side.LEFT)
            second = _tagged(queue.popleft(), Side.RIGHT)
            queue.append(
                Node(
                    digest=node_digest(first.digest, second.digest),
                    side=Side.ROOT,
                    depth=first.depth + 1,
                    left=first,
                    right=second,
                )
            )
        root = queue.pop()

        leaves = sorted((x for x in _walk(root) if x.is_leaf), key=lambda x: x.index)
        index: Dict[bytes, int] = {}
        for leaf in leaves:
            index.setdefault(leaf.digest, leaf.index)
        tree = cls(root, leaves, index)
        log.debug("built tree: %d leaves, depth %d, root %s", n, tree.depth, tree.root)
        return tree

    @property
    def root(self) -> bytes:
        return self.root_node.digest

    @property
    def depth(self) -> int:
        return self.root_node.depth

    def __len__(self) -> int:
        return len(self.leaves)

    # -- lookup ---------------------------------------------------------------

    def find_node(self, digest: bytes) -> Optional[Node]:
        """First node in pre-order (self, left, right) carrying ``digest``.

        May return an internal node if a leaf digest collides with one; callers
        that need a leaf must check ``is_leaf``.
        """
        return _find(self.root_node, digest)

    def find_leaf(self, digest: bytes) -> Optional[Node]:
        """Leaf carrying ``digest`` (first in chunk order), via the digest index."""
        idx = self._leaf_index.get(digest)
        return None if idx is None else self.leaves[idx]

    def contains(self, chunk: bytes) -> bool:
        """Membership check; tells a missing chunk apart from a short proof."""
        return leaf_digest(chunk) in self._leaf_index

    def path_to_node(self, target: Node) -> List[Node]:
        """Root-first path ending at the node whose digest matches ``target``."""
        return _path(self.root_node, target.digest, [])

    def _leaf_path(self, leaf: Node) -> List[Node]:
        """Root-first path to ``leaf``, steered by the bits of its chunk index."""
        path = [self.root_node]
        for level in range(self.depth - 1, -1, -1):
            node = path[-1]
            path.append(node.right if (leaf.index >> level) & 1 else node.left)
        return path

    # -- proofs ---------------------------------------------------------------

    def proof(self, chunk: bytes) -> List[ProofEntry]:
        """Sibling digests for ``chunk``, immediate sibling first.

        Returns an empty list when the chunk is not a leaf of this tree; use
        ``contains`` to disambiguate.
        """
        h = leaf_digest(chunk)
        node = self.find_leaf(h)
        if node is None or not node.is_leaf:
            log.warning("no leaf for chunk digest %s", h)
            return []
        path = self._leaf_path(node)
        siblings: List[ProofEntry] = []
        for parent, child in zip(path, path[1:]):
            sibling = parent.right if parent.left is child else parent.left
            siblings.append(ProofEntry(sibling.side, sibling.digest))
        siblings.reverse()
        return siblings

    def verify(self, proof: Sequence[ProofEntry], chunk: bytes) -> bool:
        if not proof:
            # Only a single-leaf tree could verify with no siblings.
            return self.root_node.is_leaf and leaf_digest(chunk) == self.root
        return verify_inclusion(chunk, proof, self.root)

    # -- diagnostics ----------------------------------------------------------

    def walk(self) -> Iterator[Node]:
        """Every node, breadth-first from the root."""
        return _walk(self.root_node)

    def show(self) -> None:
        for node in self.walk():
            log.debug("%s side=%s depth=%d", node.digest, node.side.value, node.depth)


def _walk(root: Node) -> Iterator[Node]:
    queue = deque([root])
    while queue:
        node = queue.popleft()
        yield node
        if node.left is not None:
            queue.append(node.left)
        if node.right is not None:
            queue.append(node.right)


def _find(node: Optional[Node], digest: bytes) -> Optional[Node]:
    if node is None:
        return None
    if node.digest == digest:
        return node
    return _find(node.left, digest) or _find(node.right, digest)


def _path(node: Optional[Node], digest: bytes, path: List[Node]) -> List[Node]:
    if node is None:
        return []
    if node.digest == digest:
        return path + [node]
    return _path(node.left, digest, path + [node]) or _path(
        node.right, digest, path + [node]
    )


def verify_inclusion(chunk: bytes, proof: Sequence[ProofEntry], root: bytes) -> bool:
    """Replay ``proof`` from ``chunk`` and compare against a trusted root digest.

    Never raises: an empty or malformed proof is simply not valid.
    """
    if not proof or not isinstance(chunk, (bytes, bytearray, memoryview)):
        return False
    try:
        entries = list(proof)
    except TypeError:
        return False
    h = leaf_digest(bytes(chunk))
    for entry in entries:
        try:
            side, sibling = entry
        except (TypeError, ValueError):
            return False
        if not isinstance(sibling, (bytes, bytearray)) or len(sibling) != DIGEST_SIZE:
            return False
        if side == Side.LEFT:
            h = node_digest(bytes(sibling), h)
        elif side == Side.RIGHT:
            h = node_digest(h, bytes(sibling))
        else:
            return False
        if settings.trace_verify:
            log.debug("intermediate node digest: %s", h)
    return h == root
