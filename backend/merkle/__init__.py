"""
Arbor Merkle Tree Package.

Binary hash trees over fixed-width digests with proofs of inclusion.
Requires Python 3.11+.
"""

from collections.abc import Iterable, Sequence

from merkle.digest import Digest
from merkle.errors import (
    ElementsFileError,
    EmptyInputError,
    IndexOutOfRangeError,
    InvalidDigestWidthError,
    MalformedDigestError,
    MerkleTreeError,
    NotFoundError,
)
from merkle.hash_calculator import HashCalculator
from merkle.incremental_updater import IncrementalUpdater
from merkle.path_deriver import PathDeriver
from merkle.proof import Orientation, Proof, ProofStep, ProofVerifier
from merkle.tree_builder import MerkleTree


def build(leaves: Sequence[Digest], hasher: HashCalculator | None = None) -> MerkleTree:
    """Build a tree over a non-empty sequence of digests."""
    return MerkleTree.build(leaves, hasher)


def append(tree: MerkleTree, new_digest: Digest) -> MerkleTree:
    """Return a new tree with ``new_digest`` appended as the last leaf."""
    return IncrementalUpdater().append(tree, new_digest)


def prove_by_index(tree: MerkleTree, index: int) -> Proof:
    """Proof of inclusion for the leaf at ``index``."""
    return PathDeriver(tree).prove_by_index(index)


def prove_by_value(tree: MerkleTree, value: Digest) -> tuple[Proof, int]:
    """Proof of inclusion and position of the first leaf equal to ``value``."""
    return PathDeriver(tree).prove_by_value(value)


def verify(
    proof: Proof | Iterable[tuple[Digest, Orientation]],
    starting_digest: Digest,
    expected_root: Digest,
    hasher: HashCalculator | None = None,
) -> bool:
    """Recompute the root from ``starting_digest`` and compare."""
    return ProofVerifier(hasher).verify(proof, starting_digest, expected_root)


def root(tree: MerkleTree) -> Digest:
    return tree.root


def leaf_count(tree: MerkleTree) -> int:
    return tree.leaf_count


__all__ = [
    # Value types
    "Digest",
    "Orientation",
    "Proof",
    "ProofStep",
    # Components
    "HashCalculator",
    "MerkleTree",
    "PathDeriver",
    "ProofVerifier",
    "IncrementalUpdater",
    # Errors
    "MerkleTreeError",
    "EmptyInputError",
    "IndexOutOfRangeError",
    "NotFoundError",
    "InvalidDigestWidthError",
    "MalformedDigestError",
    "ElementsFileError",
    # Operations
    "build",
    "append",
    "prove_by_index",
    "prove_by_value",
    "verify",
    "root",
    "leaf_count",
]
