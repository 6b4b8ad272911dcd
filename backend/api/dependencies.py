"""
Arbor API Dependencies.

Shared tree state and dependencies for FastAPI routes.
Requires Python 3.11+.
"""

import threading
from typing import Any

from fastapi import HTTPException

from merkle.digest import Digest
from merkle.hash_calculator import HashCalculator
from merkle.tree_builder import MerkleTree
from utils.logger import LoggerMixin


class TreeStore(LoggerMixin):
    """
    Holds the current tree snapshot for the API.

    Writers replace the snapshot under a lock; readers take the
    snapshot reference and work on it without locking, since trees
    are never mutated in place.
    """

    def __init__(self, hasher: HashCalculator) -> None:
        self.hasher = hasher
        self._tree: MerkleTree | None = None
        self._lock = threading.Lock()

    @property
    def tree(self) -> MerkleTree | None:
        return self._tree

    def replace(self, leaves: list[Digest]) -> MerkleTree:
        """Build a new tree and make it current."""
        tree = MerkleTree.build(leaves, self.hasher)
        with self._lock:
            self._tree = tree
        self.log.info("tree_replaced", leaves=tree.leaf_count, root=tree.root.short())
        return tree

    def append(self, digest: Digest) -> MerkleTree:
        """Append a leaf to the current tree, or start a new one."""
        with self._lock:
            if self._tree is None:
                self._tree = MerkleTree.build([digest], self.hasher)
            else:
                self._tree = self._tree.append(digest)
            return self._tree

    def clear(self) -> None:
        with self._lock:
            self._tree = None


# Shared state - populated by main.py lifespan
_state: dict[str, Any] = {}


def set_tree_store(store: TreeStore | None) -> None:
    """Set the shared tree store instance."""
    _state["tree_store"] = store


def get_tree_store() -> TreeStore | None:
    """Get the shared tree store instance."""
    return _state.get("tree_store")


def require_tree_store() -> TreeStore:
    """
    Dependency that requires a tree store.

    Raises HTTPException if the store is unavailable.
    """
    store = get_tree_store()
    if store is None:
        raise HTTPException(
            status_code=503,
            detail="Tree store unavailable",
        )
    return store


def require_tree(store: TreeStore) -> MerkleTree:
    """Return the current tree snapshot or answer 404."""
    tree = store.tree
    if tree is None:
        raise HTTPException(status_code=404, detail="No tree has been created")
    return tree
