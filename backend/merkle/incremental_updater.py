"""
Arbor Incremental Updater.

Appends leaves to a tree by recomputing only the affected right edge.
Requires Python 3.11+.
"""

from collections.abc import Iterable

from merkle.digest import Digest
from merkle.errors import InvalidDigestWidthError
from merkle.tree_builder import MerkleTree, build_levels
from utils.logger import LoggerMixin


class IncrementalUpdater(LoggerMixin):
    """
    Produces a new tree snapshot with extra leaves.

    Appending leaf n touches exactly one node per level: the last one.
    At each level the parent at (size - 1) // 2 is recomputed and either
    replaces the previous last parent (which was a self-pairing when the
    level had odd size) or is appended. The result is identical to a
    full rebuild over the extended leaf set.
    """

    def append(self, tree: MerkleTree, digest: Digest) -> MerkleTree:
        """
        Append one leaf.

        Args:
            tree: Current snapshot (left untouched)
            digest: New leaf, same width as the existing leaves

        Returns:
            New MerkleTree including the leaf
        """
        return self.extend(tree, [digest])

    def extend(self, tree: MerkleTree, digests: Iterable[Digest]) -> MerkleTree:
        """
        Append several leaves in order.

        Args:
            tree: Current snapshot (left untouched)
            digests: New leaves

        Returns:
            New MerkleTree including all of the leaves
        """
        new_leaves = list(digests)
        for digest in new_leaves:
            if digest.width != tree.digest_width:
                raise InvalidDigestWidthError(
                    expected=tree.digest_width, actual=digest.width
                )

        if not new_leaves:
            return tree

        levels = [list(level) for level in tree.levels]
        recomputed = 0
        for digest in new_leaves:
            levels[0].append(digest)
            recomputed += self._update_right_edge(levels, tree)

        updated = MerkleTree(
            levels=tuple(tuple(level) for level in levels),
            hasher=tree.hasher,
        )
        self.log.debug(
            "leaves_appended",
            added=len(new_leaves),
            leaves=updated.leaf_count,
            nodes_recomputed=recomputed,
            root=updated.root.short(),
        )
        return updated

    def _update_right_edge(self, levels: list[list[Digest]], tree: MerkleTree) -> int:
        """Recompute the last parent of every level, growing the root if needed."""
        combine = tree.hasher.combine
        recomputed = 0
        height = 0
        while len(levels[height]) > 1:
            level = levels[height]
            parent_index = (len(level) - 1) // 2
            left = level[2 * parent_index]
            right = level[2 * parent_index + 1] if 2 * parent_index + 1 < len(level) else left
            parent = combine(left, right)
            recomputed += 1

            if height + 1 == len(levels):
                levels.append([parent])
            elif parent_index < len(levels[height + 1]):
                levels[height + 1][parent_index] = parent
            else:
                levels[height + 1].append(parent)
            height += 1
        return recomputed

    def rebuild(self, tree: MerkleTree) -> MerkleTree:
        """Full reconstruction from the leaf set alone."""
        return MerkleTree(levels=build_levels(tree.leaves, tree.hasher), hasher=tree.hasher)
