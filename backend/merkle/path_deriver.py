"""
Arbor Path Deriver.

Derives the sibling path from a leaf to the root.
Requires Python 3.11+.
"""

from merkle.digest import Digest
from merkle.proof import Orientation, Proof, ProofStep
from merkle.tree_builder import MerkleTree
from utils.logger import LoggerMixin


def sibling_step(level: tuple[Digest, ...], index: int) -> ProofStep:
    """
    Build the proof step for the node at ``index`` of one level.

    Three cases:
    - odd index: the sibling is index - 1, on the LEFT
    - even index with a right neighbour: the sibling is index + 1, on the RIGHT
    - even index that is the last node of an odd-sized level: the node was
      paired with itself, so the sibling is its own digest on the RIGHT

    Args:
        level: Digests of one level
        index: Position of the current node in that level

    Returns:
        ProofStep for this level
    """
    sibling = index ^ 1
    if sibling < index:
        return ProofStep(level[sibling], Orientation.LEFT)
    if sibling < len(level):
        return ProofStep(level[sibling], Orientation.RIGHT)
    return ProofStep(level[index], Orientation.RIGHT, duplicated=True)


class PathDeriver(LoggerMixin):
    """
    Answers path queries against one tree snapshot.

    Index queries are O(log n); value queries scan the leaves first
    and are O(n).
    """

    def __init__(self, tree: MerkleTree) -> None:
        self._tree = tree

    def derive(self, index: int) -> tuple[ProofStep, ...]:
        """
        Sibling steps from the leaf at ``index`` up to just below the root.

        Args:
            index: Leaf position, 0 <= index < leaf_count

        Returns:
            One step per level, leaf to root
        """
        current = self._tree.check_index(index)
        steps: list[ProofStep] = []
        for level in self._tree.levels[:-1]:
            steps.append(sibling_step(level, current))
            current //= 2
        return tuple(steps)

    def prove_by_index(self, index: int) -> Proof:
        """
        Proof of inclusion for the leaf at a known position.

        Args:
            index: Leaf position

        Returns:
            Proof whose length equals the tree height
        """
        steps = self.derive(index)
        self.log.debug(
            "proof_derived",
            index=index,
            steps=len(steps),
            duplicated=sum(step.duplicated for step in steps),
        )
        return Proof(
            leaf=self._tree.leaves[index],
            index=index,
            steps=steps,
            root=self._tree.root,
        )

    def prove_by_value(self, value: Digest) -> tuple[Proof, int]:
        """
        Proof of inclusion for the first leaf equal to ``value``.

        Args:
            value: Leaf digest to look up

        Returns:
            Tuple of (proof, index of the matching leaf)
        """
        index = self._tree.index_of(value)
        return self.prove_by_index(index), index
