"""
Arbor Tree Builder.

Bottom-up construction of the level arena and the MerkleTree snapshot.
Requires Python 3.11+.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from merkle.digest import Digest
from merkle.errors import (
    EmptyInputError,
    IndexOutOfRangeError,
    InvalidDigestWidthError,
    NotFoundError,
)
from merkle.hash_calculator import HashCalculator
from utils.logger import get_logger

if TYPE_CHECKING:
    from merkle.proof import Proof

logger = get_logger("merkle.tree_builder")

Level = tuple[Digest, ...]


def check_widths(digests: Iterable[Digest], width: int) -> None:
    """Raise InvalidDigestWidthError for the first digest of the wrong width."""
    for digest in digests:
        if digest.width != width:
            raise InvalidDigestWidthError(expected=width, actual=digest.width)


def pair_level(level: Sequence[Digest], hasher: HashCalculator) -> Level:
    """
    Combine adjacent digests of one level into the next level up.

    When the level has an odd number of nodes the last node is paired
    with a copy of itself. The copy is only used for this combine.

    Args:
        level: Digests of the current level, left to right
        hasher: Hash calculator providing combine

    Returns:
        Parent level, ceil(len(level) / 2) digests
    """
    parents: list[Digest] = []
    for i in range(0, len(level), 2):
        left = level[i]
        right = level[i + 1] if i + 1 < len(level) else left
        parents.append(hasher.combine(left, right))
    return tuple(parents)


def build_levels(leaves: Sequence[Digest], hasher: HashCalculator) -> tuple[Level, ...]:
    """
    Build every level from the leaves up to the root.

    Each level is finished before the next one is started.

    Args:
        leaves: Ordered leaf digests (level 0)
        hasher: Hash calculator providing combine

    Returns:
        Tuple of levels; levels[0] is the leaves, levels[-1] is (root,)
    """
    if not leaves:
        raise EmptyInputError()

    levels: list[Level] = [tuple(leaves)]
    while len(levels[-1]) > 1:
        levels.append(pair_level(levels[-1], hasher))
    return tuple(levels)


@dataclass(frozen=True)
class MerkleTree:
    """
    Immutable snapshot of a Merkle tree.

    The leaf set is the single source of truth; ``levels`` is a derived
    cache of node digests indexed by (level, position). Appending returns
    a new snapshot, so concurrent readers never observe a partial update.
    """

    levels: tuple[Level, ...]
    hasher: HashCalculator = field(repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.levels or not self.levels[0]:
            raise EmptyInputError()
        if len(self.levels[-1]) != 1:
            raise ValueError("The last level of a tree must hold exactly the root")

    @classmethod
    def build(
        cls,
        leaves: Iterable[Digest],
        hasher: HashCalculator | None = None,
    ) -> "MerkleTree":
        """
        Build a tree over an ordered, non-empty sequence of digests.

        Duplicate values at different positions are kept; leaves are
        addressed by position, not by value.

        Args:
            leaves: Leaf digests, all of the same width
            hasher: Hash calculator (defaults to SHA3-256)

        Returns:
            New MerkleTree
        """
        hasher = hasher or HashCalculator()
        leaf_tuple = tuple(leaves)
        if not leaf_tuple:
            raise EmptyInputError()

        check_widths(leaf_tuple, leaf_tuple[0].width)

        tree = cls(levels=build_levels(leaf_tuple, hasher), hasher=hasher)
        logger.debug(
            "tree_built",
            leaves=tree.leaf_count,
            height=tree.height,
            root=tree.root.short(),
        )
        return tree

    @classmethod
    def from_elements(
        cls,
        elements: Iterable[str | bytes],
        hasher: HashCalculator | None = None,
    ) -> "MerkleTree":
        """Hash raw elements and build a tree over the resulting digests."""
        hasher = hasher or HashCalculator()
        return cls.build(
            (
                hasher.hash_element(e) if isinstance(e, str) else hasher.hash_bytes(e)
                for e in elements
            ),
            hasher,
        )

    @property
    def root(self) -> Digest:
        return self.levels[-1][0]

    @property
    def leaves(self) -> Level:
        return self.levels[0]

    @property
    def leaf_count(self) -> int:
        return len(self.levels[0])

    @property
    def height(self) -> int:
        """Number of levels between the leaves and the root."""
        return len(self.levels) - 1

    @property
    def digest_width(self) -> int:
        return self.levels[0][0].width

    def leaf(self, index: int) -> Digest:
        """Get the leaf digest at a position."""
        return self.leaves[self.check_index(index)]

    def check_index(self, index: int) -> int:
        """
        Validate a leaf index.

        Negative indices are rejected rather than counted from the end.
        """
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or index < 0
            or index >= self.leaf_count
        ):
            raise IndexOutOfRangeError(index, self.leaf_count)
        return index

    def index_of(self, value: Digest) -> int:
        """
        Find the first position holding a digest.

        Linear in the number of leaves.
        """
        for index, leaf in enumerate(self.leaves):
            if leaf == value:
                return index
        raise NotFoundError(value)

    def contains(self, value: Digest) -> bool:
        return value in self.leaves

    def append(self, digest: Digest) -> "MerkleTree":
        """Return a new tree with one more leaf."""
        from merkle.incremental_updater import IncrementalUpdater

        return IncrementalUpdater().append(self, digest)

    def prove(self, index: int) -> "Proof":
        """Proof of inclusion for the leaf at an index."""
        from merkle.path_deriver import PathDeriver

        return PathDeriver(self).prove_by_index(index)

    def prove_value(self, value: Digest) -> tuple["Proof", int]:
        """Proof of inclusion for the first leaf equal to a value."""
        from merkle.path_deriver import PathDeriver

        return PathDeriver(self).prove_by_value(value)

    def verify_leaf(self, value: Digest, index: int | None = None) -> bool:
        """
        Check that a value is a leaf of this tree.

        With an index, the leaf at that position must equal the value.
        Without one, the first matching leaf is used. Unknown values and
        bad indices yield False.

        Args:
            value: Candidate leaf digest
            index: Expected position, if known

        Returns:
            True if the recomputed root matches this tree's root
        """
        from merkle.proof import ProofVerifier

        try:
            if index is None:
                proof, index = self.prove_value(value)
            else:
                if self.leaf(index) != value:
                    return False
                proof = self.prove(index)
        except (IndexOutOfRangeError, NotFoundError):
            return False

        return ProofVerifier(self.hasher).verify(proof, value, self.root)

    def __len__(self) -> int:
        return self.leaf_count

    def __iter__(self) -> Iterator[Digest]:
        return iter(self.leaves)

    def to_dict(self, include_levels: bool = True) -> dict[str, Any]:
        """Serialize to a JSON-friendly dictionary (hex digests)."""
        data: dict[str, Any] = {
            "root": self.root.hex(),
            "leaf_count": self.leaf_count,
            "height": self.height,
            "algorithm": self.hasher.name,
        }
        if include_levels:
            data["levels"] = [[d.hex() for d in level] for level in self.levels]
        return data
