"""
Arbor Merkle Tree Errors.

Exception hierarchy raised by tree construction, path derivation
and incremental updates.
Requires Python 3.11+.
"""

from pathlib import Path


class MerkleTreeError(Exception):
    """Base class for all Merkle tree errors."""


class EmptyInputError(MerkleTreeError, ValueError):
    """A tree was requested from an empty leaf set."""

    def __init__(self) -> None:
        super().__init__("A Merkle tree requires at least one leaf")


class IndexOutOfRangeError(MerkleTreeError, IndexError):
    """A leaf index outside [0, leaf_count) was requested."""

    def __init__(self, index: object, leaf_count: int) -> None:
        self.index = index
        self.leaf_count = leaf_count
        super().__init__(
            f"Leaf index {index!r} is out of range for a tree with {leaf_count} leaves"
        )


class NotFoundError(MerkleTreeError, LookupError):
    """A value lookup found no matching leaf."""

    def __init__(self, digest: object) -> None:
        self.digest = digest
        super().__init__(f"{digest} is not a leaf of the tree")


class InvalidDigestWidthError(MerkleTreeError, ValueError):
    """A digest does not have the width the tree was built with."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Digest is {actual} bytes wide, expected {expected} bytes"
        )


class MalformedDigestError(MerkleTreeError, ValueError):
    """Text could not be decoded into a digest."""

    def __init__(self, text: str, reason: str = "not a hexadecimal string") -> None:
        self.text = text
        super().__init__(f"{text!r} is {reason}")


class ElementsFileError(MerkleTreeError):
    """The elements file could not be read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Failed to read file {str(path)!r}: {reason}")
