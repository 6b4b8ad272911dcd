"""
Arbor Hash Calculator.

Wraps the one-way hash function used for leaves and parent nodes.
Requires Python 3.11+.
"""

import hashlib
from collections.abc import Callable

from merkle.digest import Digest
from utils.logger import LoggerMixin

HashFunction = Callable[[bytes], bytes]

DEFAULT_ALGORITHM = "sha3_256"


class HashCalculator(LoggerMixin):
    """
    Calculates digests for raw elements and combines child digests.

    The hash function itself is supplied from outside: either the name
    of a hashlib algorithm or any callable mapping bytes to a fixed-width
    byte string. Combining is concatenate-then-hash with the left operand
    first; operands are never reordered.
    """

    def __init__(self, algorithm: str | HashFunction = DEFAULT_ALGORITHM) -> None:
        """
        Initialize the hash calculator.

        Args:
            algorithm: hashlib algorithm name or a bytes -> bytes callable
        """
        if callable(algorithm):
            self._hash = algorithm
            self._name = getattr(algorithm, "__name__", "custom")
        else:
            name = algorithm.lower().replace("-", "_")
            if name.startswith("shake"):
                raise ValueError(f"Variable-length hash {algorithm!r} is not supported")
            # Raises ValueError for unknown names
            hashlib.new(name)
            self._hash = lambda data: hashlib.new(name, data).digest()
            self._name = name

        self._digest_size = len(self._hash(b""))

    @property
    def name(self) -> str:
        """Name of the underlying hash function."""
        return self._name

    @property
    def digest_size(self) -> int:
        """Width in bytes of every digest this calculator produces."""
        return self._digest_size

    def hash_bytes(self, data: bytes) -> Digest:
        """
        Hash raw bytes into a digest.

        Args:
            data: Bytes to hash

        Returns:
            Digest of the configured width
        """
        return Digest.of(self._hash(data), self._digest_size)

    def hash_element(self, element: str) -> Digest:
        """Hash a text element (UTF-8 encoded)."""
        return self.hash_bytes(element.encode("utf-8"))

    def combine(self, left: Digest, right: Digest) -> Digest:
        """
        Derive a parent digest from two children.

        Args:
            left: Left child digest
            right: Right child digest

        Returns:
            hash(left || right)
        """
        return self.hash_bytes(left.value + right.value)

    def __repr__(self) -> str:
        return f"HashCalculator({self._name!r}, digest_size={self._digest_size})"
