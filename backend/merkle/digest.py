"""
Arbor Digest Value Type.

Fixed-width, immutable byte values used as leaves and nodes.
Requires Python 3.11+.
"""

from dataclasses import dataclass

from merkle.errors import InvalidDigestWidthError, MalformedDigestError


@dataclass(frozen=True, slots=True)
class Digest:
    """
    An opaque, fixed-width hash value.

    Two digests are equal iff their bytes are equal. No ordering is
    defined, so digests can never be sorted into a commutative combine.
    """

    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"Digest value must be bytes, got {type(self.value).__name__}"
            )
        if isinstance(self.value, (bytearray, memoryview)):
            object.__setattr__(self, "value", bytes(self.value))
        if not self.value:
            raise InvalidDigestWidthError(expected=1, actual=0)

    @classmethod
    def of(cls, data: bytes, width: int | None = None) -> "Digest":
        """
        Wrap raw bytes, enforcing an expected width when one is given.

        Args:
            data: Digest bytes
            width: Required byte length, or None to accept any width

        Returns:
            Digest wrapping the bytes
        """
        if width is not None and len(data) != width:
            raise InvalidDigestWidthError(expected=width, actual=len(data))
        return cls(bytes(data))

    @classmethod
    def from_hex(cls, text: str, width: int | None = None) -> "Digest":
        """
        Decode a hexadecimal string (an optional 0x prefix is allowed).

        Args:
            text: Hex encoded digest
            width: Required byte length, or None to accept any width

        Returns:
            Decoded Digest
        """
        if not isinstance(text, str):
            raise MalformedDigestError(str(text), reason="not a string")
        cleaned = text.strip()
        if cleaned[:2].lower() == "0x":
            cleaned = cleaned[2:]
        try:
            data = bytes.fromhex(cleaned)
        except ValueError:
            raise MalformedDigestError(text) from None
        if not data:
            raise MalformedDigestError(text, reason="empty")
        return cls.of(data, width)

    @property
    def width(self) -> int:
        """Width in bytes."""
        return len(self.value)

    def hex(self) -> str:
        return self.value.hex()

    def short(self, length: int = 8) -> str:
        """Abbreviated hex form for log lines."""
        return self.value.hex()[:length]

    def __bytes__(self) -> bytes:
        return self.value

    def __len__(self) -> int:
        return len(self.value)

    def __str__(self) -> str:
        return self.value.hex()

    def __repr__(self) -> str:
        return f"Digest({self.value.hex()})"
