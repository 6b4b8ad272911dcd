"""
Arbor Proofs of Inclusion.

Proof value objects and the verifier that recomputes a root from them.
Requires Python 3.11+.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from merkle.digest import Digest
from merkle.hash_calculator import HashCalculator
from utils.logger import LoggerMixin


class Orientation(str, Enum):
    """Side on which a sibling digest sits when combining."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True, slots=True)
class ProofStep:
    """
    One level of a proof.

    ``duplicated`` marks the synthetic pairing of the last node of an
    odd-sized level with itself; the digest is then the node's own
    digest and the orientation is always RIGHT.
    """

    digest: Digest
    orientation: Orientation
    duplicated: bool = False

    def __iter__(self) -> Iterator[Any]:
        # Unpacks as (digest, orientation)
        yield self.digest
        yield self.orientation

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.digest.hex(),
            "direction": self.orientation.value,
            "duplicated": self.duplicated,
        }


@dataclass(frozen=True)
class Proof:
    """
    Ordered sibling path from a leaf to the root.

    Produced fresh for each query and never mutated.
    """

    leaf: Digest
    index: int
    steps: tuple[ProofStep, ...] = field(default_factory=tuple)
    root: Digest | None = None

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[ProofStep]:
        return iter(self.steps)

    def pairs(self) -> list[tuple[Digest, Orientation]]:
        """The (digest, orientation) pairs, leaf to root."""
        return [(step.digest, step.orientation) for step in self.steps]

    def to_dict(self) -> dict[str, Any]:
        return {
            "leaf": self.leaf.hex(),
            "index": self.index,
            "root": self.root.hex() if self.root is not None else None,
            "steps": [step.to_dict() for step in self.steps],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Proof":
        """
        Rebuild a proof from its to_dict() form.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong shape or holds bad hex
        """
        if not isinstance(data, dict):
            raise ValueError("proof must be an object")
        steps = data.get("steps", [])
        if not isinstance(steps, list):
            raise ValueError("proof steps must be a list")
        if not all(isinstance(step, dict) for step in steps):
            raise ValueError("each proof step must be an object")

        root = data.get("root")
        return cls(
            leaf=Digest.from_hex(data["leaf"]),
            index=int(data.get("index", 0)),
            steps=tuple(
                ProofStep(
                    digest=Digest.from_hex(step["hash"]),
                    orientation=Orientation(step["direction"]),
                    duplicated=bool(step.get("duplicated", False)),
                )
                for step in steps
            ),
            root=Digest.from_hex(root) if root else None,
        )


class ProofVerifier(LoggerMixin):
    """
    Recomputes a root from a starting digest and a sibling path.

    The pairing order mirrors tree construction exactly: a LEFT sibling
    is the left operand of combine, a RIGHT sibling the right operand.
    """

    def __init__(self, hasher: HashCalculator | None = None) -> None:
        self._hasher = hasher or HashCalculator()

    def compute_root(
        self,
        proof: Proof | Iterable[tuple[Digest, Orientation]],
        starting_digest: Digest,
    ) -> Digest:
        """
        Fold a proof into a candidate root.

        Args:
            proof: Proof or (digest, orientation) pairs, leaf to root
            starting_digest: Digest the path starts from

        Returns:
            Candidate root digest
        """
        current = starting_digest
        for sibling, orientation in proof:
            if Orientation(orientation) is Orientation.LEFT:
                current = self._hasher.combine(sibling, current)
            else:
                current = self._hasher.combine(current, sibling)
        return current

    def verify(
        self,
        proof: Proof | Iterable[tuple[Digest, Orientation]],
        starting_digest: Digest,
        expected_root: Digest,
    ) -> bool:
        """
        Check membership of a digest against a known root.

        Args:
            proof: Proof or (digest, orientation) pairs, leaf to root
            starting_digest: Digest claimed to be a leaf
            expected_root: Root the path must reproduce

        Returns:
            True if the recomputed root equals expected_root
        """
        computed = self.compute_root(proof, starting_digest)
        included = computed == expected_root
        self.log.debug(
            "proof_verified",
            leaf=starting_digest.short(),
            included=included,
        )
        return included
