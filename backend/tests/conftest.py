"""
Arbor Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import hashlib
import logging
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

from merkle.digest import Digest
from merkle.hash_calculator import HashCalculator


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    """Keep structured log lines out of captured stdout."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def hasher() -> HashCalculator:
    """Default SHA3-256 hash calculator."""
    return HashCalculator()


@pytest.fixture
def sha256_hasher() -> HashCalculator:
    """Stand-in hash function for hand-computed trees."""

    def sha256(data: bytes) -> bytes:
        return hashlib.sha256(data).digest()

    return HashCalculator(sha256)


@pytest.fixture
def make_leaves(hasher: HashCalculator) -> Callable[[int], list[Digest]]:
    """Factory producing n distinct leaf digests."""

    def factory(count: int) -> list[Digest]:
        return [hasher.hash_element(f"something{i:02d}") for i in range(count)]

    return factory


@pytest.fixture
def elements_file(tmp_path: Path) -> Path:
    """Elements file with raw (unhashed) elements and a blank line."""
    file_path = tmp_path / "elements.txt"
    file_path.write_text("alpha\n  beta  \n\ngamma\ndelta\n")
    return file_path


@pytest.fixture
def hashes_file(tmp_path: Path, hasher: HashCalculator) -> Path:
    """Elements file holding hex digests, one per line."""
    file_path = tmp_path / "hashes.txt"
    lines = [hasher.hash_element(e).hex() for e in ("alpha", "beta", "gamma")]
    file_path.write_text("\n".join(lines) + "\n")
    return file_path
