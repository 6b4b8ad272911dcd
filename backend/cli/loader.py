"""
Arbor Elements Loader.

Reads element files and turns elements into leaf digests.
Requires Python 3.11+.
"""

from collections.abc import Iterable
from pathlib import Path

from merkle.digest import Digest
from merkle.errors import ElementsFileError
from merkle.hash_calculator import HashCalculator
from utils.logger import get_logger

logger = get_logger("cli.loader")


def read_elements(path: Path | str) -> list[str]:
    """
    Read one element per line, ignoring blank lines.

    Args:
        path: Path to the elements file

    Returns:
        Stripped, non-empty lines in file order
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ElementsFileError(path, str(e)) from e

    elements = [line.strip() for line in content.splitlines()]
    elements = [element for element in elements if element]

    logger.debug("elements_read", path=str(path), count=len(elements))
    return elements


def to_digest(element: str, hasher: HashCalculator, hash_element: bool) -> Digest:
    """
    Convert a single element into a leaf digest.

    Args:
        element: Raw element text
        hasher: Hash calculator for hashing and width checks
        hash_element: Hash the element instead of decoding it as hex

    Returns:
        Leaf digest
    """
    if hash_element:
        return hasher.hash_element(element)
    return Digest.from_hex(element)


def to_digests(
    elements: Iterable[str], hasher: HashCalculator, hash_elements: bool
) -> list[Digest]:
    """Convert elements into leaf digests, in order."""
    return [to_digest(element, hasher, hash_elements) for element in elements]
