"""
Arbor Command Line Entry Point.

Starts the interactive Merkle tree shell.
Requires Python 3.11+.

Usage:
    arbor [--file elements.txt] [--hash] [--algorithm sha3_256]
"""

import argparse
import sys
from pathlib import Path

from cli.shell import MerkleShell
from merkle.errors import MerkleTreeError
from merkle.hash_calculator import HashCalculator
from utils.config import get_settings
from utils.logger import configure_logging, get_logger

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arbor",
        description="Interactive Merkle tree builder and proof explorer",
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Elements file (one element per line) to build the initial tree from",
    )
    parser.add_argument(
        "--hash",
        action="store_true",
        default=False,
        help="Hash the elements of --file before inserting them",
    )
    parser.add_argument(
        "--algorithm",
        default=None,
        help="hashlib algorithm to use instead of the configured one",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    configure_logging()
    settings = get_settings()

    try:
        hasher = HashCalculator(args.algorithm or settings.tree.hash_algorithm)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        if args.file is not None:
            shell = MerkleShell.from_file(
                args.file,
                hash_elements=args.hash or settings.tree.hash_before_insert,
                hasher=hasher,
                settings=settings,
            )
            print(
                f"Merkle Tree created from file: {str(args.file)!r}, "
                "use 'show' to view the current tree."
            )
        else:
            shell = MerkleShell(hasher=hasher, settings=settings)
    except MerkleTreeError as e:
        logger.error("startup_failed", error=str(e))
        print(f"Error: {e}")
        sys.exit(1)

    logger.debug("shell_starting", algorithm=hasher.name, leaves=shell.tree.leaf_count)

    try:
        shell.run()
    except KeyboardInterrupt:
        print("\nExiting...")


if __name__ == "__main__":
    main()
