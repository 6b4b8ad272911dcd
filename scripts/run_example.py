#!/usr/bin/env python3
"""
Arbor Example Runner.

Loads an elements file into a tree and opens the interactive shell.
Requires Python 3.11+.

Usage:
    python scripts/run_example.py examples/strings.txt --hash
    python scripts/run_example.py examples/hashes.txt
"""

import argparse
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from cli.shell import MerkleShell
from merkle.errors import MerkleTreeError
from utils.logger import configure_logging


configure_logging()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Open the Arbor shell on a tree built from an elements file"
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Elements file, one element per line",
    )
    parser.add_argument(
        "--hash",
        action="store_true",
        help="Hash the elements instead of reading them as hex digests",
    )

    args = parser.parse_args()

    try:
        shell = MerkleShell.from_file(args.path, hash_elements=args.hash)
    except MerkleTreeError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(
        f"In this example the Merkle Tree is created from file: {str(args.path)!r}, "
        "use 'show' to view the current tree."
    )
    shell.run()


if __name__ == "__main__":
    main()
