"""
Arbor Interactive Shell.

Read-eval-print loop for building and querying a Merkle tree.
Requires Python 3.11+.
"""

import argparse
import shlex
from pathlib import Path
from typing import NoReturn

from cli.loader import read_elements, to_digest, to_digests
from cli.renderer import render_proof, render_tree
from merkle.digest import Digest
from merkle.errors import (
    ElementsFileError,
    EmptyInputError,
    IndexOutOfRangeError,
    InvalidDigestWidthError,
    MalformedDigestError,
    NotFoundError,
)
from merkle.hash_calculator import HashCalculator
from merkle.tree_builder import MerkleTree
from utils.config import Settings, get_settings
from utils.logger import LoggerMixin

INVALID_COMMAND = "That's not a valid command - use the help command if you are stuck."

HELP_TEXT = """COMMANDS

-- CREATE --
create <path/to/elements.txt> [--hash]
- Creates a new Merkle Tree from a file with one element per line. If the --hash flag is present, the elements are hashed before being added to the tree.

-- SHOW --
show
- Shows the current state of the Merkle Tree.

-- ROOT --
root
- Shows the Merkle Root and the number of leaves.

-- VERIFY --
verify <element> [index] [--hash]
- Verifies if an element is included in the tree (at the given index, if any).

-- PROOF --
proof <element> [index] [--hash]
- Shows the proof of inclusion for an element.

-- ADD --
add <element> [--hash]
- Adds an element to the tree. If the --hash flag is present, the element is hashed before being added to the tree.

-- EXIT --
exit
- Exits the program."""


class ShellUsageError(Exception):
    """Raised instead of exiting when a command line does not parse."""


class CommandParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing usage and exiting."""

    def error(self, message: str) -> NoReturn:
        raise ShellUsageError(message)

    def exit(self, status: int = 0, message: str | None = None) -> NoReturn:
        raise ShellUsageError(message or "")


def build_command_parser() -> CommandParser:
    """Build the parser for one line of shell input."""
    parser = CommandParser(prog="", add_help=False)
    commands = parser.add_subparsers(dest="command", required=True, parser_class=CommandParser)

    create = commands.add_parser("create", add_help=False)
    create.add_argument("path", type=Path)
    create.add_argument("--hash", action="store_true")

    commands.add_parser("show", add_help=False)
    commands.add_parser("root", add_help=False)
    commands.add_parser("help", add_help=False)
    commands.add_parser("exit", add_help=False)

    for name in ("verify", "proof"):
        query = commands.add_parser(name, add_help=False)
        query.add_argument("elem")
        query.add_argument("index", type=int, nargs="?", default=None)
        query.add_argument("--hash", action="store_true")

    add = commands.add_parser("add", add_help=False)
    add.add_argument("elem")
    add.add_argument("--hash", action="store_true")

    return parser


class MerkleShell(LoggerMixin):
    """
    Interactive command shell around a single MerkleTree.

    Every mutating command replaces the current tree with a new
    snapshot; proofs and renders always see a complete tree.
    """

    def __init__(
        self,
        tree: MerkleTree | None = None,
        hasher: HashCalculator | None = None,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize the shell.

        Args:
            tree: Starting tree; defaults to a single leaf holding the hash
                of the empty string
            hasher: Hash calculator; defaults to the configured algorithm
            settings: Application settings
        """
        self._settings = settings or get_settings()
        self._hasher = hasher or (
            tree.hasher if tree is not None else HashCalculator(self._settings.tree.hash_algorithm)
        )
        self.tree = tree or MerkleTree.build([self._hasher.hash_element("")], self._hasher)
        self._parser = build_command_parser()
        self.running = False

    @classmethod
    def from_file(
        cls,
        path: Path | str,
        hash_elements: bool = False,
        hasher: HashCalculator | None = None,
        settings: Settings | None = None,
    ) -> "MerkleShell":
        """Create a shell whose tree is loaded from an elements file."""
        settings = settings or get_settings()
        hasher = hasher or HashCalculator(settings.tree.hash_algorithm)
        digests = to_digests(read_elements(path), hasher, hash_elements)
        return cls(MerkleTree.build(digests, hasher), hasher, settings)

    def execute(self, line: str) -> bool:
        """
        Run one line of input.

        Args:
            line: Raw command line

        Returns:
            False once the shell should stop, True otherwise
        """
        try:
            words = shlex.split(line)
        except ValueError:
            print("error: Invalid quoting")
            return True

        if not words:
            return True

        try:
            args = self._parser.parse_args(words)
        except ShellUsageError as e:
            self.log.debug("invalid_command", line=line, error=str(e))
            print(INVALID_COMMAND)
            return True

        if args.command == "create":
            self.handle_create(args.path, args.hash)
        elif args.command == "show":
            print(render_tree(self.tree))
        elif args.command == "root":
            print(f"Merkle Root: {self.tree.root.hex()} ({self.tree.leaf_count} leaves)")
        elif args.command == "help":
            print(HELP_TEXT)
        elif args.command == "verify":
            self.handle_verify(args.elem, args.index, args.hash)
        elif args.command == "proof":
            self.handle_proof(args.elem, args.index, args.hash)
        elif args.command == "add":
            self.handle_add(args.elem, args.hash)
        elif args.command == "exit":
            print("Exiting...")
            return False
        return True

    def _digest(self, elem: str, hash_flag: bool) -> Digest | None:
        """Convert user input into a digest, reporting malformed input."""
        try:
            return to_digest(elem, self._hasher, hash_flag or self._settings.tree.hash_before_insert)
        except MalformedDigestError as e:
            self.log.warning("malformed_element", element=elem)
            print(f"{e}. Use --hash to hash raw elements.")
            return None

    def handle_create(self, path: Path, hash_flag: bool) -> None:
        """Replace the tree with one built from an elements file."""
        hash_elements = hash_flag or self._settings.tree.hash_before_insert
        try:
            digests = to_digests(read_elements(path), self._hasher, hash_elements)
            self.tree = MerkleTree.build(digests, self._hasher)
        except ElementsFileError as e:
            print(str(e))
            return
        except EmptyInputError:
            print(f"{str(path)!r} contains no elements, the tree was not changed.")
            return
        except (MalformedDigestError, InvalidDigestWidthError) as e:
            self.log.warning("invalid_elements_file", path=str(path), error=str(e))
            print(f"Invalid element in {str(path)!r}: {e}")
            return

        self.log.info("tree_created", path=str(path), leaves=self.tree.leaf_count)
        print(
            f"Merkle Tree created from file: {str(path)!r}, "
            "use 'show' to view the current tree."
        )

    def handle_verify(self, elem: str, index: int | None, hash_flag: bool) -> None:
        """Report whether an element is a leaf (at an index, if given)."""
        digest = self._digest(elem, hash_flag)
        if digest is None:
            return

        included = self.tree.verify_leaf(digest, index)
        where = f" at index {index}" if index is not None else ""
        if included:
            print(
                f"{elem!r} is included in the tree{where}. "
                "Run the `proof` command to see its Proof of Inclusion."
            )
        else:
            print(f"{elem!r} is not included in the tree{where}.")

    def handle_proof(self, elem: str, index: int | None, hash_flag: bool) -> None:
        """Print the proof of inclusion for an element."""
        digest = self._digest(elem, hash_flag)
        if digest is None:
            return

        try:
            if index is None:
                proof, _ = self.tree.prove_value(digest)
            elif self.tree.leaf(index) != digest:
                raise NotFoundError(digest)
            else:
                proof = self.tree.prove(index)
        except (IndexOutOfRangeError, NotFoundError):
            where = f" at index {index}" if index is not None else ""
            print(f"{elem!r} is not included in the tree{where}.")
            return

        print(render_proof(proof))

    def handle_add(self, elem: str, hash_flag: bool) -> None:
        """Append an element as a new leaf."""
        digest = self._digest(elem, hash_flag)
        if digest is None:
            return

        if self._settings.cli.reject_duplicates and self.tree.contains(digest):
            print(f"{elem} is already in the tree!")
            return

        try:
            self.tree = self.tree.append(digest)
        except InvalidDigestWidthError as e:
            print(f"{elem!r} cannot be added: {e}")
            return

        print(f"{elem!r} added to the tree.")

    def run(self) -> None:
        """Read and execute commands until `exit` or end of input."""
        print("Welcome to the Merkle Tree CLI, type 'help' to see the list of commands.")
        self.running = True
        while self.running:
            try:
                line = input(self._settings.cli.prompt)
            except EOFError:
                print()
                break
            self.running = self.execute(line)
        self.running = False
