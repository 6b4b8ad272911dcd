"""
Tests for the interactive shell, loader and renderer.

Requires Python 3.11+.
"""

from pathlib import Path

import pytest

from cli.loader import read_elements, to_digests
from cli.main import main
from cli.renderer import render_proof, render_tree
from cli.shell import INVALID_COMMAND, MerkleShell
from merkle import ElementsFileError, HashCalculator, MalformedDigestError, MerkleTree
from utils.config import CLISettings, Settings


class TestLoader:
    """Test cases for element file loading."""

    def test_read_elements_strips_and_skips_blank(self, elements_file: Path):
        assert read_elements(elements_file) == ["alpha", "beta", "gamma", "delta"]

    def test_read_missing_file(self, tmp_path: Path):
        with pytest.raises(ElementsFileError):
            read_elements(tmp_path / "missing.txt")

    def test_to_digests_hashing(self, hasher: HashCalculator):
        digests = to_digests(["alpha", "beta"], hasher, hash_elements=True)
        assert digests == [hasher.hash_element("alpha"), hasher.hash_element("beta")]

    def test_to_digests_hex(self, hasher: HashCalculator):
        digest = hasher.hash_element("alpha")
        assert to_digests([digest.hex()], hasher, hash_elements=False) == [digest]

    def test_to_digests_malformed(self, hasher: HashCalculator):
        with pytest.raises(MalformedDigestError):
            to_digests(["alpha"], hasher, hash_elements=False)


class TestRenderer:
    """Test cases for text rendering."""

    def test_render_tree_root_first(self, hasher: HashCalculator):
        tree = MerkleTree.from_elements(["a", "b", "c"], hasher)
        lines = render_tree(tree).splitlines()

        assert lines[0] == "LEVEL 0:"
        assert lines[1] == f"- {tree.root.hex()}"
        assert lines[-4] == "LEVEL 2:"
        assert lines[-3:] == [f"- {leaf.hex()}" for leaf in tree.leaves]

    def test_render_proof(self, hasher: HashCalculator):
        tree = MerkleTree.from_elements(["a", "b", "c"], hasher)
        lines = render_proof(tree.prove(2)).splitlines()

        assert lines[0].startswith("Proof of Inclusion for the leaf:")
        assert lines[1] == f"{tree.leaves[2].hex()} - RIGHT (duplicate)"
        assert lines[2].endswith(" - LEFT")

    def test_render_single_leaf_proof(self, hasher: HashCalculator):
        tree = MerkleTree.from_elements(["a"], hasher)
        assert "the leaf is the root" in render_proof(tree.prove(0))


class TestMerkleShell:
    """Test cases for MerkleShell commands."""

    @pytest.fixture
    def settings(self) -> Settings:
        return Settings()

    @pytest.fixture
    def shell(self, hasher: HashCalculator, settings: Settings) -> MerkleShell:
        return MerkleShell(MerkleTree.from_elements(["alpha", "beta", "gamma"], hasher), settings=settings)

    def test_default_tree(self, settings: Settings, hasher: HashCalculator):
        """The shell starts with the hash of the empty string as sole leaf."""
        shell = MerkleShell(settings=settings)
        assert shell.tree.leaves == (hasher.hash_element(""),)

    def test_invalid_command(self, shell: MerkleShell, capsys):
        assert shell.execute("frobnicate") is True
        assert INVALID_COMMAND in capsys.readouterr().out

    def test_missing_argument(self, shell: MerkleShell, capsys):
        shell.execute("add")
        assert INVALID_COMMAND in capsys.readouterr().out

    def test_bad_quoting(self, shell: MerkleShell, capsys):
        shell.execute('add "unterminated')
        assert "Invalid quoting" in capsys.readouterr().out

    def test_blank_line(self, shell: MerkleShell, capsys):
        assert shell.execute("   ") is True
        assert capsys.readouterr().out == ""

    def test_exit(self, shell: MerkleShell, capsys):
        assert shell.execute("exit") is False
        assert "Exiting..." in capsys.readouterr().out

    def test_help(self, shell: MerkleShell, capsys):
        shell.execute("help")
        out = capsys.readouterr().out
        for command in ("CREATE", "SHOW", "VERIFY", "PROOF", "ADD", "EXIT"):
            assert f"-- {command} --" in out

    def test_show(self, shell: MerkleShell, capsys):
        shell.execute("show")
        assert shell.tree.root.hex() in capsys.readouterr().out

    def test_root(self, shell: MerkleShell, capsys):
        shell.execute("root")
        out = capsys.readouterr().out
        assert shell.tree.root.hex() in out
        assert "3 leaves" in out

    def test_create_with_hash(self, shell: MerkleShell, elements_file: Path, hasher: HashCalculator, capsys):
        shell.execute(f"create {elements_file} --hash")
        assert "Merkle Tree created from file" in capsys.readouterr().out
        assert shell.tree.leaf_count == 4
        assert shell.tree.leaves[0] == hasher.hash_element("alpha")

    def test_create_from_hashes(self, shell: MerkleShell, hashes_file: Path, hasher: HashCalculator):
        shell.execute(f"create {hashes_file}")
        assert shell.tree.leaves == tuple(hasher.hash_element(e) for e in ("alpha", "beta", "gamma"))

    def test_create_missing_file(self, shell: MerkleShell, tmp_path: Path, capsys):
        root = shell.tree.root
        shell.execute(f"create {tmp_path / 'missing.txt'}")
        assert "Failed to read file" in capsys.readouterr().out
        assert shell.tree.root == root

    def test_create_empty_file(self, shell: MerkleShell, tmp_path: Path, capsys):
        empty = tmp_path / "empty.txt"
        empty.write_text("\n\n")
        shell.execute(f"create {empty}")
        assert "contains no elements" in capsys.readouterr().out
        assert shell.tree.leaf_count == 3

    def test_create_malformed_hashes(self, shell: MerkleShell, elements_file: Path, capsys):
        shell.execute(f"create {elements_file}")
        assert "Invalid element" in capsys.readouterr().out
        assert shell.tree.leaf_count == 3

    def test_verify_by_value(self, shell: MerkleShell, capsys):
        shell.execute("verify beta --hash")
        assert "'beta' is included in the tree." in capsys.readouterr().out

    def test_verify_with_index(self, shell: MerkleShell, capsys):
        shell.execute("verify beta 1 --hash")
        assert "'beta' is included in the tree at index 1." in capsys.readouterr().out

        shell.execute("verify beta 2 --hash")
        assert "'beta' is not included in the tree at index 2." in capsys.readouterr().out

    def test_verify_negative_index(self, shell: MerkleShell, capsys):
        shell.execute("verify beta -1 --hash")
        assert "is not included in the tree at index -1" in capsys.readouterr().out

    def test_verify_hex(self, shell: MerkleShell, hasher: HashCalculator, capsys):
        digest = hasher.hash_element("gamma").hex()
        shell.execute(f"verify {digest}")
        assert "is included in the tree" in capsys.readouterr().out

    def test_verify_missing(self, shell: MerkleShell, capsys):
        shell.execute("verify omega --hash")
        assert "'omega' is not included in the tree." in capsys.readouterr().out

    def test_verify_malformed(self, shell: MerkleShell, capsys):
        shell.execute("verify omega")
        assert "Use --hash" in capsys.readouterr().out

    def test_proof(self, shell: MerkleShell, capsys):
        shell.execute("proof gamma --hash")
        out = capsys.readouterr().out
        assert "Proof of Inclusion for the leaf" in out
        assert "(duplicate)" in out

    def test_proof_with_wrong_index(self, shell: MerkleShell, capsys):
        shell.execute("proof gamma 0 --hash")
        assert "is not included in the tree at index 0" in capsys.readouterr().out

    def test_proof_out_of_range(self, shell: MerkleShell, capsys):
        shell.execute("proof gamma 7 --hash")
        assert "is not included in the tree at index 7" in capsys.readouterr().out

    def test_add(self, shell: MerkleShell, hasher: HashCalculator, capsys):
        shell.execute("add delta --hash")
        assert "'delta' added to the tree." in capsys.readouterr().out
        assert shell.tree.leaf_count == 4
        assert shell.tree.verify_leaf(hasher.hash_element("delta"), 3)

    def test_add_duplicate_rejected(self, shell: MerkleShell, capsys):
        shell.execute("add alpha --hash")
        assert "alpha is already in the tree!" in capsys.readouterr().out
        assert shell.tree.leaf_count == 3

    def test_add_duplicate_allowed(self, hasher: HashCalculator, capsys):
        settings = Settings(cli=CLISettings(reject_duplicates=False))
        shell = MerkleShell(MerkleTree.from_elements(["alpha"], hasher), settings=settings)
        shell.execute("add alpha --hash")
        assert shell.tree.leaf_count == 2

    def test_add_wrong_width(self, shell: MerkleShell, capsys):
        shell.execute("add abcd")
        assert "cannot be added" in capsys.readouterr().out
        assert shell.tree.leaf_count == 3

    def test_from_file(self, elements_file: Path, settings: Settings):
        shell = MerkleShell.from_file(elements_file, hash_elements=True, settings=settings)
        assert shell.tree.leaf_count == 4

    def test_run_until_exit(self, shell: MerkleShell, monkeypatch, capsys):
        commands = iter(["add delta --hash", "root", "exit", "show"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(commands))

        shell.run()

        out = capsys.readouterr().out
        assert "Welcome to the Merkle Tree CLI" in out
        assert "4 leaves" in out
        assert "Exiting..." in out
        assert shell.running is False

    def test_run_stops_at_eof(self, shell: MerkleShell, monkeypatch):
        def raise_eof(prompt: str = "") -> str:
            raise EOFError

        monkeypatch.setattr("builtins.input", raise_eof)
        shell.run()
        assert shell.running is False


class TestMain:
    """Test cases for the arbor entry point."""

    def test_main_with_file(self, elements_file: Path, monkeypatch, capsys):
        monkeypatch.setattr("cli.main.configure_logging", lambda: None)
        monkeypatch.setattr("builtins.input", lambda prompt="": "exit")

        main(["--file", str(elements_file), "--hash"])

        out = capsys.readouterr().out
        assert "Merkle Tree created from file" in out
        assert "Exiting..." in out

    def test_main_missing_file(self, tmp_path: Path, monkeypatch, capsys):
        monkeypatch.setattr("cli.main.configure_logging", lambda: None)

        with pytest.raises(SystemExit) as exc_info:
            main(["--file", str(tmp_path / "missing.txt")])

        assert exc_info.value.code == 1
        assert "Failed to read file" in capsys.readouterr().out

    def test_main_bad_algorithm(self, monkeypatch, capsys):
        monkeypatch.setattr("cli.main.configure_logging", lambda: None)

        with pytest.raises(SystemExit):
            main(["--algorithm", "not-a-hash"])