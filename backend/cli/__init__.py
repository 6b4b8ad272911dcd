"""
Arbor CLI Package.

Interactive shell, element file loading and text rendering.
Requires Python 3.11+.
"""

from cli.loader import read_elements, to_digest, to_digests
from cli.renderer import render_proof, render_tree
from cli.shell import MerkleShell

__all__ = [
    "MerkleShell",
    "read_elements",
    "to_digest",
    "to_digests",
    "render_proof",
    "render_tree",
]
