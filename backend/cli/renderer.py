"""
Arbor Text Renderer.

Plain-text views of trees and proofs for the interactive shell.
Requires Python 3.11+.
"""

from merkle.proof import Proof
from merkle.tree_builder import MerkleTree


def render_tree(tree: MerkleTree) -> str:
    """
    Render every level, root first.

    LEVEL 0 is the root level; the last level listed holds the leaves.
    """
    lines: list[str] = []
    for depth, level in enumerate(reversed(tree.levels)):
        lines.append(f"LEVEL {depth}:")
        lines.extend(f"- {digest.hex()}" for digest in level)
    return "\n".join(lines)


def render_proof(proof: Proof) -> str:
    """Render a proof of inclusion, one sibling per line."""
    lines = [f"Proof of Inclusion for the leaf: {proof.leaf.hex()} (index {proof.index})"]
    if not proof.steps:
        lines.append("(single leaf tree: the leaf is the root)")
    for step in proof.steps:
        line = f"{step.digest.hex()} - {step.orientation.name}"
        if step.duplicated:
            line += " (duplicate)"
        lines.append(line)
    return "\n".join(lines)
