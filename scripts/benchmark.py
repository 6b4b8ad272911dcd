#!/usr/bin/env python3
"""
Arbor Benchmark Script.

Performance benchmarks for tree construction, proofs and appends.
Requires Python 3.11+.

Usage:
    python scripts/benchmark.py --leaves 100000
"""

import argparse
import statistics
import sys
import time
from pathlib import Path
from typing import Callable, TypeVar

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from merkle.hash_calculator import HashCalculator
from merkle.incremental_updater import IncrementalUpdater
from merkle.path_deriver import PathDeriver
from merkle.proof import ProofVerifier
from merkle.tree_builder import MerkleTree
from utils.logger import configure_logging, get_logger


configure_logging()
logger = get_logger("benchmark")

T = TypeVar("T")


def benchmark(name: str, func: Callable[[], T], iterations: int = 5) -> tuple[T, dict]:
    """
    Benchmark a function.

    Returns:
        Tuple of (result, stats)
    """
    times = []
    result = None

    for i in range(iterations):
        start = time.perf_counter()
        result = func()
        elapsed = time.perf_counter() - start
        times.append(elapsed * 1000)  # Convert to ms

    stats = {
        "name": name,
        "iterations": iterations,
        "min_ms": min(times),
        "max_ms": max(times),
        "mean_ms": statistics.mean(times),
        "median_ms": statistics.median(times),
        "stdev_ms": statistics.stdev(times) if len(times) > 1 else 0,
    }

    return result, stats


def print_stats(stats: dict) -> None:
    """Print benchmark statistics."""
    print(f"\n  {stats['name']}:")
    print(f"    Mean:   {stats['mean_ms']:.2f}ms")
    print(f"    Median: {stats['median_ms']:.2f}ms")
    print(f"    Min:    {stats['min_ms']:.2f}ms")
    print(f"    Max:    {stats['max_ms']:.2f}ms")
    if stats["stdev_ms"] > 0:
        print(f"    StdDev: {stats['stdev_ms']:.2f}ms")


def run_benchmarks(leaf_count: int, algorithm: str) -> None:
    """Run all benchmarks."""
    print("\n=== Arbor Benchmarks ===")
    print(f"Leaves: {leaf_count}  Algorithm: {algorithm}")

    hasher = HashCalculator(algorithm)
    leaves = [hasher.hash_element(f"element{i}") for i in range(leaf_count)]

    # Benchmark: Full build
    tree, stats = benchmark(
        "Build tree",
        lambda: MerkleTree.build(leaves, hasher),
        iterations=3,
    )
    print_stats(stats)
    print(f"    Height: {tree.height}")

    deriver = PathDeriver(tree)
    verifier = ProofVerifier(hasher)
    middle = leaf_count // 2

    # Benchmark: Proof by index (O(log n))
    proof, stats = benchmark(
        f"Prove by index ({middle})",
        lambda: deriver.prove_by_index(middle),
        iterations=100,
    )
    print_stats(stats)

    # Benchmark: Proof by value (O(n) scan)
    _, stats = benchmark(
        "Prove by value (last leaf)",
        lambda: deriver.prove_by_value(leaves[-1]),
        iterations=10,
    )
    print_stats(stats)

    # Benchmark: Verification
    _, stats = benchmark(
        "Verify proof",
        lambda: verifier.verify(proof, leaves[middle], tree.root),
        iterations=100,
    )
    print_stats(stats)

    # Benchmark: Incremental append vs. full rebuild
    extra = hasher.hash_element("appended")
    updater = IncrementalUpdater()
    appended, stats = benchmark(
        "Incremental append",
        lambda: updater.append(tree, extra),
        iterations=10,
    )
    print_stats(stats)

    rebuilt, stats = benchmark(
        "Full rebuild after append",
        lambda: MerkleTree.build([*leaves, extra], hasher),
        iterations=3,
    )
    print_stats(stats)

    if appended.root != rebuilt.root:
        logger.error("append_rebuild_mismatch", leaves=leaf_count)
        print("\n  ERROR: incremental append and rebuild disagree")
        sys.exit(1)

    print("\n=== Benchmark Complete ===\n")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run Arbor performance benchmarks"
    )
    parser.add_argument(
        "--leaves",
        type=int,
        default=10_000,
        help="Number of generated leaves",
    )
    parser.add_argument(
        "--algorithm",
        default="sha3_256",
        help="hashlib algorithm to benchmark",
    )

    args = parser.parse_args()

    if args.leaves < 1:
        print("Error: --leaves must be at least 1")
        sys.exit(1)

    try:
        run_benchmarks(args.leaves, args.algorithm)
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
