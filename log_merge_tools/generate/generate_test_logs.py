#!/usr/bin/env python3
"""
generate_test_logs.py - Generate time-sorted log files for testing
==================================================================

Writes a set of ``.log`` files in the format merge-logs expects, for
benchmarks and manual testing. Every line is

    <ISO 8601 UTC timestamp>,<line number> test<file number>

and each file advances its own clock by a random step (0 to --max-step-ms
milliseconds) per line, so each file is sorted while files interleave.

COMMAND-LINE USAGE
==================

    # 30 files of 1,000,000 lines in the current directory (default)
    generate-test-logs -o .

    # Small reproducible set
    generate-test-logs -o /tmp/logs -n 5 -l 1000 --seed 42

    # Then merge them
    merge-logs /tmp/logs > merged.log

"""

import argparse
import os
import random
import sys
import time
from typing import List, Optional

from ..merge.comparators import format_timestamp


def generate_test_logs(
    output_dir: str,
    file_count: int = 30,
    lines_per_file: int = 1_000_000,
    max_step_ms: int = 100_000,
    start_ms: Optional[int] = None,
    seed: Optional[int] = None,
    prefix: str = "test_",
    verbose: bool = False,
) -> List[str]:
    """
    Write file_count sorted log files into output_dir.

    Args:
        output_dir: Directory for the generated files (created if missing)
        file_count: Number of files to write
        lines_per_file: Lines per file
        max_step_ms: Upper bound (exclusive) of the random time step per line
        start_ms: Start time in epoch milliseconds (default: now)
        seed: Seed for reproducible output
        prefix: File name prefix; files are named <prefix><n>.log
        verbose: Print progress to stderr

    Returns:
        List of generated file paths
    """
    if max_step_ms < 1:
        raise ValueError(f"max_step_ms must be at least 1, got {max_step_ms}")

    os.makedirs(output_dir, exist_ok=True)
    rng = random.Random(seed)
    if start_ms is None:
        start_ms = int(time.time() * 1000)

    paths = []
    for i in range(file_count):
        path = os.path.join(output_dir, f"{prefix}{i}.log")
        now_ms = start_ms
        with open(path, "w", encoding="utf-8", buffering=1024 * 1024) as out:
            for j in range(lines_per_file):
                now_ms += rng.randrange(max_step_ms)
                out.write(f"{format_timestamp(now_ms)},{j} test{i}\n")
        paths.append(path)
        if verbose:
            print(f"# Wrote {lines_per_file} lines to {path}", file=sys.stderr)

    return paths


def main(argv=None):
    """Command-line interface."""
    parser = argparse.ArgumentParser(
        description="Generate time-sorted log files for testing merge-logs."
    )
    parser.add_argument("-o", "--output", default=".", help="Output directory (default: .)")
    parser.add_argument(
        "-n", "--files", type=int, default=30, help="Number of files to generate (default: 30)"
    )
    parser.add_argument(
        "-l", "--lines", type=int, default=1_000_000, help="Lines per file (default: 1000000)"
    )
    parser.add_argument(
        "--max-step-ms",
        type=int,
        default=100_000,
        help="Maximum time step between consecutive lines in ms (default: 100000)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--prefix", default="test_", help="File name prefix (default: test_)")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Print progress information to stderr"
    )
    args = parser.parse_args(argv)

    started = time.time()
    try:
        paths = generate_test_logs(
            args.output,
            file_count=args.files,
            lines_per_file=args.lines,
            max_step_ms=args.max_step_ms,
            seed=args.seed,
            prefix=args.prefix,
            verbose=args.verbose,
        )
    except KeyboardInterrupt:
        print("\n# Interrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:  # pylint: disable=broad-except
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(
        f"Finished. Wrote {len(paths)} file(s) in {time.time() - started:.1f}s to {args.output}",
        file=sys.stderr,
    )


if __name__ == "__main__":
    main()
