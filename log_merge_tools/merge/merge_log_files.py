#!/usr/bin/env python3
"""
Merge Log Files - Streaming k-way merge of time-sorted server logs

This script merges the log files of a source directory into a single stream
ordered by timestamp. Each log file is a two-column CSV with an ISO 8601 UTC
timestamp in the first column and an event in the second:

    2016-12-20T19:00:45Z,Server A started.
    2016-12-20T19:01:25Z,Server A completed job.

Every file must already be in time order on its own. The merge reads the files
line by line and keeps exactly one line per file in memory, so the total input
can be far larger than the available RAM. The output is what
``cat *.log | sort`` would print, without having to sort anything.

Usage Examples:
    # Print all logs of a directory in time order
    merge-logs /var/tmp/server-logs

    # Write the merged stream to a file
    merge-logs /var/tmp/server-logs -o merged.log

    # Pipe to other processes
    merge-logs /var/tmp/server-logs | gzip > merged.log.gz
    merge-logs /var/tmp/server-logs | grep "terminated"

    # Skip some files, show progress on stderr
    merge-logs /var/tmp/server-logs --exclude 'server-tmp*.log' -v

    # Keep diagnostics on stderr instead of error_log.txt
    merge-logs /var/tmp/server-logs --error-log -

Diagnostics:
    Lines without a comma, unparseable timestamps and unreadable files are
    reported to error_log.txt in the working directory (see --error-log) and
    skipped; the merge always continues with the remaining files.

Requirements:
    - Every input file is sorted by timestamp
    - Timestamps are UTC ('Z' suffix), without offsets or fractional seconds
    - Input files are UTF-8
    - With many files, raise the open files limit first (e.g. ulimit -n 10000)

Algorithm:
    One linear pass over the open files finds the earliest and the second
    earliest current line. Lines of the earliest file are then emitted for as
    long as they stay before the second earliest, and only then are the files
    scanned again. Long runs from a single file therefore cost one comparison
    per line instead of one pass over all files per line. Lines with equal
    timestamps from different files come out in no particular order.

    Output is written by a separate thread fed through a bounded queue, so
    a slow console never stalls reading, and reading never outruns the console
    by more than the queue capacity.

Exit codes:
    0  success
    1  unexpected error
    2  invalid arguments
    3  source directory not found
    4  source directory could not be listed
    5  no log files found
    130 interrupted by user
"""

import argparse
import os
import sys
from typing import Callable, Dict, List, Optional, Sequence, TextIO, Tuple

from ..output.queued_writer import QUEUE_CAPACITY, QueuedLineWriter
from .comparators import PARSE_DATE_THRESHOLD, ComparatorMode, select_comparator_mode
from .diagnostics import log_error, log_progress
from .file_discovery import LOG_EXTENSION, discover_log_files
from .log_cursor import DEFAULT_BUFFER_SIZE, LogCursor

ERROR_LOG_NAME = "error_log.txt"
OUTPUT_BUFFER_SIZE = 1024 * 1024

EXIT_ERROR = 1
EXIT_BAD_ARGUMENTS = 2
EXIT_DIR_NOT_FOUND = 3
EXIT_LISTING_FAILED = 4
EXIT_NO_LOG_FILES = 5
EXIT_INTERRUPTED = 130


def select_two_earliest(active: List[LogCursor]) -> Tuple[int, int]:
    """
    Find the earliest and second earliest cursors in a single pass.

    Args:
        active: At least two cursors, all with a current line

    Returns:
        tuple: (index of earliest, index of second earliest)
    """
    first, second = 0, 1
    if active[1].is_before(active[0]):
        first, second = 1, 0

    for idx in range(2, len(active)):
        cursor = active[idx]
        if cursor.is_before(active[first]):
            second = first
            first = idx
        elif cursor.is_before(active[second]):
            second = idx
    return first, second


def merge_cursors(cursors: Sequence[LogCursor], emit: Callable[[str], None]) -> int:
    """
    Emit the current and remaining lines of all cursors in key order.

    Cursors without a current line are ignored. Every other cursor is advanced
    until exhausted (which also closes its file).

    Args:
        cursors: Primed cursors, all in the same comparator mode
        emit: Called with each line, in merged order

    Returns:
        int: Number of lines emitted
    """
    active = [c for c in cursors if c.line is not None]
    emitted = 0

    while len(active) > 1:
        first_idx, second_idx = select_two_earliest(active)
        first = active[first_idx]
        second = active[second_idx]

        # Drain the earliest file until it crosses over the second earliest
        while True:
            emit(first.line)
            emitted += 1

            if not first.advance():
                # Order of the active list is irrelevant, swap-remove
                active[first_idx] = active[-1]
                active.pop()
                break

            if not first.is_before(second):
                break

    # A single file left: its lines are in order, no comparisons needed
    if active:
        last = active[0]
        while True:
            emit(last.line)
            emitted += 1
            if not last.advance():
                break

    return emitted


def open_cursors(
    files: Sequence[str],
    mode: ComparatorMode,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    errors: Optional[TextIO] = None,
) -> Tuple[List[LogCursor], int]:
    """
    Open a cursor for each file, reporting files that cannot be opened.

    Returns:
        tuple: (opened cursors, number of files that failed to open)
    """
    cursors = []
    failed = 0
    for path in files:
        try:
            cursors.append(LogCursor(path, mode, buffer_size=buffer_size, errors=errors))
        except OSError as e:
            failed += 1
            log_error(f"[ERROR] I/O error opening {os.path.basename(path)}: {e}", errors)
    return cursors, failed


def merge_log_files(
    files: Sequence[str],
    output_file: str = "-",
    parse_dates: Optional[bool] = None,
    parse_date_threshold: int = PARSE_DATE_THRESHOLD,
    queue_capacity: int = QUEUE_CAPACITY,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    errors: Optional[TextIO] = None,
    verbose: bool = False,
) -> Dict[str, object]:
    """
    Merge time-sorted log files into a single time-sorted output.

    Args:
        files: Paths of the log files to merge
        output_file: Path of the merged output, or '-' for stdout
        parse_dates: Force parsed (True) or string (False) timestamp comparison;
            None picks parsed comparison above parse_date_threshold files
        parse_date_threshold: File count above which timestamps are parsed
        queue_capacity: Maximum number of lines waiting for the writer thread
        buffer_size: Read buffer size per input file in bytes
        errors: Text stream for diagnostics (default: sys.stderr)
        verbose: Whether to log progress to stderr

    Returns:
        dict: Run statistics with keys 'files', 'mode', 'active_files',
        'failed_files', 'lines_read', 'lines_written', 'malformed_lines'
        and 'parse_errors'

    Raises:
        OSError: If the output cannot be opened or written
    """
    if parse_dates is None:
        mode = select_comparator_mode(len(files), parse_date_threshold)
    elif parse_dates:
        mode = ComparatorMode.PARSED_EPOCH
    else:
        mode = ComparatorMode.LEXICOGRAPHIC

    log_progress(f"[MERGE] Starting merge of {len(files)} files ({mode.value} comparison)...", verbose)

    cursors, failed_open = open_cursors(files, mode, buffer_size, errors)
    try:
        active = [c for c in cursors if c.advance()]
        log_progress(f"[MERGE] {len(active)} files with data", verbose)

        if output_file == "-":
            lines_written = _merge_to_stream(active, sys.stdout, queue_capacity)
        else:
            with open(output_file, "w", encoding="utf-8", buffering=OUTPUT_BUFFER_SIZE) as out:
                lines_written = _merge_to_stream(active, out, queue_capacity)
    finally:
        for cursor in cursors:
            cursor.close()

    stats = {
        "files": len(files),
        "mode": mode.value,
        "active_files": len(active),
        "failed_files": failed_open + sum(1 for c in cursors if c.failed),
        "lines_read": sum(c.lines_read for c in cursors),
        "lines_written": lines_written,
        "malformed_lines": sum(c.malformed_lines for c in cursors),
        "parse_errors": sum(c.parse_errors for c in cursors),
    }

    if stats["malformed_lines"] or stats["parse_errors"] or stats["failed_files"]:
        log_error(
            f"[SUMMARY] {stats['malformed_lines']} malformed lines, "
            f"{stats['parse_errors']} unparseable timestamps, "
            f"{stats['failed_files']} failed files",
            errors,
        )
    log_progress(f"[MERGE] Complete: {lines_written} lines written", verbose)
    return stats


def _merge_to_stream(active: List[LogCursor], out: TextIO, queue_capacity: int) -> int:
    with QueuedLineWriter(out, capacity=queue_capacity) as writer:
        merge_cursors(active, writer.enqueue)
    return writer.lines_written


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser exiting with EXIT_BAD_ARGUMENTS on invalid arguments."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_BAD_ARGUMENTS, f"{self.prog}: error: {message}\n")


def parse_args(argv=None):
    parser = _ArgumentParser(
        description="Merge the time-sorted log files of a directory into one time-sorted stream.",
        epilog="Examples:\n"
        "  merge-logs /var/tmp/server-logs\n"
        "  merge-logs /var/tmp/server-logs -o merged.log --exclude 'server-tmp*.log' -v\n"
        "  merge-logs /var/tmp/server-logs --error-log - | gzip > merged.log.gz",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("source_dir", help="Directory containing the log files")
    parser.add_argument(
        "-o", "--output", default="-", help="Output file name (default: '-' for stdout)"
    )
    parser.add_argument(
        "--error-log",
        default=ERROR_LOG_NAME,
        metavar="PATH",
        help=f"File receiving diagnostics (default: {ERROR_LOG_NAME}; use '-' for stderr)",
    )
    parser.add_argument(
        "--extension",
        default=LOG_EXTENSION,
        help=f"Only merge files whose name ends with this suffix (default: {LOG_EXTENSION})",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        dest="exclude_patterns",
        metavar="PATTERN",
        help="Exclude files matching glob pattern (can be used multiple times). "
        "Example: --exclude 'server-tmp*.log'",
    )
    parser.add_argument(
        "-r", "--recursive", action="store_true", help="Also merge log files in subdirectories"
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--parse-dates",
        dest="parse_dates",
        action="store_const",
        const=True,
        default=None,
        help="Always compare parsed timestamps",
    )
    mode_group.add_argument(
        "--no-parse-dates",
        dest="parse_dates",
        action="store_const",
        const=False,
        help="Always compare timestamps as strings",
    )
    parser.add_argument(
        "--parse-date-threshold",
        type=int,
        default=PARSE_DATE_THRESHOLD,
        metavar="N",
        help="Compare parsed timestamps when merging more than N files "
        f"(default: {PARSE_DATE_THRESHOLD})",
    )
    parser.add_argument(
        "--queue-capacity",
        type=int,
        default=QUEUE_CAPACITY,
        metavar="N",
        help=f"Maximum lines waiting for the output thread (default: {QUEUE_CAPACITY})",
    )
    parser.add_argument(
        "--buffer-size",
        type=int,
        default=DEFAULT_BUFFER_SIZE,
        metavar="BYTES",
        help=f"Read buffer size per input file (default: {DEFAULT_BUFFER_SIZE})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output to stderr (progress, exclusions, statistics)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress progress output on stderr (overrides --verbose)",
    )
    args = parser.parse_args(argv)

    if args.queue_capacity < 1:
        parser.error("--queue-capacity must be at least 1")
    if args.buffer_size < 1:
        parser.error("--buffer-size must be at least 1")
    return args


def main(argv=None):
    """Main entry point for command-line usage."""
    args = parse_args(argv)

    # Determine verbosity (quiet overrides verbose)
    verbose = args.verbose and not args.quiet

    try:
        files = discover_log_files(
            args.source_dir,
            extension=args.extension,
            exclude_patterns=args.exclude_patterns,
            recursive=args.recursive,
            verbose=verbose,
        )
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_DIR_NOT_FOUND)
    except OSError as e:
        print(f"Error listing the source directory: {e}", file=sys.stderr)
        sys.exit(EXIT_LISTING_FAILED)

    # Never read the file being written
    if args.output != "-":
        output_path = os.path.abspath(args.output)
        files = [f for f in files if os.path.abspath(f) != output_path]

    if not files:
        print(
            f"Error: No {args.extension} files were found in {args.source_dir}", file=sys.stderr
        )
        sys.exit(EXIT_NO_LOG_FILES)

    error_log = None
    if args.error_log != "-":
        try:
            error_log = open(args.error_log, "w", encoding="utf-8")
        except OSError as e:
            print(f"Warning: Cannot open {args.error_log}, using stderr: {e}", file=sys.stderr)

    try:
        stats = merge_log_files(
            files,
            args.output,
            parse_dates=args.parse_dates,
            parse_date_threshold=args.parse_date_threshold,
            queue_capacity=args.queue_capacity,
            buffer_size=args.buffer_size,
            errors=error_log,
            verbose=verbose,
        )
        log_progress(
            f"[SUMMARY] {stats['lines_written']} lines from {stats['active_files']} of "
            f"{stats['files']} files; {stats['malformed_lines']} malformed lines, "
            f"{stats['parse_errors']} unparseable timestamps, {stats['failed_files']} failed files",
            verbose,
        )
    except KeyboardInterrupt:
        print("\n# Interrupted by user", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:  # pylint: disable=broad-except
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    finally:
        if error_log is not None:
            error_log.close()


if __name__ == "__main__":
    main()
