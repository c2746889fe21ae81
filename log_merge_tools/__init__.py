"""
Log Merge Tools

A Python package for merging time-sorted server log files.
Provides a streaming k-way merge that holds one line per input file in memory,
a threaded output writer with bounded buffering, and a generator for test logs.

Modules:
    merge: Cursor, comparator and k-way merge of sorted log files
    output: Queued writer thread for the merged stream
    generate: Test log file generator
"""

__version__ = "1.0.0"

from .merge.comparators import ComparatorMode, format_timestamp, parse_timestamp
from .merge.file_discovery import discover_log_files
from .merge.merge_log_files import merge_cursors, merge_log_files
from .output.queued_writer import QueuedLineWriter

__all__ = [
    "merge_log_files",
    "merge_cursors",
    "discover_log_files",
    "ComparatorMode",
    "parse_timestamp",
    "format_timestamp",
    "QueuedLineWriter",
    "__version__",
]
