"""Merge module - Streaming k-way merge of time-sorted log files."""

from .file_discovery import discover_log_files
from .log_cursor import LogCursor
from .merge_log_files import merge_cursors, merge_log_files

__all__ = ["merge_log_files", "merge_cursors", "discover_log_files", "LogCursor"]
