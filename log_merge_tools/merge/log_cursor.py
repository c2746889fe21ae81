"""
Per-file read position for the k-way log merge.

A LogCursor owns one open log file and holds exactly one line of it in memory:
the current, not yet emitted line together with its sort key. Lines without a
comma (and, when keys are parsed, lines whose timestamp does not parse) are
reported to the diagnostics stream and skipped. Read errors close the file and
end the cursor; they are reported, never raised to the merge loop.
"""

import os
from typing import Optional, TextIO

from .comparators import ComparatorMode, SortKey, extract_key, make_sort_key
from .diagnostics import log_error

DEFAULT_BUFFER_SIZE = 64 * 1024


class LogCursor:
    """
    Current line and sort key of one sorted log file.

    Opening the cursor does not read anything; call advance() to load the first
    well-formed line. While ``line`` is not None, ``key`` is the sort key of
    that line. Once advance() returns False the file is closed and ``line``
    and ``key`` are None for good.

    Args:
        path: Log file to read (UTF-8)
        mode: Comparator mode shared by every cursor of the run
        buffer_size: Read buffer size in bytes
        errors: Text stream for diagnostics (default: sys.stderr)

    Raises:
        OSError: If the file cannot be opened.
    """

    def __init__(
        self,
        path: str,
        mode: ComparatorMode = ComparatorMode.LEXICOGRAPHIC,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        errors: Optional[TextIO] = None,
    ):
        self.path = path
        self.name = os.path.basename(path)
        self.mode = mode
        self.errors = errors

        self.line: Optional[str] = None
        self.key: Optional[SortKey] = None
        self.line_number = 0  # physical lines read, for diagnostics

        self.lines_read = 0
        self.malformed_lines = 0
        self.parse_errors = 0
        self.failed = False

        self._fh = open(path, "r", encoding="utf-8", buffering=buffer_size)

    def __repr__(self):
        return f"LogCursor({self.path!r}, line_number={self.line_number}, key={self.key!r})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self._fh is None

    def close(self):
        """Release the file handle. Safe to call more than once."""
        if self._fh is None:
            return
        fh, self._fh = self._fh, None
        try:
            fh.close()
        except OSError as e:
            log_error(f"[ERROR] I/O error closing {self.name}: {e}", self.errors)

    def _read_raw_line(self) -> Optional[str]:
        """Read one physical line without its newline, or None at end of stream."""
        if self._fh is None:
            return None
        try:
            raw = self._fh.readline()
        except (OSError, UnicodeDecodeError) as e:
            log_error(
                f"[ERROR] I/O error reading {self.name} after line {self.line_number}: {e}",
                self.errors,
            )
            self.failed = True
            self.close()
            return None

        if not raw:
            self.close()
            return None

        self.line_number += 1
        return raw.rstrip("\r\n")

    def advance(self) -> bool:
        """
        Move to the next well-formed line.

        Malformed lines are reported and skipped in a loop, so any number of
        consecutive bad lines costs no stack depth.

        Returns:
            True if a new line is available in ``line``/``key``, False once the
            file is exhausted or failed (the file is closed by then).
        """
        while True:
            raw = self._read_raw_line()
            if raw is None:
                self.line = None
                self.key = None
                return False

            raw_key = extract_key(raw)
            if raw_key is None:
                self.malformed_lines += 1
                log_error(
                    f"[WARN] No comma found on line {self.line_number} in file {self.name}",
                    self.errors,
                )
                continue

            try:
                key = make_sort_key(raw_key, self.mode)
            except ValueError as e:
                self.parse_errors += 1
                log_error(
                    f"[WARN] Unparseable timestamp on line {self.line_number} "
                    f"in file {self.name}: {e}",
                    self.errors,
                )
                continue

            self.line = raw
            self.key = key
            self.lines_read += 1
            return True

    def compare(self, other: "LogCursor") -> int:
        """
        Three-way comparison of the current keys: -1, 0 or 1.

        Raises:
            ValueError: If either cursor has no current line, or the two
                cursors use different comparator modes.
        """
        if self.key is None or other.key is None:
            raise ValueError(f"Cannot compare exhausted cursor: {self!r} vs {other!r}")
        if self.mode is not other.mode:
            raise ValueError(f"Cannot compare cursors in modes {self.mode} and {other.mode}")
        if self.key < other.key:
            return -1
        if self.key > other.key:
            return 1
        return 0

    def is_before(self, other: "LogCursor") -> bool:
        """True if this cursor's current line sorts strictly before other's."""
        return self.compare(other) < 0
