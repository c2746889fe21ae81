"""
File discovery utilities for finding log files in a source directory.
"""

import fnmatch
import os
from typing import List, Optional, Tuple

from .diagnostics import log_progress

LOG_EXTENSION = ".log"


def should_exclude(filename: str, exclude_patterns: Optional[List[str]]) -> Tuple[bool, Optional[str]]:
    """
    Check if a filename matches any exclusion pattern.

    Args:
        filename: Name of the file to check (basename only)
        exclude_patterns: List of glob-style patterns to match against

    Returns:
        tuple: (should_exclude: bool, matched_pattern: str or None)
               Returns (True, pattern) if file matches any pattern, (False, None) otherwise
    """
    if not exclude_patterns:
        return False, None

    basename = os.path.basename(filename)
    for pattern in exclude_patterns:
        if fnmatch.fnmatch(basename, pattern):
            return True, pattern
    return False, None


def discover_log_files(
    directory: str,
    extension: str = LOG_EXTENSION,
    exclude_patterns: Optional[List[str]] = None,
    recursive: bool = False,
    verbose: bool = False,
) -> List[str]:
    """
    List the log files in a source directory.

    Args:
        directory: Directory to scan
        extension: Only file names ending with this suffix are returned
        exclude_patterns: Glob-style patterns for file names to skip (optional)
        recursive: Also scan subdirectories
        verbose: Whether to log progress to stderr

    Returns:
        Sorted list of file paths

    Raises:
        FileNotFoundError: If the directory does not exist
        OSError: If the directory cannot be listed (not a directory, no permission)
    """
    if not os.path.exists(directory):
        raise FileNotFoundError(f"Source log directory was not found: '{os.path.abspath(directory)}'")

    log_progress(f"[DISCOVER] Scanning directory: {directory}", verbose)

    if recursive:
        if not os.path.isdir(directory):
            raise NotADirectoryError(f"Not a directory: '{directory}'")

        def raise_error(err):
            raise err

        candidates = []
        for root, _, filenames in os.walk(directory, onerror=raise_error):
            candidates.extend(os.path.join(root, f) for f in filenames)
    else:
        candidates = [os.path.join(directory, f) for f in os.listdir(directory)]

    found = 0
    excluded = 0
    files = []
    for path in candidates:
        name = os.path.basename(path)
        if not name.endswith(extension) or not os.path.isfile(path):
            continue
        found += 1
        skip, pattern = should_exclude(name, exclude_patterns)
        if skip:
            excluded += 1
            log_progress(f"[EXCLUDE] {name} (matches: {pattern})", verbose)
            continue
        log_progress(f"[INCLUDE] {name}", verbose)
        files.append(path)

    log_progress(
        f"[SUMMARY] Total: {found} found, {excluded} excluded, {len(files)} included",
        verbose,
    )
    return sorted(files)
