#!/usr/bin/env python3
"""
Test Suite for file_discovery.py - Finding log files in a source directory
"""

import os
import tempfile
import unittest
from pathlib import Path

from log_merge_tools.merge.file_discovery import discover_log_files, should_exclude


class TestDiscoverLogFiles(unittest.TestCase):
    """Test cases for the discover_log_files function"""

    def setUp(self):
        """Create a temporary directory structure for testing"""
        self.test_dir = tempfile.TemporaryDirectory()
        self.test_path = Path(self.test_dir.name)

        # test_dir/
        #   ├── server-a.log
        #   ├── server-b.log
        #   ├── server-tmp.log
        #   ├── notes.txt
        #   ├── archive.log/        (directory, not a file)
        #   └── old/
        #       └── server-c.log

        (self.test_path / "server-a.log").write_text("a")
        (self.test_path / "server-b.log").write_text("b")
        (self.test_path / "server-tmp.log").write_text("tmp")
        (self.test_path / "notes.txt").write_text("notes")
        (self.test_path / "archive.log").mkdir()
        (self.test_path / "old").mkdir()
        (self.test_path / "old" / "server-c.log").write_text("c")

    def tearDown(self):
        """Clean up temporary directory"""
        self.test_dir.cleanup()

    def names(self, files):
        return [os.path.basename(f) for f in files]

    def test_only_log_files_in_top_directory(self):
        """Only regular files ending in .log, not subdirectories"""
        files = discover_log_files(str(self.test_path))
        self.assertEqual(self.names(files), ["server-a.log", "server-b.log", "server-tmp.log"])

    def test_paths_include_directory(self):
        """Returned paths can be opened directly"""
        files = discover_log_files(str(self.test_path))
        for path in files:
            self.assertTrue(os.path.isfile(path))

    def test_recursive(self):
        """Subdirectories are scanned with recursive=True"""
        files = discover_log_files(str(self.test_path), recursive=True)
        self.assertEqual(len(files), 4)
        self.assertIn("server-c.log", self.names(files))

    def test_custom_extension(self):
        """Another extension selects other files"""
        files = discover_log_files(str(self.test_path), extension=".txt")
        self.assertEqual(self.names(files), ["notes.txt"])

    def test_exclude_patterns(self):
        """Files matching exclusion patterns are skipped"""
        files = discover_log_files(str(self.test_path), exclude_patterns=["*-tmp.log", "*-b.log"])
        self.assertEqual(self.names(files), ["server-a.log"])

    def test_empty_directory(self):
        """An empty directory returns an empty list"""
        empty_dir = self.test_path / "empty"
        empty_dir.mkdir()
        self.assertEqual(discover_log_files(str(empty_dir)), [])

    def test_missing_directory(self):
        """A missing directory raises FileNotFoundError"""
        with self.assertRaises(FileNotFoundError):
            discover_log_files(str(self.test_path / "missing"))

    def test_not_a_directory(self):
        """A file instead of a directory raises OSError"""
        with self.assertRaises(OSError) as ctx:
            discover_log_files(str(self.test_path / "server-a.log"))
        self.assertNotIsInstance(ctx.exception, FileNotFoundError)

    def test_not_a_directory_recursive(self):
        with self.assertRaises(NotADirectoryError):
            discover_log_files(str(self.test_path / "server-a.log"), recursive=True)


class TestShouldExclude(unittest.TestCase):
    """Test cases for the should_exclude function"""

    def test_no_patterns(self):
        self.assertEqual(should_exclude("server.log", None), (False, None))
        self.assertEqual(should_exclude("server.log", []), (False, None))

    def test_matching_pattern_returned(self):
        self.assertEqual(
            should_exclude("/var/log/server-tmp.log", ["*.gz", "*-tmp.log"]),
            (True, "*-tmp.log"),
        )

    def test_pattern_matches_basename_only(self):
        self.assertEqual(should_exclude("/tmp/logs/server.log", ["tmp*"]), (False, None))


if __name__ == "__main__":
    unittest.main()
