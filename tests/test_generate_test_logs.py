#!/usr/bin/env python3
"""
test_generate_test_logs.py - Test suite for the test log generator
===================================================================
"""

import os

import pytest

from log_merge_tools.generate.generate_test_logs import generate_test_logs, main
from log_merge_tools.merge.comparators import extract_key, parse_timestamp
from log_merge_tools.merge.file_discovery import discover_log_files


class TestGenerateTestLogs:
    """Test generated files."""

    def test_files_and_line_format(self, tmp_path):
        paths = generate_test_logs(
            str(tmp_path), file_count=3, lines_per_file=20, start_ms=1482260445000, seed=1
        )

        assert [os.path.basename(p) for p in paths] == ["test_0.log", "test_1.log", "test_2.log"]
        lines = (tmp_path / "test_2.log").read_text(encoding="utf-8").splitlines()
        assert len(lines) == 20
        assert lines[0].startswith("2016-12-20T19:")
        assert lines[0].endswith(",0 test2")
        assert lines[19].endswith(",19 test2")

    def test_each_file_is_sorted(self, tmp_path):
        paths = generate_test_logs(str(tmp_path), file_count=4, lines_per_file=200, seed=3)

        for path in paths:
            with open(path, encoding="utf-8") as f:
                keys = [parse_timestamp(extract_key(line)) for line in f]
            assert keys == sorted(keys)

    def test_seed_is_reproducible(self, tmp_path):
        first = generate_test_logs(
            str(tmp_path / "one"), file_count=2, lines_per_file=50, start_ms=0, seed=9
        )
        second = generate_test_logs(
            str(tmp_path / "two"), file_count=2, lines_per_file=50, start_ms=0, seed=9
        )

        for a, b in zip(first, second):
            with open(a, encoding="utf-8") as fa, open(b, encoding="utf-8") as fb:
                assert fa.read() == fb.read()

    def test_invalid_step(self, tmp_path):
        with pytest.raises(ValueError):
            generate_test_logs(str(tmp_path), max_step_ms=0)

    def test_output_is_discoverable(self, tmp_path):
        generate_test_logs(str(tmp_path), file_count=2, lines_per_file=1, prefix="server-", seed=0)
        assert len(discover_log_files(str(tmp_path))) == 2


class TestMain:
    def test_cli(self, tmp_path, capsys):
        main(["-o", str(tmp_path), "-n", "2", "-l", "5", "--seed", "4"])

        assert sorted(os.listdir(tmp_path)) == ["test_0.log", "test_1.log"]
        assert "Wrote 2 file(s)" in capsys.readouterr().err
