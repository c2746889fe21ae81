#!/usr/bin/env python3
"""
test_comparators.py - Test suite for sort keys and timestamp conversion
=======================================================================
"""

import pytest

from log_merge_tools.merge.comparators import (
    PARSE_DATE_THRESHOLD,
    ComparatorMode,
    extract_key,
    format_timestamp,
    make_sort_key,
    parse_timestamp,
    select_comparator_mode,
)


class TestSelectComparatorMode:
    """Test switching to parsed timestamps above the file threshold."""

    def test_default_threshold(self):
        assert PARSE_DATE_THRESHOLD == 2000
        assert select_comparator_mode(2000) is ComparatorMode.LEXICOGRAPHIC
        assert select_comparator_mode(2001) is ComparatorMode.PARSED_EPOCH

    def test_custom_threshold(self):
        assert select_comparator_mode(3, threshold=3) is ComparatorMode.LEXICOGRAPHIC
        assert select_comparator_mode(4, threshold=3) is ComparatorMode.PARSED_EPOCH

    def test_few_files(self):
        assert select_comparator_mode(0) is ComparatorMode.LEXICOGRAPHIC
        assert select_comparator_mode(1) is ComparatorMode.LEXICOGRAPHIC


class TestExtractKey:
    """Test finding the timestamp column."""

    def test_key_before_first_comma(self):
        assert extract_key("2016-12-20T19:00:45Z,Server A started.") == "2016-12-20T19:00:45Z"

    def test_only_first_comma_counts(self):
        assert extract_key("2016-12-20T19:00:45Z,a,b,c") == "2016-12-20T19:00:45Z"

    def test_leading_space_in_event_kept_out_of_key(self):
        assert extract_key("2016-12-20T19:00:45Z, Server A started.") == "2016-12-20T19:00:45Z"

    def test_no_comma(self):
        assert extract_key("not-a-valid-line") is None
        assert extract_key("") is None

    def test_empty_key(self):
        assert extract_key(",event") == ""


class TestParseTimestamp:
    """Test ISO 8601 UTC parsing to epoch milliseconds."""

    def test_epoch(self):
        assert parse_timestamp("1970-01-01T00:00:00Z") == 0

    def test_known_value(self):
        assert parse_timestamp("2016-12-20T19:00:45Z") == 1482260445000

    def test_utc_offset_designators(self):
        assert parse_timestamp("2016-12-20T19:00:45+00") == 1482260445000
        assert parse_timestamp("2016-12-20T19:00:45+00:00") == 1482260445000

    def test_surrounding_whitespace(self):
        assert parse_timestamp(" 2016-12-20T19:00:45Z ") == 1482260445000

    def test_before_epoch(self):
        assert parse_timestamp("1969-12-31T23:59:59Z") == -1000

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "yesterday",
            "2016-12-20T19:00:45",
            "2016-12-20T19:00:45+01:00",
            "2016-12-20T19:00:45.123Z",
            "2016-12-20 19:00:45Z",
            "2016-13-20T19:00:45Z",
            "2016-02-30T19:00:45Z",
            "2016-12-20T24:00:00Z",
            "2016-1a-20T19:00:45Z",
        ],
    )
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_timestamp(text)

    def test_order_matches_string_order(self):
        stamps = [
            "1999-12-31T23:59:59Z",
            "2000-01-01T00:00:00Z",
            "2016-02-29T12:00:00Z",
            "2016-12-20T19:00:45Z",
            "2016-12-20T19:01:16Z",
        ]
        assert sorted(stamps, key=parse_timestamp) == sorted(stamps)


class TestFormatTimestamp:
    """Test formatting epoch milliseconds."""

    def test_known_value(self):
        assert format_timestamp(1482260445000) == "2016-12-20T19:00:45Z"

    def test_milliseconds_truncated(self):
        assert format_timestamp(1482260445999) == "2016-12-20T19:00:45Z"

    def test_parse_inverts_format_on_whole_seconds(self):
        for ms in (0, 951782400000, 1482260445000):
            assert parse_timestamp(format_timestamp(ms)) == ms


class TestMakeSortKey:
    def test_lexicographic_keeps_text(self):
        assert make_sort_key("2016-12-20T19:00:45Z", ComparatorMode.LEXICOGRAPHIC) == (
            "2016-12-20T19:00:45Z"
        )

    def test_parsed(self):
        assert make_sort_key("2016-12-20T19:00:45Z", ComparatorMode.PARSED_EPOCH) == 1482260445000

    def test_parsed_invalid(self):
        with pytest.raises(ValueError):
            make_sort_key("garbage", ComparatorMode.PARSED_EPOCH)
