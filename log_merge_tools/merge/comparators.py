"""
Sort-key extraction and ordering policy for log lines.

Each log line is a two-column CSV record:

    2016-12-20T19:00:45Z,Server A started.

The sort key is everything before the first comma. For fixed-width ISO 8601
UTC timestamps without fractional seconds, plain string comparison already
gives chronological order, so that is the default. With a very large number
of files the merge spends most of its time comparing keys, and integer
comparison is cheaper, so above PARSE_DATE_THRESHOLD files every key is
parsed to epoch milliseconds once per line instead.

The mode is chosen once per run and applies to every cursor.
"""

import enum
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

# Number of files above which keys are parsed to epoch milliseconds.
PARSE_DATE_THRESHOLD = 2000

KEY_DELIMITER = ","

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)
_UTC_DESIGNATORS = ("Z", "+00:00", "+00")

SortKey = Union[str, int]


class ComparatorMode(enum.Enum):
    """How sort keys are built and compared."""

    LEXICOGRAPHIC = "lexicographic"
    PARSED_EPOCH = "parsed-epoch"


def select_comparator_mode(file_count: int, threshold: int = PARSE_DATE_THRESHOLD) -> ComparatorMode:
    """
    Pick the comparator mode for a run over file_count input files.

    Returns PARSED_EPOCH only when file_count is strictly greater than threshold.
    """
    if file_count > threshold:
        return ComparatorMode.PARSED_EPOCH
    return ComparatorMode.LEXICOGRAPHIC


def extract_key(line: str) -> Optional[str]:
    """Return the text before the first comma, or None if the line has no comma."""
    pos = line.find(KEY_DELIMITER)
    if pos == -1:
        return None
    return line[:pos]


def parse_timestamp(text: str) -> int:
    """
    Parse an ISO 8601 UTC timestamp into epoch milliseconds.

    Accepts ``YYYY-MM-DDTHH:MM:SS`` followed by ``Z``, ``+00`` or ``+00:00``.
    Surrounding whitespace is ignored.

    Raises:
        ValueError: If the text is not a timestamp in that form.

    Example:
        >>> parse_timestamp("1970-01-01T00:00:01Z")
        1000
    """
    value = text.strip()
    for designator in _UTC_DESIGNATORS:
        if value.endswith(designator):
            value = value[: -len(designator)]
            break
    else:
        raise ValueError(f"Not a UTC timestamp: {text!r}")

    if (
        len(value) != 19
        or value[4] != "-"
        or value[7] != "-"
        or value[10] != "T"
        or value[13] != ":"
        or value[16] != ":"
    ):
        raise ValueError(f"Malformed timestamp: {text!r}")

    fields = (value[0:4], value[5:7], value[8:10], value[11:13], value[14:16], value[17:19])
    if not all(field.isdigit() for field in fields):
        raise ValueError(f"Malformed timestamp: {text!r}")

    # datetime() validates month/day/hour ranges and raises ValueError itself
    moment = datetime(*(int(field) for field in fields), tzinfo=timezone.utc)
    return (moment - _EPOCH) // _ONE_MS


def format_timestamp(epoch_ms: int) -> str:
    """
    Format epoch milliseconds as ``YYYY-MM-DDTHH:MM:SSZ`` (sub-second part dropped).

    Example:
        >>> format_timestamp(1482260445000)
        '2016-12-20T19:00:45Z'
    """
    moment = _EPOCH + timedelta(milliseconds=epoch_ms)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def make_sort_key(raw_key: str, mode: ComparatorMode) -> SortKey:
    """
    Build the comparable key for a raw timestamp substring.

    Raises:
        ValueError: In PARSED_EPOCH mode, when raw_key is not a valid timestamp.
    """
    if mode is ComparatorMode.PARSED_EPOCH:
        return parse_timestamp(raw_key)
    return raw_key
