# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Inclusive timestamp window applied to sampled rows."""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

# Ten digits reach 2286; longer digit runs are compact date-times such as 20090320153005.
_EPOCH_RE = re.compile(r"\A\d{9,10}(?:\.\d+)?\Z")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
# Largest second representable as a signed 32-bit Unix time.
MAX_LEGACY_TIME = datetime(2038, 1, 19, 3, 14, 7, tzinfo=timezone.utc)


class TimeParseError(ValueError):
    """Represent a timestamp value that cannot be parsed."""


def parse_timestamp(text: str) -> datetime:
    """Parse a timestamp field permissively.

    Values of nine or ten digits are Unix epoch seconds; anything else goes through
    the dateutil parser. Naive results are taken as UTC.

    Args:
        text: Raw timestamp text.

    Returns:
        Timezone-aware timestamp.

    Raises:
        TimeParseError: If the text is empty or not a recognizable timestamp.
    """
    value = text.strip()
    if not value:
        raise TimeParseError("Empty timestamp value.")
    try:
        if _EPOCH_RE.match(value):
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError, OSError) as exc:
        raise TimeParseError(f"Cannot parse timestamp {value!r}: {exc}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class TimeFilter:
    """Accept rows whose timestamp falls inside ``[begin, end]``.

    Attributes:
        begin: Inclusive lower bound.
        end: Inclusive upper bound.
    """

    begin: datetime = field(default=EPOCH)
    end: datetime = field(default=MAX_LEGACY_TIME)

    @classmethod
    def from_bounds(cls, begin: str | None = None, end: str | None = None) -> "TimeFilter":
        """Build a window from optional bound strings, keeping defaults for ``None``.

        Raises:
            TimeParseError: If a given bound cannot be parsed.
        """
        window = cls(
            begin=parse_timestamp(begin) if begin is not None else EPOCH,
            end=parse_timestamp(end) if end is not None else MAX_LEGACY_TIME,
        )
        if window.begin > window.end:
            logger.warning(
                f"Time window is empty (begin={window.begin.isoformat()} end={window.end.isoformat()})"
            )
        return window

    def in_window(self, timestamp_field: str) -> bool:
        """Return whether a timestamp field lies inside the window.

        Raises:
            TimeParseError: If the field cannot be parsed.
        """
        timestamp = parse_timestamp(timestamp_field)
        return self.begin <= timestamp <= self.end
