# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Fixed-width column layouts derived from dash separator lines."""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"\A[- ]+\Z")
_DASH_RUN_RE = re.compile(r"-+")


class LayoutError(RuntimeError):
    """Represent an attempt to slice a line while no layout is known."""


@dataclass(frozen=True)
class FieldSpan:
    """Represent one column of a fixed-width table.

    Attributes:
        start: Zero-based character offset of the column.
        width: Number of characters in the column.
    """

    start: int
    width: int

    @property
    def end(self) -> int:
        return self.start + self.width


@dataclass(frozen=True)
class FieldLayout:
    """Represent the column slicing scheme of one table block.

    Attributes:
        spans: Ordered columns, one per run of dashes in the separator.
        total_width: Length of the separator line the spans were derived from.
    """

    spans: tuple[FieldSpan, ...]
    total_width: int

    def slice(self, line: str) -> list[str]:
        """Cut a line into stripped field values.

        Short lines are right-padded with spaces, so slicing never fails.

        Args:
            line: Raw input line without its terminator.

        Returns:
            One whitespace-stripped value per span.
        """
        if len(line) < self.total_width:
            line = line.ljust(self.total_width)
        return [line[span.start : span.end].strip() for span in self.spans]


def is_separator(line: str) -> bool:
    """Return whether a line is made only of dashes and spaces, with one dash at least."""
    return bool(_SEPARATOR_RE.match(line)) and "-" in line


def derive_layout(line: str) -> FieldLayout | None:
    """Derive a column layout from a separator line.

    Args:
        line: Candidate separator line.

    Returns:
        The derived layout, or ``None`` when the line is not a separator.
    """
    if not is_separator(line):
        return None
    spans = tuple(
        FieldSpan(start=match.start(), width=len(match.group(0)))
        for match in _DASH_RUN_RE.finditer(line)
    )
    logger.debug(f"Derived layout (columns={len(spans)} width={len(line)})")
    return FieldLayout(spans=spans, total_width=len(line))
