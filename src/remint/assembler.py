# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Streaming assembly of fixed-width diagnostic tables into category rows."""

import logging
from collections import deque
from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass

from remint.config import CategoryConfig
from remint.diff import DiffEngine
from remint.headers import HeaderRegistry
from remint.layout import FieldLayout, LayoutError, derive_layout
from remint.sink import OutputSink, ReportingSink, SinkUnsupportedOperation
from remint.time_filter import TimeFilter, TimeParseError

logger = logging.getLogger(__name__)

CNAME_INDEX = 0
PTIME_INDEX = 1
WINDOW_SIZE = 3


@dataclass
class AssemblerStats:
    """Count what happened to the lines of one run.

    Attributes:
        lines_read: Lines fed to the assembler.
        headers_emitted: Header rows handed to the sink.
        rows_emitted: Data rows handed to the sink.
        category_mismatches: Sliced lines dropped for not matching the active category.
        outside_window: Rows dropped by the time window.
        filtered_out: Rows dropped by the category filter.
    """

    lines_read: int = 0
    headers_emitted: int = 0
    rows_emitted: int = 0
    category_mismatches: int = 0
    outside_window: int = 0
    filtered_out: int = 0


class LineAssembler:
    """Turn a stream of dump lines into per-category rows for an output sink."""

    def __init__(
        self,
        config: Mapping[str, CategoryConfig],
        sink: OutputSink,
        time_filter: TimeFilter | None = None,
        categories: Collection[str] | None = None,
    ) -> None:
        """Initialize the assembler state for one run.

        Args:
            config: Category declarations keyed by name.
            sink: Receiver of header and data rows.
            time_filter: Timestamp window; unbounded when ``None``.
            categories: Categories to emit; every category when ``None``.
        """
        self._config = config
        self._sink = sink
        self._time_filter = time_filter or TimeFilter()
        self._categories = frozenset(categories) if categories is not None else None
        self._window: deque[str] = deque([""] * WINDOW_SIZE, maxlen=WINDOW_SIZE)
        self._layout: FieldLayout | None = None
        self._category = ""
        self._headers = HeaderRegistry()
        self._diffs = DiffEngine()
        self._closed = False
        self.stats = AssemblerStats()

    @property
    def category(self) -> str | None:
        """Return the active category, or ``None`` before the first table header."""
        return self._category if self._layout is not None else None

    @property
    def headers(self) -> HeaderRegistry:
        return self._headers

    def is_selected(self, category: str) -> bool:
        """Return whether a category passes the output category filter."""
        return self._categories is None or category in self._categories

    def slice(self, line: str) -> list[str]:
        """Slice a line with the current layout.

        Raises:
            LayoutError: If no separator line has been seen yet.
        """
        if self._layout is None:
            raise LayoutError("No column layout has been derived yet.")
        return self._layout.slice(line)

    def feed(self, line: str) -> None:
        """Consume one input line.

        Raises:
            TimeParseError: If the timestamp of a candidate row cannot be parsed.
            UnknownColumnError: If a configured diff column is missing from the header.
        """
        self.stats.lines_read += 1
        self._window.append(line)
        header_line, middle_line, newest_line = self._window

        layout = derive_layout(middle_line)
        if layout is not None:
            self._start_block(layout, header_line, newest_line)

        try:
            row: list[str | None] = list(self.slice(newest_line))
        except LayoutError:
            return

        if row[CNAME_INDEX] != self._category:
            self.stats.category_mismatches += 1
            return
        if len(row) <= PTIME_INDEX:
            raise TimeParseError(
                f"Category {self._category} has no timestamp column."
            )
        if not self._time_filter.in_window(row[PTIME_INDEX] or ""):
            self.stats.outside_window += 1
            return

        category_config = self._config.get(self._category)
        if category_config is not None and category_config.diff is not None:
            row = self._diffs.diff(
                self._category,
                row,
                self._headers.column_index,
                category_config.diff,
            )

        if not self.is_selected(self._category):
            self.stats.filtered_out += 1
            return
        self._sink.put_row(self._category, row)
        self.stats.rows_emitted += 1

    def consume(self, lines: Iterable[str]) -> int:
        """Feed every line of an iterable and return how many were consumed."""
        count = 0
        for line in lines:
            self.feed(line)
            count += 1
        return count

    def close(self) -> None:
        """Render configured reports and finish the sink, exactly once."""
        if self._closed:
            logger.debug("Assembler already closed; ignoring close()")
            return
        self._closed = True
        if isinstance(self._sink, ReportingSink):
            for name, category_config in self._config.items():
                if category_config.pivot is None or not self.is_selected(name):
                    continue
                try:
                    self._sink.apply_report(name, category_config.pivot)
                except SinkUnsupportedOperation as exc:
                    logger.debug(f"Sink skipped report (category={name} reason={exc})")
        else:
            logger.debug(
                f"Sink has no report capability (sink={type(self._sink).__name__})"
            )
        self._sink.finish()
        logger.info(
            f"Assembly finished (lines={self.stats.lines_read} "
            f"headers={self.stats.headers_emitted} rows={self.stats.rows_emitted})"
        )

    def _start_block(
        self, layout: FieldLayout, header_line: str, data_line: str
    ) -> None:
        """Switch to a new table block detected around a separator line."""
        category = layout.slice(data_line)[CNAME_INDEX]
        if not category:
            logger.debug("Separator without a category in the following line; ignored")
            return
        self._layout = layout
        self._category = category

        category_config = self._config.get(category)
        diff_values = (
            category_config.diff.value
            if category_config is not None and category_config.diff is not None
            else ()
        )
        header = layout.slice(header_line)
        if not self._headers.record_if_new(category, header, diff_values):
            return
        if self.is_selected(category):
            self._sink.put_row(category, list(self._headers.header(category)))
            self.stats.headers_emitted += 1
            logger.debug(f"Emitted header (category={category})")
