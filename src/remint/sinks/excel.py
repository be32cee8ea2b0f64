# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Excel workbook sink with one sheet per category and pivot reports."""

import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from remint.sinks.report import PivotSpec, build_pivot, make_chart

logger = logging.getLogger(__name__)

BUFFER_ROW_LEN = 1024
MAX_SHEET_NAME_LEN = 31
MAX_STR_LEN = 254
MAX_ROWS = 65536 * 16
FONT_SIZE = 8
COLUMN_WIDTH = 12

_INT_RE = re.compile(r"\A[+-]?\d+\Z")
_FLOAT_RE = re.compile(r"\A[+-]?(?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?\Z")


def sheet_title(name: str) -> str:
    """Return a worksheet title within Excel's length limit."""
    return name[:MAX_SHEET_NAME_LEN]


def pivot_sheet_title(category: str) -> str:
    """Return the title of a category's pivot summary sheet."""
    return sheet_title(f"Pivot {category}").replace(" ", "")


def graph_sheet_title(category: str) -> str:
    """Return the title of a category's chart sheet."""
    return sheet_title(f"{category} Graph")


def cell_value(value: str | None) -> str | int | float | None:
    """Convert a field value to a cell value.

    Integers and decimals become numbers; long text is cut to ``MAX_STR_LEN``.
    """
    if value is None or value == "":
        return None
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    return value[:MAX_STR_LEN]


def style_sheet(sheet: Worksheet) -> None:
    """Apply the compact font and column width used by every generated sheet."""
    font = Font(size=FONT_SIZE)
    for row in sheet.iter_rows():
        for cell in row:
            cell.font = font
    for column in range(1, sheet.max_column + 1):
        sheet.column_dimensions[get_column_letter(column)].width = COLUMN_WIDTH


class ExcelSheet:
    """Buffer rows for one worksheet and append them in batches."""

    def __init__(self, sheet: Worksheet, name: str) -> None:
        """Initialize the sheet wrapper.

        Args:
            sheet: Target worksheet.
            name: Category name; the sheet title is derived from it.
        """
        self.sheet = sheet
        self.sheet.title = sheet_title(name)
        self._buffer: list[list[str | int | float | None]] = []
        self._rows = 0
        self._overflow_reported = False

    @property
    def row_count(self) -> int:
        """Return the number of rows accepted so far, including dropped overflow."""
        return self._rows + len(self._buffer)

    def put(self, fields: Sequence[str | None]) -> None:
        self._buffer.append([cell_value(value) for value in fields])
        if len(self._buffer) >= BUFFER_ROW_LEN:
            self.flush()

    def flush(self) -> None:
        """Append buffered rows, dropping those beyond ``MAX_ROWS``."""
        if not self._buffer:
            return
        room = max(MAX_ROWS - self._rows, 0)
        if len(self._buffer) > room and not self._overflow_reported:
            omitted = ", ".join("" if v is None else str(v) for v in self._buffer[room])
            logger.warning(
                f"Sheet exceeded row limit (sheet={self.sheet.title} max_rows={MAX_ROWS} "
                f"first_omitted={omitted!r})"
            )
            self._overflow_reported = True
        for row in self._buffer[:room]:
            self.sheet.append(row)
        self._rows += len(self._buffer)
        self._buffer = []

    def close(self) -> None:
        self.flush()
        style_sheet(self.sheet)


class ExcelOutputSink:
    """Write every category to its own worksheet of one workbook."""

    def __init__(self, path: Path) -> None:
        """Initialize the workbook.

        Args:
            path: Target ``.xlsx`` file, written by ``finish()``.
        """
        self._path = path
        self._workbook = Workbook()
        self._placeholder: Worksheet | None = self._workbook.active
        self._outputs: dict[str, ExcelSheet] = {}
        self._closed: set[str] = set()

    @property
    def workbook(self) -> Workbook:
        return self._workbook

    def put_row(self, category: str, fields: Sequence[str | None]) -> None:
        output = self._outputs.get(category)
        if output is None:
            output = self._add_output(category)
        output.put(fields)

    def apply_report(self, category: str, spec: Mapping[str, Any]) -> None:
        """Add a pivot summary sheet and a chart sheet for a category.

        Categories without rows are skipped.

        Raises:
            ReportSpecError: If the pivot declaration is malformed.
            UnknownColumnError: If the declaration names an unknown column.
        """
        output = self._outputs.get(category)
        if output is None:
            logger.debug(f"No sheet for report; skipped (category={category})")
            return
        pivot_spec = PivotSpec.from_mapping(spec)
        self._close_output(category)

        rows = output.sheet.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            logger.debug(f"Empty sheet for report; skipped (category={category})")
            return
        header = ["" if name is None else str(name) for name in header_row]
        table = build_pivot(category, header, rows, pivot_spec)

        position = self._workbook.sheetnames.index(output.sheet.title) + 1
        pivot_sheet = self._workbook.create_sheet(pivot_sheet_title(category), position)
        for row in table.to_rows():
            pivot_sheet.append(row)
        style_sheet(pivot_sheet)

        if not table.row_labels or not table.column_labels:
            logger.warning(f"Pivot is empty; no chart created (category={category})")
            return
        chart = make_chart(
            pivot_spec.chart_type,
            category,
            pivot_sheet,
            row_count=len(table.row_labels),
            series_count=len(table.column_labels),
        )
        chart_sheet = self._workbook.create_chartsheet(
            graph_sheet_title(category), position + 1
        )
        chart_sheet.add_chart(chart)
        logger.info(
            f"Report created (category={category} rows={len(table.row_labels)} "
            f"series={len(table.column_labels)})"
        )

    def finish(self) -> None:
        """Flush every sheet and save the workbook.

        Raises:
            OSError: If the workbook cannot be written.
        """
        for category in list(self._outputs):
            self._close_output(category)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._workbook.save(self._path)
        logger.info(f"Workbook written (path={self._path} sheets={len(self._outputs)})")

    def _add_output(self, category: str) -> ExcelSheet:
        if self._placeholder is not None:
            sheet = self._placeholder
            self._placeholder = None
        else:
            sheet = self._workbook.create_sheet()
        output = ExcelSheet(sheet, category)
        self._outputs[category] = output
        return output

    def _close_output(self, category: str) -> None:
        if category in self._closed:
            return
        self._outputs[category].close()
        self._closed.add(category)
