# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Side-by-side comparison of the charts of several report workbooks."""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter

from remint.sinks.excel import pivot_sheet_title, sheet_title
from remint.sinks.report import DEFAULT_CHART_TYPE, make_chart

logger = logging.getLogger(__name__)

OUTPUT_SHEET_NAME = "comparison"
DEFAULT_CATEGORIES: tuple[str, ...] = (
    "MPSTAT",
    "MEMINFO",
    "IOSTAT",
    "NETSTAT",
    "SYSSTAT",
    "SYSTEM_EVENT",
    "MEMORY_DYNAMIC_COMPONENTS",
    "SGASTAT",
    "KSMSS",
)
FIRST_ROW = 2
FIRST_COLUMN = 2
ROW_STEP = 25
COLUMN_STEP = 10
# 512 x 288 points, in centimetres.
CHART_WIDTH_CM = 512 / 72 * 2.54
CHART_HEIGHT_CM = 288 / 72 * 2.54


def compare_workbooks(
    inputs: Sequence[Path],
    output: Path,
    categories: Sequence[str] = DEFAULT_CATEGORIES,
    chart_types: Mapping[str, str] | None = None,
) -> int:
    """Lay out the pivot charts of several workbooks on one comparison sheet.

    Each input workbook gets a grid column and each category a grid row. The pivot
    data of every chart is copied into a hidden sheet of the output workbook.

    Args:
        inputs: Report workbooks produced by the Excel sink.
        output: Target ``.xlsx`` file.
        categories: Categories to compare, one grid row each.
        chart_types: Chart type per category; line charts with markers otherwise.

    Returns:
        Number of charts placed.

    Raises:
        OSError: If an input cannot be read or the output cannot be written.
    """
    chart_types = chart_types or {}
    workbook = Workbook()
    comparison = workbook.active
    comparison.title = OUTPUT_SHEET_NAME
    placed = 0

    column = FIRST_COLUMN
    for book_number, input_path in enumerate(inputs, start=1):
        source = load_workbook(input_path, data_only=True)
        row = FIRST_ROW
        for category in categories:
            title = pivot_sheet_title(category)
            if title not in source.sheetnames:
                logger.debug(
                    f"No pivot sheet; grid cell left empty (path={input_path} category={category})"
                )
                row += ROW_STEP
                continue
            values = list(source[title].iter_rows(values_only=True))
            data_sheet = workbook.create_sheet(sheet_title(f"{book_number} {category}"))
            data_sheet.sheet_state = "hidden"
            for values_row in values:
                data_sheet.append(list(values_row))
            row_count = len(values) - 1
            series_count = len(values[0]) - 1 if values else 0
            if row_count > 0 and series_count > 0:
                chart = make_chart(
                    chart_types.get(category, DEFAULT_CHART_TYPE),
                    f"{category} ({input_path.name})",
                    data_sheet,
                    row_count=row_count,
                    series_count=series_count,
                )
                chart.width = CHART_WIDTH_CM
                chart.height = CHART_HEIGHT_CM
                comparison.add_chart(chart, f"{get_column_letter(column)}{row}")
                placed += 1
            row += ROW_STEP
        source.close()
        column += COLUMN_STEP

    output.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(output)
    logger.info(
        f"Comparison written (path={output} workbooks={len(inputs)} charts={placed})"
    )
    return placed
