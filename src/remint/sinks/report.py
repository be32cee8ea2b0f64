# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Pivot summaries and charts rendered from category sheets."""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from openpyxl.chart import AreaChart, BarChart, LineChart, Reference
from openpyxl.chart.marker import Marker
from openpyxl.worksheet.worksheet import Worksheet

from remint.headers import UnknownColumnError

logger = logging.getLogger(__name__)

ALL_ITEMS = "(All)"
DEFAULT_CHART_TYPE = "XlLineMarkers"
LABEL_SEPARATOR = " / "
_NUMBER_RE = re.compile(r"\A\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*\Z")

# Chart family, grouping and marker flag per supported chart type name.
CHART_TYPES: dict[str, tuple[str, str, bool]] = {
    "XlLine": ("line", "standard", False),
    "XlLineMarkers": ("line", "standard", True),
    "XlLineStacked": ("line", "stacked", False),
    "XlArea": ("area", "standard", False),
    "XlAreaStacked": ("area", "stacked", False),
    "XlAreaStacked100": ("area", "percentStacked", False),
    "XlColumnClustered": ("bar", "clustered", False),
    "XlColumnStacked": ("bar", "stacked", False),
    "XlColumnStacked100": ("bar", "percentStacked", False),
}


class ReportSpecError(ValueError):
    """Represent a malformed pivot declaration."""


@dataclass(frozen=True)
class ItemFilter:
    """Restrict the items of one field.

    Attributes:
        field: Column whose values are filtered.
        items: Item values the filter applies to.
    """

    field: str
    items: frozenset[str]


@dataclass(frozen=True)
class PivotSpec:
    """Represent a parsed pivot declaration.

    Attributes:
        row_field: Column providing the row items (typically a timestamp).
        column_fields: Columns whose combined values form the column items.
        data_fields: Columns summed into the cells.
        page_field: Optional column used as a page filter.
        current_page: Page item kept; ``None`` keeps every item.
        chart_type: Chart type name without the ``Excel::`` prefix.
        visible: Filters keeping only the listed items.
        invisible: Filters hiding the listed items.
        top_count: Number of column items kept by the top/bottom filter.
        top_largest: Whether the top/bottom filter keeps the largest totals.
    """

    row_field: str
    column_fields: tuple[str, ...]
    data_fields: tuple[str, ...]
    page_field: str | None = None
    current_page: str | None = None
    chart_type: str = DEFAULT_CHART_TYPE
    visible: tuple[ItemFilter, ...] = ()
    invisible: tuple[ItemFilter, ...] = ()
    top_count: int | None = None
    top_largest: bool = True

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "PivotSpec":
        """Parse a verbatim pivot declaration.

        Raises:
            ReportSpecError: If required keys are missing or values are malformed.
        """
        row_field = raw.get("RowField")
        if not isinstance(row_field, str) or not row_field:
            raise ReportSpecError("Pivot declaration needs a 'RowField'.")
        data_fields = _names(raw.get("DataField"), "DataField")
        if not data_fields:
            raise ReportSpecError("Pivot declaration needs a 'DataField'.")
        page_field = raw.get("PageField")
        current_page = raw.get("CurrentPage")
        if current_page is not None:
            current_page = str(current_page)
        if current_page == ALL_ITEMS:
            current_page = None
        chart_type = _strip_prefix(str(raw.get("ChartType") or DEFAULT_CHART_TYPE))
        if chart_type not in CHART_TYPES:
            raise ReportSpecError(f"Unsupported chart type: {chart_type}")
        top_count, top_largest = _parse_top_filter(raw.get("PivotFilters"))
        return cls(
            row_field=row_field,
            column_fields=_names(raw.get("ColumnField"), "ColumnField"),
            data_fields=data_fields,
            page_field=str(page_field) if page_field is not None else None,
            current_page=current_page,
            chart_type=chart_type,
            visible=_item_filters(raw.get("visible"), "visible"),
            invisible=_item_filters(raw.get("invisible"), "invisible"),
            top_count=top_count,
            top_largest=top_largest,
        )


@dataclass(frozen=True)
class PivotTable:
    """Represent a computed pivot summary.

    Attributes:
        row_field: Name of the row field, used as the first header cell.
        row_labels: Row items in display order.
        column_labels: Column headers in display order.
        values: One list of cell values per row item.
    """

    row_field: str
    row_labels: list[str]
    column_labels: list[str]
    values: list[list[int | float | None]]

    def to_rows(self) -> list[list[Any]]:
        """Return the table as sheet rows, header first."""
        rows: list[list[Any]] = [[self.row_field, *self.column_labels]]
        for label, cells in zip(self.row_labels, self.values):
            rows.append([label, *cells])
        return rows


def build_pivot(
    category: str,
    header: Sequence[str],
    rows: Iterable[Sequence[Any]],
    spec: PivotSpec,
) -> PivotTable:
    """Sum data fields by row item and column item.

    Args:
        category: Category the rows belong to, used in error messages.
        header: Column names of the rows.
        rows: Data rows (without the header).
        spec: Parsed pivot declaration.

    Returns:
        The pivot summary.

    Raises:
        UnknownColumnError: If the declaration names a column missing from ``header``.
    """

    def index_of(name: str) -> int:
        try:
            return list(header).index(name)
        except ValueError:
            raise UnknownColumnError(category, name) from None

    row_index = index_of(spec.row_field)
    column_indexes = [index_of(name) for name in spec.column_fields]
    data_indexes = [index_of(name) for name in spec.data_fields]
    page_index = index_of(spec.page_field) if spec.page_field else None
    visible = [(index_of(f.field), f.items) for f in spec.visible]
    invisible = [(index_of(f.field), f.items) for f in spec.invisible]

    sums: dict[tuple[str, tuple[str, ...], int], int | float] = {}
    row_items: set[str] = set()
    column_items: set[tuple[str, ...]] = set()
    first_totals: dict[tuple[str, ...], float] = {}
    for row in rows:
        if page_index is not None and spec.current_page is not None:
            if _text(_cell(row, page_index)) != spec.current_page:
                continue
        if any(_text(_cell(row, i)) not in items for i, items in visible):
            continue
        if any(_text(_cell(row, i)) in items for i, items in invisible):
            continue
        row_item = _text(_cell(row, row_index))
        column_item = tuple(_text(_cell(row, i)) for i in column_indexes)
        row_items.add(row_item)
        column_items.add(column_item)
        for position, data_index in enumerate(data_indexes):
            number = _number(_cell(row, data_index))
            if number is None:
                continue
            key = (row_item, column_item, position)
            sums[key] = sums.get(key, 0) + number
            if position == 0:
                first_totals[column_item] = first_totals.get(column_item, 0.0) + number

    ordered_columns = sorted(column_items, key=lambda item: tuple(map(_sort_key, item)))
    if spec.top_count is not None:
        ranked = sorted(
            ordered_columns,
            key=lambda item: first_totals.get(item, 0.0),
            reverse=spec.top_largest,
        )
        kept = set(ranked[: spec.top_count])
        ordered_columns = [item for item in ordered_columns if item in kept]
    ordered_rows = sorted(row_items, key=_sort_key)

    labels: list[str] = []
    cells: list[tuple[tuple[str, ...], int]] = []
    for column_item in ordered_columns:
        for position, data_field in enumerate(spec.data_fields):
            labels.append(_column_label(column_item, data_field, spec))
            cells.append((column_item, position))

    values = [
        [sums.get((row_item, column_item, position)) for column_item, position in cells]
        for row_item in ordered_rows
    ]
    logger.debug(
        f"Built pivot (category={category} rows={len(ordered_rows)} columns={len(labels)})"
    )
    return PivotTable(
        row_field=spec.row_field,
        row_labels=ordered_rows,
        column_labels=labels,
        values=values,
    )


def make_chart(
    chart_type: str,
    title: str,
    sheet: Worksheet,
    row_count: int,
    series_count: int,
) -> AreaChart | BarChart | LineChart:
    """Create a chart over a pivot table laid out with its header in row 1.

    Args:
        chart_type: Supported chart type name, with or without ``Excel::``.
        title: Chart title.
        sheet: Worksheet holding the pivot table.
        row_count: Number of row items below the header.
        series_count: Number of value columns right of the row labels.

    Raises:
        ReportSpecError: If the chart type is not supported.
    """
    name = _strip_prefix(chart_type)
    try:
        family, grouping, markers = CHART_TYPES[name]
    except KeyError:
        raise ReportSpecError(f"Unsupported chart type: {chart_type}") from None

    chart: AreaChart | BarChart | LineChart
    if family == "area":
        chart = AreaChart()
    elif family == "bar":
        chart = BarChart()
        chart.type = "col"
        if grouping != "clustered":
            chart.overlap = 100
    else:
        chart = LineChart()
    chart.grouping = grouping
    chart.title = title

    data = Reference(
        sheet, min_col=2, min_row=1, max_col=1 + series_count, max_row=1 + row_count
    )
    categories = Reference(sheet, min_col=1, min_row=2, max_row=1 + row_count)
    chart.add_data(data, titles_from_data=True)
    chart.set_categories(categories)
    chart.x_axis.tickLblSkip = row_count // 10 + 1
    chart.x_axis.tickMarkSkip = 1
    if family == "line":
        symbol = "circle" if markers else "none"
        for series in chart.series:
            series.marker = Marker(symbol=symbol)
    return chart


def _strip_prefix(chart_type: str) -> str:
    return chart_type.rsplit("::", 1)[-1].strip()


def _names(raw: Any, label: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, list):
        return tuple(str(item) for item in raw)
    if isinstance(raw, (str, int, float)):
        return (str(raw),)
    raise ReportSpecError(f"'{label}' must be a name or a list of names.")


def _item_filters(raw: Any, label: str) -> tuple[ItemFilter, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ReportSpecError(f"'{label}' must be a list of field filters.")
    filters: list[ItemFilter] = []
    for entry in raw:
        if not isinstance(entry, Mapping) or "field" not in entry:
            raise ReportSpecError(f"'{label}' entries need a 'field' and an 'item' list.")
        filters.append(
            ItemFilter(
                field=str(entry["field"]),
                items=frozenset(_names(entry.get("item"), f"{label}.item")),
            )
        )
    return tuple(filters)


def _parse_top_filter(raw: Any) -> tuple[int | None, bool]:
    if raw is None:
        return None, True
    if not isinstance(raw, Mapping):
        raise ReportSpecError("'PivotFilters' must be a mapping.")
    filter_type = _strip_prefix(str(raw.get("Type", "")))
    if filter_type not in {"XlTopCount", "XlBottomCount"}:
        raise ReportSpecError(f"Unsupported pivot filter type: {filter_type}")
    try:
        count = int(raw.get("Value1"))
    except (TypeError, ValueError):
        raise ReportSpecError("'PivotFilters.Value1' must be an integer.") from None
    return count, filter_type == "XlTopCount"


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _number(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and _NUMBER_RE.match(value):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return float(text)
    return None


def _sort_key(label: str) -> tuple[int, float, str]:
    number = _number(label)
    if number is None:
        return (1, 0.0, label)
    return (0, float(number), label)


def _column_label(column_item: tuple[str, ...], data_field: str, spec: PivotSpec) -> str:
    sum_label = f"Sum{LABEL_SEPARATOR}{data_field}"
    if not spec.column_fields:
        return sum_label
    item_label = LABEL_SEPARATOR.join(column_item)
    if len(spec.data_fields) == 1:
        return item_label
    return f"{item_label} - {sum_label}"
