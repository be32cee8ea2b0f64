# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for pivot declarations and pivot summaries."""

import pytest
from openpyxl import Workbook
from openpyxl.chart import AreaChart, BarChart, LineChart

from remint.headers import UnknownColumnError
from remint.sinks.report import PivotSpec, ReportSpecError, build_pivot, make_chart

HEADER = ["CNAME", "PTIME", "CLASS", "NAME", "VALUE", "diff_VALUE"]
ROWS = [
    ["SYSSTAT", "t1", 1, "user commits", 10, None],
    ["SYSSTAT", "t1", 1, "user rollbacks", 2, None],
    ["SYSSTAT", "t1", 8, "physical reads", 500, None],
    ["SYSSTAT", "t2", 1, "user commits", 16, 6],
    ["SYSSTAT", "t2", 1, "user rollbacks", 2, 0],
    ["SYSSTAT", "t2", 8, "physical reads", 900, 400],
]


def test_report_001_parses_full_pivot_declaration() -> None:
    spec = PivotSpec.from_mapping(
        {
            "RowField": "CTIMESTAMP",
            "ColumnField": ["NAME", "SUBPOOL#"],
            "DataField": "BYTES",
            "PageField": "CNAME",
            "CurrentPage": "(All)",
            "ChartType": "Excel::XlAreaStacked100",
            "invisible": [{"field": "NAME", "item": ["free memory"]}],
            "PivotFilters": {"Type": "Excel::XlTopCount", "Value1": 15},
        }
    )

    assert spec.column_fields == ("NAME", "SUBPOOL#")
    assert spec.data_fields == ("BYTES",)
    assert spec.current_page is None
    assert spec.chart_type == "XlAreaStacked100"
    assert spec.invisible[0].items == frozenset({"free memory"})
    assert spec.top_count == 15 and spec.top_largest


@pytest.mark.parametrize(
    "raw",
    [
        {"DataField": "VALUE"},
        {"RowField": "PTIME"},
        {"RowField": "PTIME", "DataField": "VALUE", "ChartType": "Excel::XlPie3D"},
        {"RowField": "PTIME", "DataField": "VALUE", "PivotFilters": {"Type": "XlValueIsBetween"}},
        {"RowField": "PTIME", "DataField": "VALUE", "visible": {"field": "NAME"}},
    ],
)
def test_report_002_malformed_declarations_are_rejected(raw: dict) -> None:
    with pytest.raises(ReportSpecError):
        PivotSpec.from_mapping(raw)


def test_report_003_sums_by_row_and_column_with_page_and_visible_filters() -> None:
    spec = PivotSpec.from_mapping(
        {
            "RowField": "PTIME",
            "ColumnField": "NAME",
            "DataField": ["diff_VALUE"],
            "PageField": "CLASS",
            "CurrentPage": 1,
            "visible": [{"field": "NAME", "item": ["user commits", "user rollbacks"]}],
        }
    )

    table = build_pivot("SYSSTAT", HEADER, ROWS, spec)

    assert table.column_labels == ["user commits", "user rollbacks"]
    assert table.row_labels == ["t1", "t2"]
    assert table.values == [[None, None], [6, 0]]
    assert table.to_rows()[0] == ["PTIME", "user commits", "user rollbacks"]


def test_report_004_top_count_keeps_largest_column_items() -> None:
    spec = PivotSpec.from_mapping(
        {
            "RowField": "PTIME",
            "ColumnField": "NAME",
            "DataField": "VALUE",
            "PivotFilters": {"Type": "Excel::XlTopCount", "Value1": 2},
        }
    )

    table = build_pivot("SYSSTAT", HEADER, ROWS, spec)

    assert table.column_labels == ["physical reads", "user commits"]
    assert table.values == [[500, 10], [900, 16]]


def test_report_005_multiple_data_fields_and_invisible_items() -> None:
    spec = PivotSpec.from_mapping(
        {
            "RowField": "PTIME",
            "ColumnField": "NAME",
            "DataField": ["VALUE", "diff_VALUE"],
            "invisible": [{"field": "NAME", "item": ["physical reads", "user rollbacks"]}],
        }
    )

    table = build_pivot("SYSSTAT", HEADER, ROWS, spec)

    assert table.column_labels == [
        "user commits - Sum / VALUE",
        "user commits - Sum / diff_VALUE",
    ]
    assert table.values == [[10, None], [16, 6]]


def test_report_006_without_column_fields_sums_per_row() -> None:
    spec = PivotSpec.from_mapping({"RowField": "PTIME", "DataField": "VALUE"})

    table = build_pivot("SYSSTAT", HEADER, ROWS, spec)

    assert table.column_labels == ["Sum / VALUE"]
    assert table.values == [[512], [918]]


def test_report_007_numeric_items_sort_numerically() -> None:
    header = ["CNAME", "PTIME", "CPU", "USR"]
    rows = [["MPSTAT", "t", cpu, "1"] for cpu in ("10", "2", "all", "1")]
    spec = PivotSpec.from_mapping({"RowField": "PTIME", "ColumnField": "CPU", "DataField": "USR"})

    table = build_pivot("MPSTAT", header, rows, spec)

    assert table.column_labels == ["1", "2", "10", "all"]


def test_report_008_unknown_fields_are_reported() -> None:
    spec = PivotSpec.from_mapping({"RowField": "CTIMESTAMP", "DataField": "VALUE"})

    with pytest.raises(UnknownColumnError) as excinfo:
        build_pivot("SYSSTAT", HEADER, ROWS, spec)
    assert excinfo.value.column == "CTIMESTAMP"


@pytest.mark.parametrize(
    ("chart_type", "chart_class", "grouping"),
    [
        ("Excel::XlLineMarkers", LineChart, "standard"),
        ("XlAreaStacked", AreaChart, "stacked"),
        ("Excel::XlAreaStacked100", AreaChart, "percentStacked"),
        ("Excel::XlColumnStacked", BarChart, "stacked"),
    ],
)
def test_report_009_chart_types_map_to_chart_families(
    chart_type: str, chart_class: type, grouping: str
) -> None:
    sheet = Workbook().active
    for row in [["PTIME", "a", "b"], ["t1", 1, 2], ["t2", 3, 4]]:
        sheet.append(row)

    chart = make_chart(chart_type, "title", sheet, row_count=2, series_count=2)

    assert isinstance(chart, chart_class)
    assert chart.grouping == grouping
    assert len(chart.series) == 2
    assert chart.x_axis.tickLblSkip == 1
