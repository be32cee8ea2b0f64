# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the remint command-line interface."""

import csv
import gzip
import io
from pathlib import Path

from openpyxl import load_workbook

from cli.remint_cli import parse_categories, run

WIDTHS = (7, 10, 19, 8, 5)


def _line(*values: str) -> str:
    return " ".join(value.ljust(width) for value, width in zip(values, WIDTHS)).rstrip()


def _meminfo_dump() -> str:
    lines = [
        _line("CNAME", "PTIME", "CTIMESTAMP", "name", "value"),
        " ".join("-" * width for width in WIDTHS),
        _line("MEMINFO", "1000000000", "2001-09-09 01:46:40", "MemFree", "100"),
        _line("MEMINFO", "1000000000", "2001-09-09 01:46:40", "Slab", "20"),
        _line("MEMINFO", "1000000060", "2001-09-09 01:47:40", "MemFree", "90"),
        _line("MEMINFO", "1000000060", "2001-09-09 01:47:40", "Slab", "25"),
        "",
        _line("CNAME", "PTIME", "VAL"),
        " ".join("-" * width for width in WIDTHS[:3]),
        _line("FOO", "1000000000", "5"),
        _line("FOO", "not-a-time-at-all", "7"),
    ]
    return "\n".join(lines[:-1]) + "\n"


def _write_dump(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _run(argv: list[str]) -> tuple[int, str, str]:
    stdout = io.StringIO()
    stderr = io.StringIO()
    exit_code = run(argv, stdout=stdout, stderr=stderr)
    return exit_code, stdout.getvalue(), stderr.getvalue()


def test_cli_001_requires_input_and_output(tmp_path: Path) -> None:
    dump = _write_dump(tmp_path / "dump.txt", _meminfo_dump())

    assert _run([])[0] == 2
    exit_code, _, stderr = _run([str(dump)])
    assert exit_code == 2
    assert "Missing output file prefix" in stderr


def test_cli_002_fails_when_input_path_is_missing(tmp_path: Path) -> None:
    exit_code, _, stderr = _run([str(tmp_path / "missing.gz"), "-o", str(tmp_path / "out")])

    assert exit_code == 2
    assert "Path does not exist" in stderr


def test_cli_003_writes_csv_per_category(tmp_path: Path) -> None:
    dump = _write_dump(tmp_path / "dump.txt", _meminfo_dump())
    prefix = tmp_path / "out" / "run"
    prefix.parent.mkdir()

    exit_code, stdout, _ = _run(["-T", "csv", "-o", str(prefix), str(dump)])

    assert exit_code == 0
    with (tmp_path / "out" / "run_MEMINFO.csv").open(encoding="utf-8", newline="") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == ["CNAME", "PTIME", "CTIMESTAMP", "name", "value"]
    assert len(rows) == 5
    assert (tmp_path / "out" / "run_FOO.csv").exists()
    assert "MEMINFO" in stdout


def test_cli_004_category_and_time_options_filter_rows(tmp_path: Path) -> None:
    dump = tmp_path / "dump.txt.gz"
    with gzip.open(dump, "wt", encoding="utf-8") as handle:
        handle.write(_meminfo_dump())
    prefix = tmp_path / "run"

    exit_code, _, _ = _run(
        [
            "-T",
            "csv",
            "-c",
            "MEMINFO",
            "-b",
            "2001-09-09 01:47:00",
            "-o",
            str(prefix),
            str(dump),
        ]
    )

    assert exit_code == 0
    with (tmp_path / "run_MEMINFO.csv").open(encoding="utf-8", newline="") as handle:
        rows = list(csv.reader(handle))
    assert [row[3] for row in rows[1:]] == ["MemFree", "Slab"]
    assert not (tmp_path / "run_FOO.csv").exists()


def test_cli_005_unparseable_timestamp_aborts_conversion(tmp_path: Path) -> None:
    content = _meminfo_dump() + _line("FOO", "not-a-time-at-all", "7") + "\n"
    dump = _write_dump(tmp_path / "dump.txt", content)

    exit_code, _, stderr = _run(["-T", "csv", "-o", str(tmp_path / "run"), str(dump)])

    assert exit_code == 1
    assert "Conversion aborted" in stderr


def test_cli_006_invalid_time_bound_is_a_usage_error(tmp_path: Path) -> None:
    dump = _write_dump(tmp_path / "dump.txt", _meminfo_dump())

    exit_code, _, stderr = _run(["-b", "yesterday-ish", "-o", str(tmp_path / "r"), str(dump)])

    assert exit_code == 2
    assert "Invalid time bound" in stderr


def test_cli_007_invalid_config_file_is_a_usage_error(tmp_path: Path) -> None:
    dump = _write_dump(tmp_path / "dump.txt", _meminfo_dump())
    config = _write_dump(tmp_path / "config.yaml", "name: MEMINFO\n")

    exit_code, _, stderr = _run(["-f", str(config), "-o", str(tmp_path / "r"), str(dump)])

    assert exit_code == 2
    assert "Invalid config" in stderr


def test_cli_008_writes_excel_report_and_compares_workbooks(tmp_path: Path) -> None:
    dump = _write_dump(tmp_path / "dump.txt", _meminfo_dump())
    prefix = tmp_path / "report"

    exit_code, _, _ = _run(["-o", str(prefix), str(dump)])

    assert exit_code == 0
    report = tmp_path / "report.xlsx"
    workbook = load_workbook(report)
    assert workbook.sheetnames[:3] == ["MEMINFO", "PivotMEMINFO", "MEMINFO Graph"]
    assert "FOO" in workbook.sheetnames
    pivot_rows = list(workbook["PivotMEMINFO"].iter_rows(values_only=True))
    assert pivot_rows[0] == ("CTIMESTAMP", "MemFree", "Slab")
    assert pivot_rows[1][1:] == (100, 20)

    exit_code, _, stderr = _run(["-C", "-o", str(tmp_path / "cmp.txt"), str(report)])
    assert exit_code == 2
    assert "xlsx" in stderr

    exit_code, _, _ = _run(["-C", "-o", str(tmp_path / "cmp.xlsx"), str(report), str(report)])
    assert exit_code == 0
    assert load_workbook(tmp_path / "cmp.xlsx").sheetnames[:3] == [
        "comparison",
        "1 MEMINFO",
        "2 MEMINFO",
    ]


def test_cli_009_parse_categories_ignores_blanks() -> None:
    assert parse_categories(None) is None
    assert parse_categories("MPSTAT, MEMINFO,,") == ["MPSTAT", "MEMINFO"]
