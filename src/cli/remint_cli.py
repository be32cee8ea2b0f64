# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command-line entry point turning monitoring dumps into CSV or Excel reports."""

import argparse
import logging
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from remint.assembler import LineAssembler
from remint.compare import DEFAULT_CATEGORIES, compare_workbooks
from remint.config import CategoryConfig, ConfigError, load_config
from remint.headers import UnknownColumnError
from remint.reader import iter_lines
from remint.sink import OutputSink, ReportingSink, SinkUnsupportedOperation
from remint.sinks import CSVOutputSink, ExcelOutputSink
from remint.sinks.report import ReportSpecError
from remint.time_filter import TimeFilter, TimeParseError

logger = logging.getLogger(__name__)

FORMATS = ("xls", "xlsx", "csv")


class _CountingSink:
    """Forward rows to a sink while counting data rows per category."""

    def __init__(self, sink: OutputSink) -> None:
        self._sink = sink
        self.rows: dict[str, int] = {}

    def put_row(self, category: str, fields: Sequence[str | None]) -> None:
        if category in self.rows:
            self.rows[category] += 1
        else:
            # header row
            self.rows[category] = 0
        self._sink.put_row(category, fields)

    def apply_report(self, category: str, spec: Mapping[str, Any]) -> None:
        if not isinstance(self._sink, ReportingSink):
            raise SinkUnsupportedOperation(
                f"{type(self._sink).__name__} does not render reports"
            )
        self._sink.apply_report(category, spec)

    def finish(self) -> None:
        self._sink.finish()


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(
        prog="remint",
        description="Convert fixed-width monitoring dumps into CSV files or an Excel report.",
    )
    parser.add_argument("files", nargs="*", help="Dump files, plain or gzip-compressed.")
    parser.add_argument(
        "-o", "--output", help="Output file prefix (or .xlsx file with --compare)."
    )
    parser.add_argument(
        "-b", "--begin", help="Begin time (YYYY-MM-DD HH24:MI:SS), inclusive."
    )
    parser.add_argument("-e", "--end", help="End time (YYYY-MM-DD HH24:MI:SS), inclusive.")
    parser.add_argument(
        "-c", "--category", help="Comma-separated list of categories to output."
    )
    parser.add_argument("-f", "--file", help="YAML category config file.")
    parser.add_argument(
        "-T", "--format", choices=FORMATS, default="xls", help="Output format."
    )
    parser.add_argument(
        "-C",
        "--compare",
        action="store_true",
        help="Compare the charts of report workbooks given as input files.",
    )
    parser.add_argument(
        "--encoding", default="utf-8", help="Text encoding of the dump files."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    if not args.files:
        stderr.write("Missing input file.\n")
        return 2
    if not args.output:
        stderr.write("Missing output file prefix.\n")
        return 2
    if args.compare and not args.output.endswith(".xlsx"):
        stderr.write('Extension of output file name must be "xlsx".\n')
        return 2

    try:
        config = load_config(Path(args.file) if args.file else None)
    except ConfigError as exc:
        stderr.write(f"Invalid config: {exc}\n")
        return 2
    categories = parse_categories(args.category)

    if args.compare:
        return _run_compare(args=args, config=config, categories=categories, stderr=stderr)
    return _run_convert(
        args=args, config=config, categories=categories, stdout=stdout, stderr=stderr
    )


def parse_categories(category_arg: str | None) -> list[str] | None:
    """Parse the comma-separated category argument.

    Returns:
        Category names, or ``None`` when every category is selected.
    """
    if category_arg is None:
        return None
    return [part.strip() for part in category_arg.split(",") if part.strip()]


def build_sink(output_format: str, output: str) -> OutputSink:
    """Create the sink for an output format.

    Args:
        output_format: One of ``FORMATS``.
        output: Output file prefix.

    Returns:
        Configured sink.
    """
    if output_format == "csv":
        return CSVOutputSink(output)
    return ExcelOutputSink(Path(f"{output}.xlsx"))


def _run_convert(
    args: argparse.Namespace,
    config: Mapping[str, CategoryConfig],
    categories: list[str] | None,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Run dump conversion.

    Args:
        args: Parsed CLI arguments.
        config: Category configuration.
        categories: Selected categories, ``None`` for all.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    paths = [Path(name) for name in args.files]
    missing = [path for path in paths if not path.exists()]
    if missing:
        for path in missing:
            logger.warning(f"Path does not exist (path={path})")
            stderr.write(f"Path does not exist: {path}\n")
        return 2
    try:
        time_filter = TimeFilter.from_bounds(args.begin, args.end)
    except TimeParseError as exc:
        stderr.write(f"Invalid time bound: {exc}\n")
        return 2

    sink = _CountingSink(build_sink(args.format, args.output))
    assembler = LineAssembler(
        config=config, sink=sink, time_filter=time_filter, categories=categories
    )
    try:
        assembler.consume(iter_lines(paths, encoding=args.encoding))
        assembler.close()
    except (TimeParseError, UnknownColumnError, ReportSpecError) as exc:
        logger.warning(f"Conversion aborted (error={exc})")
        stderr.write(f"Conversion aborted: {exc}\n")
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read or write files (error={exc})")
        stderr.write(f"I/O error: {exc}\n")
        return 1

    _write_summary(rows=sink.rows, stdout=stdout)
    return 0


def _run_compare(
    args: argparse.Namespace,
    config: Mapping[str, CategoryConfig],
    categories: list[str] | None,
    stderr: TextIO,
) -> int:
    """Run workbook comparison.

    Args:
        args: Parsed CLI arguments.
        config: Category configuration, used for chart types.
        categories: Categories to compare, defaults when ``None``.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    chart_types = {
        name: str(entry.pivot["ChartType"])
        for name, entry in config.items()
        if entry.pivot is not None and entry.pivot.get("ChartType")
    }
    try:
        compare_workbooks(
            inputs=[Path(name) for name in args.files],
            output=Path(args.output),
            categories=categories or list(DEFAULT_CATEGORIES),
            chart_types=chart_types,
        )
    except (OSError, ReportSpecError) as exc:
        logger.warning(f"Comparison failed (error={exc})")
        stderr.write(f"Comparison failed: {exc}\n")
        return 1
    return 0


def _write_summary(rows: Mapping[str, int], stdout: TextIO) -> None:
    """Write the per-category row counts as a table.

    Args:
        rows: Data rows emitted per category.
        stdout: Standard output stream.
    """
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    table = Table(show_header=True)
    table.add_column("category")
    table.add_column("rows", justify="right")
    for category in sorted(rows):
        table.add_row(category, str(rows[category]))
    console.print(table)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
