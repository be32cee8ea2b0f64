# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for the dump table assembler."""

from remint.assembler import AssemblerStats, LineAssembler
from remint.config import CategoryConfig, ConfigError, DiffSpec, load_config
from remint.diff import DiffEngine
from remint.headers import HeaderRegistry, UnknownColumnError
from remint.layout import FieldLayout, FieldSpan, LayoutError, derive_layout
from remint.reader import iter_lines, open_dump
from remint.sink import OutputSink, ReportingSink, SinkUnsupportedOperation
from remint.time_filter import TimeFilter, TimeParseError, parse_timestamp

__all__ = [
    "AssemblerStats",
    "CategoryConfig",
    "ConfigError",
    "DiffEngine",
    "DiffSpec",
    "FieldLayout",
    "FieldSpan",
    "HeaderRegistry",
    "LayoutError",
    "LineAssembler",
    "OutputSink",
    "ReportingSink",
    "SinkUnsupportedOperation",
    "TimeFilter",
    "TimeParseError",
    "UnknownColumnError",
    "derive_layout",
    "iter_lines",
    "load_config",
    "open_dump",
    "parse_timestamp",
]
