# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Output sink backends for assembled rows."""

from remint.sinks.csv_sink import CSVOutputSink
from remint.sinks.excel import ExcelOutputSink

__all__ = ["CSVOutputSink", "ExcelOutputSink"]
