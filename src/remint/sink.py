# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Output sink contracts."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class SinkUnsupportedOperation(RuntimeError):
    """Represent a sink operation the backend cannot perform."""


class OutputSink(Protocol):
    """Define the contract for receiving assembled rows."""

    def put_row(self, category: str, fields: Sequence[str | None]) -> None:
        """Append one header or data row to a category's output.

        Args:
            category: Category the row belongs to.
            fields: Ordered field values; ``None`` marks an undefined delta.
        """

    def finish(self) -> None:
        """Flush and finalize every output."""


@runtime_checkable
class ReportingSink(Protocol):
    """Define the optional report capability of a sink."""

    def apply_report(self, category: str, spec: Mapping[str, Any]) -> None:
        """Render a report for a category from its verbatim pivot declaration.

        Raises:
            SinkUnsupportedOperation: If the backend cannot render this report.
        """
