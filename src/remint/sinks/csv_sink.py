# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""CSV sink writing one file per category."""

import csv
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, TextIO

logger = logging.getLogger(__name__)


class CSVOutputSink:
    """Write each category's rows to ``<prefix>_<category>.csv``."""

    def __init__(self, file_prefix: Path | str) -> None:
        """Initialize the sink.

        Args:
            file_prefix: Path prefix shared by every category file.
        """
        self._file_prefix = str(file_prefix)
        self._files: dict[str, TextIO] = {}
        self._writers: dict[str, Any] = {}

    def path_for(self, category: str) -> Path:
        """Return the CSV path used for a category."""
        return Path(f"{self._file_prefix}_{category}.csv")

    def put_row(self, category: str, fields: Sequence[str | None]) -> None:
        """Append one row, opening the category file on first use.

        Raises:
            OSError: If the category file cannot be created.
        """
        writer = self._writers.get(category)
        if writer is None:
            path = self.path_for(category)
            handle = path.open("w", encoding="utf-8", newline="")
            self._files[category] = handle
            writer = csv.writer(handle)
            self._writers[category] = writer
            logger.debug(f"Opened CSV output (category={category} path={path})")
        writer.writerow(["" if value is None else value for value in fields])

    def finish(self) -> None:
        """Close every category file."""
        for category, handle in self._files.items():
            handle.close()
            logger.debug(f"Closed CSV output (category={category})")
        logger.info(f"CSV output written (prefix={self._file_prefix} files={len(self._files)})")
        self._files.clear()
        self._writers.clear()
