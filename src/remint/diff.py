# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Running differences of counter-style columns."""

import logging
import re
from collections.abc import Callable

from remint.config import DiffSpec

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")

DiffKey = tuple[str, ...]


def _field(row: list[str | None], index: int) -> str:
    # rows of a narrower repeat block end before the recorded header does
    if index >= len(row):
        return ""
    return row[index] or ""


def lenient_int(text: str | None) -> int:
    """Parse the leading integer of a text, treating anything else as zero.

    ``"42"`` gives 42, ``" -7 kB"`` gives -7, ``"3.9"`` gives 3 and ``"n/a"`` gives 0.
    """
    if not text:
        return 0
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else 0


class DiffEngine:
    """Compute deltas of value columns against the previous sample of the same counter."""

    def __init__(self) -> None:
        self._previous: dict[DiffKey, str] = {}

    def __len__(self) -> int:
        return len(self._previous)

    def diff(
        self,
        category: str,
        row: list[str | None],
        column_index: Callable[[str, str], int],
        spec: DiffSpec,
    ) -> list[str | None]:
        """Append one delta per value column to a row.

        The first sample of each identity tuple has no predecessor, so its delta is
        ``None``. The stored previous value is replaced by the current raw value in
        every case.

        Args:
            category: Category of the row.
            row: Sliced field values; extended in place.
            column_index: Resolver from (category, column name) to row position.
            spec: Differencing declaration of the category.

        Returns:
            The same row with the deltas appended in declaration order.

        Raises:
            UnknownColumnError: If an identity or value column is not in the header.
        """
        identity = tuple(
            _field(row, column_index(category, name)) for name in spec.id
        )
        deltas: list[str | None] = []
        for value_name in spec.value:
            key: DiffKey = (category, value_name, *identity)
            current = _field(row, column_index(category, value_name))
            previous = self._previous.get(key)
            if previous is None:
                deltas.append(None)
            else:
                deltas.append(str(lenient_int(current) - lenient_int(previous)))
            self._previous[key] = current
        row.extend(deltas)
        return row
