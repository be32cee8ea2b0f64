# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-category header bookkeeping."""

import logging
from collections.abc import Sequence

logger = logging.getLogger(__name__)

DIFF_PREFIX = "diff_"


class UnknownColumnError(LookupError):
    """Represent a column name missing from a category's recorded header."""

    def __init__(self, category: str, column: str) -> None:
        super().__init__(f"Unknown column {column!r} for category {category!r}")
        self.category = category
        self.column = column


def diff_column_name(value_name: str) -> str:
    """Return the synthetic header name of a differenced value column."""
    return f"{DIFF_PREFIX}{value_name}"


class HeaderRegistry:
    """Remember the header of each category as first seen during a run."""

    def __init__(self) -> None:
        self._headers: dict[str, tuple[str, ...]] = {}
        self._indexes: dict[str, dict[str, int]] = {}

    def __contains__(self, category: object) -> bool:
        return category in self._headers

    def record_if_new(
        self,
        category: str,
        header_fields: Sequence[str],
        diff_value_names: Sequence[str] = (),
    ) -> bool:
        """Register a category header unless the category is already known.

        Args:
            category: Category name.
            header_fields: Field names sliced from the header line.
            diff_value_names: Value columns differenced for this category.

        Returns:
            ``True`` when the category was registered by this call and its header
            should be emitted, ``False`` when it was already known.
        """
        if category in self._headers:
            return False
        header = tuple(header_fields) + tuple(
            diff_column_name(name) for name in diff_value_names
        )
        self._headers[category] = header
        index: dict[str, int] = {}
        for position, name in enumerate(header):
            index.setdefault(name, position)
        self._indexes[category] = index
        logger.debug(f"Registered header (category={category} columns={len(header)})")
        return True

    def header(self, category: str) -> tuple[str, ...]:
        """Return the recorded header of a category.

        Raises:
            KeyError: If the category was never registered.
        """
        return self._headers[category]

    def column_index(self, category: str, field_name: str) -> int:
        """Resolve a field name to its position in the category's header.

        Args:
            category: Registered category name.
            field_name: Column name to resolve.

        Returns:
            Zero-based column position (first occurrence for duplicate names).

        Raises:
            UnknownColumnError: If the category or field name is unknown.
        """
        try:
            return self._indexes[category][field_name]
        except KeyError:
            raise UnknownColumnError(category, field_name) from None
