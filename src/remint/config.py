# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-category configuration loading and validation."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_RESOURCE = "default_config.yaml"


class ConfigError(ValueError):
    """Represent an invalid category configuration document."""


@dataclass(frozen=True)
class DiffSpec:
    """Describe which columns of a category are differenced.

    Attributes:
        id: Identity columns whose values key one counter instance.
        value: Value columns differenced between successive samples.
    """

    id: tuple[str, ...]
    value: tuple[str, ...]


@dataclass(frozen=True)
class CategoryConfig:
    """Represent the declaration of one category.

    Attributes:
        name: Category name, as found in the CNAME column.
        diff: Optional differencing declaration.
        pivot: Optional report declaration, forwarded verbatim to the sink.
    """

    name: str
    diff: DiffSpec | None = None
    pivot: Mapping[str, Any] | None = None


def load_config(path: Path | None = None) -> dict[str, CategoryConfig]:
    """Load and validate a YAML category configuration.

    Args:
        path: Configuration file; the bundled default is used when ``None``.

    Returns:
        Category configurations keyed by name, in document order.

    Raises:
        ConfigError: If the file cannot be read or its content is invalid.
    """
    try:
        if path is None:
            text = (
                resources.files("remint")
                .joinpath(DEFAULT_CONFIG_RESOURCE)
                .read_text(encoding="utf-8")
            )
        else:
            text = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning(f"Failed to read config (path={path} error={exc})")
        raise ConfigError(f"Cannot read config file: {path}") from exc
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        logger.warning(f"Failed to parse config (path={path} error={exc})")
        raise ConfigError(f"Invalid YAML in config file: {exc}") from exc
    configs = parse_config(document)
    logger.info(
        f"Loaded config (path={path or DEFAULT_CONFIG_RESOURCE} categories={len(configs)})"
    )
    return configs


def parse_config(document: Any) -> dict[str, CategoryConfig]:
    """Validate a decoded configuration document.

    Args:
        document: Decoded YAML content; ``None`` means an empty configuration.

    Returns:
        Category configurations keyed by name, in document order.

    Raises:
        ConfigError: If the document shape is invalid.
    """
    if document is None:
        return {}
    if not isinstance(document, list):
        raise ConfigError("Config must be a list of category entries.")
    configs: dict[str, CategoryConfig] = {}
    for position, entry in enumerate(document, start=1):
        config = _parse_entry(entry, position)
        if config.name in configs:
            raise ConfigError(f"Duplicate category in config: {config.name}")
        configs[config.name] = config
    return configs


def _parse_entry(entry: Any, position: int) -> CategoryConfig:
    if not isinstance(entry, Mapping):
        raise ConfigError(f"Config entry #{position} must be a mapping.")
    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError(f"Config entry #{position} needs a non-empty 'name'.")
    diff = _parse_diff(entry.get("diff"), name)
    pivot = entry.get("pivot")
    if pivot is not None and not isinstance(pivot, Mapping):
        raise ConfigError(f"'pivot' of category {name} must be a mapping.")
    return CategoryConfig(name=name, diff=diff, pivot=pivot)


def _parse_diff(raw: Any, name: str) -> DiffSpec | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise ConfigError(f"'diff' of category {name} must be a mapping.")
    values = _column_list(raw.get("value"), f"diff.value of category {name}")
    if not values:
        raise ConfigError(f"diff.value of category {name} must not be empty.")
    ids = _column_list(raw.get("id"), f"diff.id of category {name}")
    return DiffSpec(id=ids, value=values)


def _column_list(raw: Any, label: str) -> tuple[str, ...]:
    """Normalize a YAML scalar or list of column names to a tuple of strings."""
    if raw is None:
        return ()
    if isinstance(raw, (str, int, float)):
        return (str(raw),)
    if not isinstance(raw, list):
        raise ConfigError(f"{label} must be a column name or a list of names.")
    columns: list[str] = []
    for item in raw:
        if not isinstance(item, (str, int, float)) or isinstance(item, bool):
            raise ConfigError(f"{label} contains an invalid column name: {item!r}")
        columns.append(str(item))
    return tuple(columns)
