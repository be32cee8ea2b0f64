# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Input adapter for plain and gzip-compressed dump files."""

import gzip
import io
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import BinaryIO, TextIO

logger = logging.getLogger(__name__)


def open_dump(path: Path, encoding: str = "utf-8") -> TextIO:
    """Open a dump file as text, decompressing it when it is gzip data.

    Args:
        path: Dump file path.
        encoding: Text encoding of the dump.

    Returns:
        Text stream over the (decompressed) content.

    Raises:
        OSError: If the file cannot be opened.
    """
    raw: BinaryIO
    compressed = gzip.open(path, "rb")
    try:
        compressed.peek(1)
    except gzip.BadGzipFile:
        compressed.close()
        logger.debug(f"Reading plain dump (path={path})")
        raw = open(path, "rb")
    except BaseException:
        compressed.close()
        raise
    else:
        logger.debug(f"Reading gzip dump (path={path})")
        raw = compressed  # type: ignore[assignment]
    return io.TextIOWrapper(raw, encoding=encoding)


def iter_lines(paths: Iterable[Path], encoding: str = "utf-8") -> Iterator[str]:
    """Yield the lines of every file in order, without line terminators.

    Args:
        paths: Dump files, processed one after another.
        encoding: Text encoding of the dumps.

    Yields:
        Lines with trailing ``\\n`` / ``\\r\\n`` removed.
    """
    for path in paths:
        logger.info(f"Reading dump file (path={path})")
        with open_dump(path, encoding=encoding) as handle:
            for line in handle:
                yield line.rstrip("\n")
