import sys
from collections.abc import Sequence
from pathlib import Path

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()


class RecordingSink:
    """Collect emitted rows in memory, in emission order."""

    def __init__(self) -> None:
        self.rows: list[tuple[str, list[str | None]]] = []
        self.finished = 0

    def put_row(self, category: str, fields: Sequence[str | None]) -> None:
        self.rows.append((category, list(fields)))

    def finish(self) -> None:
        self.finished += 1

    def for_category(self, category: str) -> list[list[str | None]]:
        return [fields for name, fields in self.rows if name == category]


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()
