"""Edit sequences produced by text-diff algorithms."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class EditKind(str, Enum):
    INSERT = "insert"
    DELETE = "delete"
    EQUAL = "equal"


@dataclass(frozen=True)
class TextEdit:
    kind: EditKind
    text: str


def actual_text(edits: Iterable[TextEdit]) -> str:
    """Rebuild the actual (new) text from an edit sequence."""
    return "".join(e.text for e in edits if e.kind != EditKind.DELETE)


def expected_text(edits: Iterable[TextEdit]) -> str:
    """Rebuild the expected (baseline) text from an edit sequence."""
    return "".join(e.text for e in edits if e.kind != EditKind.INSERT)
