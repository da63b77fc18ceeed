"""Terminal rendering of text edit sequences."""

from __future__ import annotations

from typing import Iterable

from rich.style import Style

from snapcompare.models.text_edit import EditKind, TextEdit

INSERT_STYLE = Style(color="green")
DELETE_STYLE = Style(color="red", strike=True)


def render_terminal_diff(edits: Iterable[TextEdit]) -> str:
    """Render edits as one ANSI-styled string: inserts green, deletes struck red."""
    parts = []
    for edit in edits:
        if edit.kind == EditKind.INSERT:
            parts.append(INSERT_STYLE.render(edit.text))
        elif edit.kind == EditKind.DELETE:
            parts.append(DELETE_STYLE.render(edit.text))
        else:
            parts.append(edit.text)
    return "".join(parts)
