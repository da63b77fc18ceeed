"""Character-level text diff with semantic cleanup."""

from __future__ import annotations

import difflib
from typing import Protocol

from snapcompare.models.text_edit import EditKind, TextEdit


class TextDiffAlgorithm(Protocol):
    def diff(self, expected: str, actual: str) -> list[TextEdit]:
        """Return the cleaned-up edits turning ``expected`` into ``actual``."""
        ...


def merge_edits(edits: list[TextEdit]) -> list[TextEdit]:
    """Normalize an edit list.

    Drops empty spans and joins neighbouring equalities. Each run of changes
    between two equalities becomes one DELETE followed by one INSERT.
    """
    merged: list[TextEdit] = []
    deleted: list[str] = []
    inserted: list[str] = []

    def flush() -> None:
        if deleted:
            merged.append(TextEdit(EditKind.DELETE, "".join(deleted)))
        if inserted:
            merged.append(TextEdit(EditKind.INSERT, "".join(inserted)))
        deleted.clear()
        inserted.clear()

    for edit in edits:
        if not edit.text:
            continue
        if edit.kind == EditKind.DELETE:
            deleted.append(edit.text)
        elif edit.kind == EditKind.INSERT:
            inserted.append(edit.text)
        else:
            flush()
            if merged and merged[-1].kind == EditKind.EQUAL:
                merged[-1] = TextEdit(EditKind.EQUAL, merged[-1].text + edit.text)
            else:
                merged.append(edit)
    flush()
    return merged


def _change_lengths(edits: list[TextEdit], start: int, step: int) -> tuple[int, int]:
    inserted = deleted = 0
    idx = start
    while 0 <= idx < len(edits) and edits[idx].kind != EditKind.EQUAL:
        if edits[idx].kind == EditKind.INSERT:
            inserted += len(edits[idx].text)
        else:
            deleted += len(edits[idx].text)
        idx += step
    return inserted, deleted


def cleanup_semantic(edits: list[TextEdit]) -> list[TextEdit]:
    """Fold short equalities that are swamped by the changes around them.

    An equality no longer than the larger side of the change on its left and
    on its right is turned into a delete plus an insert, so that
    "flickering" micro-diffs collapse into one readable replacement.
    """
    edits = merge_edits(edits)
    while True:
        for idx, edit in enumerate(edits):
            if edit.kind != EditKind.EQUAL:
                continue
            size = len(edit.text)
            if size <= max(_change_lengths(edits, idx - 1, -1)) and size <= max(
                _change_lengths(edits, idx + 1, 1)
            ):
                edits = merge_edits(
                    edits[:idx]
                    + [TextEdit(EditKind.DELETE, edit.text), TextEdit(EditKind.INSERT, edit.text)]
                    + edits[idx + 1 :]
                )
                break
        else:
            # each pass removes one equality, so this always ends
            return edits


class SemanticTextDiff:
    """difflib-backed diff followed by :func:`cleanup_semantic`."""

    def diff(self, expected: str, actual: str) -> list[TextEdit]:
        matcher = difflib.SequenceMatcher(None, expected, actual, autojunk=False)
        edits: list[TextEdit] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                edits.append(TextEdit(EditKind.EQUAL, expected[i1:i2]))
                continue
            if tag in ("delete", "replace"):
                edits.append(TextEdit(EditKind.DELETE, expected[i1:i2]))
            if tag in ("insert", "replace"):
                edits.append(TextEdit(EditKind.INSERT, actual[j1:j2]))
        return cleanup_semantic(edits)
