"""JSON verdict output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from snapcompare.models.verdict import Verdict


def write_json_verdict(
    verdict: Verdict,
    output_path: Path,
    diff_path: Optional[Path] = None,
) -> None:
    """Write a machine-readable verdict.

    The wire shape is ``null`` on a match. Diff bytes are never inlined; the
    path of the written diff image is recorded instead when there is one.
    """
    wire = verdict.to_wire()
    report = None
    if wire is not None:
        report = {
            "message": wire["message"],
            "has_diff": "diff" in wire,
            "diff_path": str(diff_path) if diff_path and "diff" in wire else None,
        }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)
