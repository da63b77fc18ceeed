"""Verdict types returned by every comparator."""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


class Match(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["match"] = "match"

    @property
    def matched(self) -> bool:
        return True

    def to_wire(self) -> None:
        return None


class Mismatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["mismatch"] = "mismatch"
    message: str
    diff: Optional[bytes] = None  # encoded PNG, image mismatches only

    @property
    def matched(self) -> bool:
        return False

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {"message": self.message}
        if self.diff is not None:
            wire["diff"] = self.diff
        return wire


Verdict = Union[Match, Mismatch]

MATCH = Match()
