"""Value types returned by browser sessions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import ActionError, ActionErrorReason

_COORDINATE_RE = re.compile(r"^\s*([0-9]+)\s*,\s*([0-9]+)\s*$")


class ActionResult(BaseModel):
    """Uniform outcome of every session action."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    screenshot: str = Field(description="Data URL of the page captured after the action settled.")
    logs: str = Field(default="", description="Newline-joined console output of the session.")
    current_url: str
    current_mouse_position: Optional[str] = Field(
        default=None,
        description='Last clicked coordinate as "x,y"; unset until the first click.',
    )

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase representation handed to hosts."""

        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class Coordinate:
    """A viewport position parsed from an ``"x,y"`` string."""

    x: int
    y: int
    raw: str

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        match = _COORDINATE_RE.match(text) if isinstance(text, str) else None
        if not match:
            raise ActionError(
                ActionErrorReason.INVALID_COORDINATE,
                f"Invalid coordinate {text!r}: expected two non-negative integers as 'x,y'",
            )
        return cls(x=int(match.group(1)), y=int(match.group(2)), raw=text)
