"""Base protocol for sheet transforms."""

from __future__ import annotations

from typing import Protocol

from stylescope.model.ast import Sheet


class Transform(Protocol):
    """A sheet-to-sheet transformation step."""

    def apply(self, sheet: Sheet) -> Sheet: ...
