"""Error types raised while compiling a style."""

from __future__ import annotations

from stylescope.model.location import Location


class StyleError(Exception):
    """Base class for fatal style compilation errors."""

    def __init__(self, message: str, location: Location | None = None):
        self.message = message
        self.location = location
        super().__init__(message)

    @property
    def line(self) -> int | None:
        return self.location.line if self.location else None

    @property
    def column(self) -> int | None:
        return self.location.column if self.location else None

    @property
    def offset(self) -> int | None:
        return self.location.start if self.location else None

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.message} at {self.location}"


class TokenError(StyleError):
    """Raised when a lexical unit is malformed (unterminated string, url...)."""


class ParseError(StyleError):
    """Raised when the token stream violates the style grammar."""


class InterpolationError(StyleError):
    """Raised when a placeholder has no value to substitute."""
