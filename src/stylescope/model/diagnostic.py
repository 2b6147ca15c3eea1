"""Diagnostic model: structured, non-fatal findings about a style source."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from stylescope.model.ast import DanglingDeclaration
from stylescope.model.location import Location


class Severity(Enum):
    """Severity level for a diagnostic message."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding reported while compiling a style.

    Attributes:
        rule: Identifier for the check that produced this diagnostic.
        severity: How serious the issue is.
        message: Human-readable description of the problem.
        location: Where in the source the problem was found, if known.
    """

    rule: str
    severity: Severity
    message: str
    location: Location | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    @classmethod
    def from_dangling(cls, decl: DanglingDeclaration) -> Diagnostic:
        return cls(
            rule="dangling_declaration",
            severity=Severity.WARNING,
            message=decl.reason or "malformed declaration",
            location=decl.location,
        )

    def __str__(self) -> str:
        where = f" [{self.location}]" if self.location else ""
        return f"{self.severity.value}{where}: {self.message}"
