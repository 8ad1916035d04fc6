"""Core validation data structures."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class FieldError:
    """A single input field that failed its validator."""

    field: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field} {self.reason}"


class InputValidationError(ValueError):
    """Raised when one or more core inputs fail validation."""

    def __init__(self, errors: Sequence[FieldError]) -> None:
        self.errors = list(errors)
        fields = ", ".join(error.field for error in self.errors)
        detail = "; ".join(str(error) for error in self.errors)
        super().__init__(f"Invalid core inputs ({fields}): {detail}")

    @property
    def fields(self) -> List[str]:
        return [error.field for error in self.errors]


@dataclass
class ValidationReport:
    """Outcome of a project validation pass."""

    valid: bool
    issues: List[str]
    warnings: List[str] = field(default_factory=list)
    project_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DiagnosticEntry:
    """An error or warning raised by diagnostics, with a suggested fix."""

    message: str
    severity: str
    suggestion: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Diagnosis:
    """Errors, warnings and recommendations for a project directory."""

    errors: List[DiagnosticEntry] = field(default_factory=list)
    warnings: List[DiagnosticEntry] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    service_name: Optional[str] = None

    @property
    def healthy(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service_name": self.service_name,
            "errors": [entry.to_dict() for entry in self.errors],
            "warnings": [entry.to_dict() for entry in self.warnings],
            "recommendations": list(self.recommendations),
        }
