"""Input rules, project validation and diagnostics."""

from .base import (
    DiagnosticEntry,
    Diagnosis,
    FieldError,
    InputValidationError,
    ValidationReport,
)
from .project import ProjectValidator

__all__ = [
    "DiagnosticEntry",
    "Diagnosis",
    "FieldError",
    "InputValidationError",
    "ProjectValidator",
    "ValidationReport",
]
