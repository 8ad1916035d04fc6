"""Severity tagging and recovery suggestions for failures from any stage.

Classification is text only. Nothing here retries or repairs anything.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

SEVERITY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("critical", ("authentication", "unauthorized", "permission", "access denied", "forbidden", "credential")),
    ("high", ("network", "timeout", "timed out", "connection", "econnrefused", "validation", "invalid")),
    ("medium", ("deprecated", "not found", "warning")),
)

# Severity markers only match at the start of a word: "api_credential" is not "credential".
_SEVERITY_PATTERNS = tuple(
    (severity, re.compile(r"(?<!\w)(?:" + "|".join(map(re.escape, markers)) + ")"))
    for severity, markers in SEVERITY_RULES
)

# Checked in order; the first matching category wins.
CATEGORY_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("credentials", ("credential", "auth", "token", "unauthorized", "forbidden", "permission")),
    ("network", ("network", "timeout", "timed out", "econnrefused", "enotfound", "connection", "fetch failed")),
    ("domain", ("domain", "zone", "dns")),
    ("database", ("database", "d1", "migration", "sql")),
    ("template", ("template", "undefined")),
    ("bundle", ("bundle", "syntax", "compile", "build", "module not found")),
    ("filesystem", ("no such file", "file exists", "is a directory", "not a directory", "read-only", "errno")),
    ("configuration", (".svcgen.yml", "config", "wrangler.toml", "package.json")),
    ("validation", ("validation", "invalid", "must be", "is required")),
)

SUGGESTIONS: Dict[str, Tuple[str, ...]] = {
    "credentials": (
        "Check the API token, account ID and zone ID",
        "Verify the token has not expired",
        "Confirm the token has permissions for the required operations",
    ),
    "domain": (
        "Verify the domain exists on the platform account",
        "Check the API token has zone read permissions",
        "Ensure the zone ID matches the domain",
    ),
    "network": (
        "Check internet connectivity",
        "Verify the platform API is reachable",
        "Check for firewall or proxy issues",
    ),
    "bundle": (
        "Check for syntax errors in the service code",
        "Verify all dependencies are installed",
        "Run: npm install",
    ),
    "database": (
        "Verify the database exists on the platform",
        "Check migrations are valid SQL",
        "Ensure the D1 binding name matches wrangler.toml",
    ),
    "filesystem": (
        "Check file permissions on the service directory",
        "Ensure you have write access to the target directory",
        "Verify the service path exists and is accessible",
    ),
    "validation": (
        "Review input values for correctness",
        "Run: svcgen validate <path> to check the service configuration",
        "Run: svcgen diagnose <path> for detailed issue analysis",
    ),
    "configuration": (
        "Check domain configuration in src/config/domains.js",
        "Verify package.json has all required fields",
        "Check .svcgen.yml for typos and wrong value types",
    ),
    "template": (
        "Check that all required template variables are provided",
        "Verify template files exist and are readable",
        "Remove overrides from the custom templates directory and retry",
    ),
    "unknown": (
        "Check the error message for details",
        "Run with --verbose for full diagnostics",
        "Try the operation again after reviewing inputs",
    ),
}

CONTEXT_SUGGESTIONS: Dict[str, Tuple[str, ...]] = {
    "create": (
        "Check that the service name follows naming conventions (lowercase, hyphens only)",
        "Re-run with --overwrite if the target directory holds an earlier attempt",
        "Use svcgen diagnose to identify specific issues",
    ),
    "update": (
        "Use svcgen diagnose to identify specific issues",
        "Regenerate configuration files with svcgen create --overwrite",
    ),
}


@dataclass(frozen=True)
class ErrorClassification:
    """Severity, category and recovery hints for one failure."""

    severity: str
    category: str
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def severity_for(message: str) -> str:
    lowered = message.lower()
    for severity, pattern in _SEVERITY_PATTERNS:
        if pattern.search(lowered):
            return severity
    return "low"


def category_for(message: str) -> str:
    lowered = message.lower()
    for category, markers in CATEGORY_RULES:
        if any(marker in lowered for marker in markers):
            return category
    return "unknown"


def _message_of(error: Union[BaseException, str]) -> str:
    if isinstance(error, str):
        return error
    parts = [str(error)]
    cause = error.__cause__
    if cause is not None:
        parts.append(str(cause))
    return " ".join(parts)


def classify(
    error: Union[BaseException, str], context: Optional[Mapping[str, Any]] = None
) -> ErrorClassification:
    """Classify ``error``; ``context`` may name the failing ``action``."""
    message = _message_of(error)
    category = category_for(message)
    suggestions = list(SUGGESTIONS[category])

    action = (context or {}).get("action")
    if isinstance(action, str):
        for hint in CONTEXT_SUGGESTIONS.get(action, ()):
            if hint not in suggestions:
                suggestions.append(hint)

    return ErrorClassification(
        severity=severity_for(message),
        category=category,
        suggestions=suggestions,
    )


__all__ = ["ErrorClassification", "category_for", "classify", "severity_for"]
