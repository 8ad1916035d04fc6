"""Pure predicates for names, domains, credentials and derived values."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Mapping, Optional

from ..models import ENVIRONMENTS, SERVICE_TYPES

_SERVICE_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")
_DOMAIN_PATTERN = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)
_CREDENTIAL_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_PLATFORM_ID_PATTERN = re.compile(r"^[a-fA-F0-9]{32}$")
_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")
_URL_PATTERN = re.compile(r"^https?://[^\s\x00-\x1f\x7f\"'\\`]+$")
_PATH_PATTERN = re.compile(r"^/[^\s\x00-\x1f\x7f\"'\\`]*$")
_PACKAGE_NAME_PATTERN = re.compile(r"^(@[a-z0-9][a-z0-9-]*/)?[a-z0-9][a-z0-9._-]*$")

BASE_FEATURES = ("logging", "monitoring", "error_reporting")

MIN_CREDENTIAL_LENGTH = 20

_URL_REASON = "must start with http:// or https:// and contain no whitespace, quotes or backslashes"
_PATH_REASON = "must start with '/' and contain no whitespace, quotes or backslashes"


def is_valid_service_name(name: object) -> bool:
    """Lowercase slug of 3-50 chars without edge or doubled hyphens."""
    if not isinstance(name, str):
        return False
    if len(name) < 3 or len(name) > 50:
        return False
    if not _SERVICE_NAME_PATTERN.match(name):
        return False
    if name.startswith("-") or name.endswith("-"):
        return False
    return "--" not in name


def is_valid_domain_name(domain: object) -> bool:
    if not isinstance(domain, str) or not domain:
        return False
    domain = domain[:-1] if domain.endswith(".") else domain
    return len(domain) <= 253 and bool(_DOMAIN_PATTERN.match(domain))


def is_valid_credential(token: object) -> bool:
    if not isinstance(token, str):
        return False
    return len(token) >= MIN_CREDENTIAL_LENGTH and bool(_CREDENTIAL_PATTERN.match(token))


def is_valid_platform_id(value: object) -> bool:
    """Account and zone identifiers are 32 hexadecimal characters."""
    return isinstance(value, str) and bool(_PLATFORM_ID_PATTERN.match(value))


def is_valid_service_type(value: object) -> bool:
    return value in SERVICE_TYPES


def is_valid_environment(value: object) -> bool:
    return value in ENVIRONMENTS


def is_valid_version(value: object) -> bool:
    return isinstance(value, str) and bool(_VERSION_PATTERN.match(value))


def is_valid_url(value: object) -> bool:
    return isinstance(value, str) and bool(_URL_PATTERN.fullmatch(value))


def is_valid_package_name(value: object) -> bool:
    return isinstance(value, str) and 0 < len(value) <= 214 and bool(_PACKAGE_NAME_PATTERN.match(value))


def is_valid_path(value: object) -> bool:
    return isinstance(value, str) and bool(_PATH_PATTERN.fullmatch(value))


def is_valid_features(value: object) -> bool:
    if not isinstance(value, Mapping):
        return False
    for key, enabled in value.items():
        if not isinstance(key, str) or not isinstance(enabled, bool):
            return False
    return all(feature in value for feature in BASE_FEATURES)


def _bounded_text(limit: int) -> Callable[[object], bool]:
    def _check(value: object) -> bool:
        return isinstance(value, str) and 0 < len(value.strip()) <= limit

    return _check


# Each entry: (predicate, human readable reason used when the predicate fails).
CORE_INPUT_RULES: Dict[str, tuple[Callable[[object], bool], str]] = {
    "service_name": (
        is_valid_service_name,
        "must be 3-50 lowercase letters, digits or single hyphens, without leading or trailing hyphens",
    ),
    "service_type": (is_valid_service_type, f"must be one of: {', '.join(SERVICE_TYPES)}"),
    "domain_name": (is_valid_domain_name, "must be a valid DNS name such as example.com"),
    "api_credential": (
        is_valid_credential,
        f"must be at least {MIN_CREDENTIAL_LENGTH} characters of letters, digits, '_' or '-'",
    ),
    "account_id": (is_valid_platform_id, "must be 32 hexadecimal characters"),
    "zone_id": (is_valid_platform_id, "must be 32 hexadecimal characters"),
    "environment": (is_valid_environment, f"must be one of: {', '.join(ENVIRONMENTS)}"),
}

DERIVED_VALUE_RULES: Dict[str, tuple[Callable[[object], bool], str]] = {
    "display_name": (_bounded_text(100), "must be 1-100 characters"),
    "description": (_bounded_text(500), "must be 1-500 characters"),
    "version": (is_valid_version, "must use semantic versioning (X.Y.Z)"),
    "author": (_bounded_text(200), "must be 1-200 characters"),
    "production_url": (is_valid_url, _URL_REASON),
    "staging_url": (is_valid_url, _URL_REASON),
    "development_url": (is_valid_url, _URL_REASON),
    "features": (
        is_valid_features,
        f"must map feature names to booleans and keep {', '.join(BASE_FEATURES)}",
    ),
    "database_name": (is_valid_service_name, "must follow the service name rules"),
    "worker_name": (is_valid_service_name, "must follow the service name rules"),
    "package_name": (is_valid_package_name, "must be a valid npm package name"),
    "git_repository_url": (is_valid_url, _URL_REASON),
    "documentation_url": (is_valid_url, _URL_REASON),
    "health_check_path": (is_valid_path, _PATH_REASON),
    "api_base_path": (is_valid_path, _PATH_REASON),
}


def check_core_field(name: str, value: Any) -> Optional[str]:
    """Return the failure reason for a core input, or None when valid."""
    rule = CORE_INPUT_RULES.get(name)
    if rule is None:
        return "is not a recognised core input"
    if value is None or (isinstance(value, str) and not value.strip()):
        return "is required"
    predicate, reason = rule
    return None if predicate(value) else reason


def check_derived_field(name: str, value: Any) -> Optional[str]:
    """Return the failure reason for a derived value override, or None when valid."""
    rule = DERIVED_VALUE_RULES.get(name)
    if rule is None:
        return "is not a recognised derived value"
    predicate, reason = rule
    return None if predicate(value) else reason


__all__ = [
    "BASE_FEATURES",
    "CORE_INPUT_RULES",
    "DERIVED_VALUE_RULES",
    "check_core_field",
    "check_derived_field",
    "is_valid_credential",
    "is_valid_domain_name",
    "is_valid_environment",
    "is_valid_features",
    "is_valid_package_name",
    "is_valid_path",
    "is_valid_platform_id",
    "is_valid_service_name",
    "is_valid_service_type",
    "is_valid_url",
    "is_valid_version",
]
