"""Tier 1: collection and validation of the seven core inputs."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .logging import get_logger
from .models import CORE_INPUT_FIELDS, SERVICE_TYPES, CoreInputs
from .prompts import Prompter
from .validators.base import FieldError, InputValidationError
from .validators.rules import check_core_field

_LOGGER = get_logger("inputs")

_PROMPTS: Dict[str, str] = {
    "service_name": "Service name (lowercase, digits, hyphens)",
    "service_type": f"Service type ({', '.join(SERVICE_TYPES)})",
    "domain_name": "Domain name",
    "api_credential": "Platform API token",
    "account_id": "Platform account ID (32 hex chars)",
    "zone_id": "Platform zone ID (32 hex chars)",
    "environment": "Target environment (development, staging, production)",
}

_DEFAULTS: Dict[str, str] = {
    "service_type": "generic",
    "environment": "development",
}

MAX_ATTEMPTS = 3


def _normalise(name: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    value = value.strip()
    if name in {"service_name", "service_type", "environment", "domain_name"}:
        value = value.lower()
    if name == "domain_name" and value.endswith("."):
        value = value[:-1]
    return value


def build_core_inputs(raw: Mapping[str, Any]) -> CoreInputs:
    """Validate ``raw`` as a unit and return immutable core inputs.

    Every violated field is reported in a single ``InputValidationError``.
    """
    errors: List[FieldError] = []
    values: Dict[str, Any] = {}
    for name in CORE_INPUT_FIELDS:
        value = _normalise(name, raw.get(name))
        reason = check_core_field(name, value)
        if reason is not None:
            errors.append(FieldError(field=name, reason=reason))
            continue
        values[name] = value

    unknown = sorted(set(raw) - set(CORE_INPUT_FIELDS))
    for name in unknown:
        errors.append(FieldError(field=name, reason="is not a recognised core input"))

    if errors:
        raise InputValidationError(errors)
    return CoreInputs(**values)


def collect_core_inputs(
    prompter: Prompter,
    provided: Optional[Mapping[str, Any]] = None,
    *,
    max_attempts: int = MAX_ATTEMPTS,
) -> CoreInputs:
    """Prompt for every core input not already present in ``provided``.

    Invalid answers are re-prompted per field; after ``max_attempts`` failures the
    field is reported through ``InputValidationError``.
    """
    collected: Dict[str, Any] = {}
    provided = provided or {}
    for name in CORE_INPUT_FIELDS:
        value = provided.get(name)
        if value is not None and check_core_field(name, _normalise(name, value)) is None:
            collected[name] = value
            continue
        collected[name] = _ask(prompter, name, max_attempts)
    return build_core_inputs(collected)


def _ask(prompter: Prompter, name: str, max_attempts: int) -> str:
    default = _DEFAULTS.get(name)
    label = _PROMPTS[name]
    prompt = f"{label} [{default}]: " if default else f"{label}: "
    reason: Optional[str] = None
    for attempt in range(1, max_attempts + 1):
        answer = prompter.question(prompt).strip()
        if not answer and default:
            answer = default
        reason = check_core_field(name, _normalise(name, answer))
        if reason is None:
            return answer
        _LOGGER.warning("%s %s (attempt %d/%d)", name, reason, attempt, max_attempts)
    raise InputValidationError([FieldError(field=name, reason=reason or "is required")])


__all__ = ["build_core_inputs", "collect_core_inputs"]
