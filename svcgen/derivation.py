"""Tier 2: derived values computed from core inputs and confirmed by an operator.

Each of the fifteen derived values has a pure default function. Overrides are
validated per field and never cascade: changing the domain-based production URL
does not touch the staging URL, and the operator must override each field that
should change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .logging import get_logger
from .models import CoreInputs, DerivedValue, UserModification
from .prompts import Prompter
from .validators.rules import check_derived_field

_LOGGER = get_logger("derivation")


@dataclass(frozen=True)
class DerivationDefaults:
    """Organisation level values that feed otherwise fixed defaults."""

    author: str = "Service Team"
    git_organization: str = "your-org"
    version: str = "1.0.0"


_DESCRIPTIONS: Dict[str, str] = {
    "data-service": "A data service providing CRUD operations, search, filtering, and pagination",
    "auth-service": "Authentication and authorization service with user management and security features",
    "content-service": "Content management service with file storage, search, and delivery",
    "api-gateway": "API gateway providing routing, rate limiting, authentication, and monitoring",
    "generic": "An edge service providing core functionality and extensibility",
}

_BASE_FEATURES: Dict[str, bool] = {
    "logging": True,
    "monitoring": True,
    "error_reporting": True,
    "metrics": True,
    "health_checks": True,
}

_TYPE_FEATURES: Dict[str, Tuple[str, ...]] = {
    "data-service": (
        "authentication",
        "authorization",
        "database",
        "search",
        "filtering",
        "pagination",
        "caching",
        "backup",
    ),
    "auth-service": (
        "authentication",
        "authorization",
        "database",
        "user_profiles",
        "email_notifications",
        "magic_link_auth",
        "password_reset",
        "session_management",
        "rate_limiting",
    ),
    "content-service": (
        "file_storage",
        "search",
        "filtering",
        "pagination",
        "caching",
        "cdn",
        "image_processing",
        "metadata",
    ),
    "api-gateway": (
        "authentication",
        "authorization",
        "rate_limiting",
        "caching",
        "load_balancing",
        "request_routing",
        "response_transformation",
    ),
    "generic": ("extensibility", "configuration", "deployment"),
}


def display_name_for(service_name: str) -> str:
    """``billing-api`` -> ``Billing Api``."""
    return " ".join(part.capitalize() for part in service_name.split("-") if part)


def service_url(service_name: str, domain: str, environment: str = "production") -> str:
    if environment == "production":
        prefix = service_name
    else:
        prefix = f"{service_name}-{environment[:3]}"
    return f"https://{prefix}.{domain}"


def features_for(service_type: str) -> Dict[str, bool]:
    features = dict(_BASE_FEATURES)
    for name in _TYPE_FEATURES.get(service_type, _TYPE_FEATURES["generic"]):
        features[name] = True
    return features


_DefaultFn = Callable[[CoreInputs, DerivationDefaults], Any]

# Declaration order is the presentation and serialisation order.
DERIVED_FIELDS: Tuple[Tuple[str, _DefaultFn], ...] = (
    ("display_name", lambda core, _: display_name_for(core.service_name)),
    ("description", lambda core, _: _DESCRIPTIONS.get(core.service_type, _DESCRIPTIONS["generic"])),
    ("version", lambda _, defaults: defaults.version),
    ("author", lambda _, defaults: defaults.author),
    ("production_url", lambda core, _: service_url(core.service_name, core.domain_name, "production")),
    ("staging_url", lambda core, _: service_url(core.service_name, core.domain_name, "staging")),
    ("development_url", lambda core, _: service_url(core.service_name, core.domain_name, "development")),
    ("features", lambda core, _: features_for(core.service_type)),
    ("database_name", lambda core, _: f"{core.service_name}-db"),
    ("worker_name", lambda core, _: f"{core.service_name}-worker"),
    ("package_name", lambda core, _: core.service_name),
    (
        "git_repository_url",
        lambda core, defaults: f"https://github.com/{defaults.git_organization}/{core.service_name}",
    ),
    ("documentation_url", lambda core, _: f"https://docs.{core.domain_name}"),
    ("health_check_path", lambda core, _: "/health"),
    ("api_base_path", lambda core, _: "/api/v1/" + core.service_name.replace("-", "/", 1)),
)

DERIVED_FIELD_IDS: Tuple[str, ...] = tuple(name for name, _ in DERIVED_FIELDS)


def derive(
    core_inputs: CoreInputs, defaults: Optional[DerivationDefaults] = None
) -> Dict[str, DerivedValue]:
    """Compute every derived value for validated core inputs."""
    defaults = defaults or DerivationDefaults()
    values: Dict[str, DerivedValue] = {}
    for name, default_fn in DERIVED_FIELDS:
        default = default_fn(core_inputs, defaults)
        values[name] = DerivedValue(id=name, default=default, value=_copy(default))
    return values


def _copy(value: Any) -> Any:
    return dict(value) if isinstance(value, dict) else value


@dataclass(frozen=True)
class OverrideOutcome:
    """Result of a single override attempt."""

    field: str
    accepted: bool
    value: Any
    reason: Optional[str] = None


_ON = {"on", "true", "yes", "1", "enable", "enabled"}
_OFF = {"off", "false", "no", "0", "disable", "disabled"}


def parse_feature_toggles(text: str, current: Mapping[str, bool]) -> Dict[str, bool]:
    """Apply ``name=on, other=off`` toggles to a copy of ``current``.

    A bare ``name`` flips the current setting of a known feature.
    """
    features = dict(current)
    for chunk in text.split(","):
        item = chunk.strip()
        if not item:
            continue
        if "=" in item:
            name, _, raw_state = item.partition("=")
            name = name.strip()
            state = raw_state.strip().lower()
            if state in _ON:
                features[name] = True
            elif state in _OFF:
                features[name] = False
            else:
                raise ValueError(f"Unrecognised state '{raw_state.strip()}' for feature '{name}'")
        else:
            if item not in features:
                raise ValueError(f"Unknown feature: {item}")
            features[item] = not features[item]
    return features


@dataclass
class ConfirmationSession:
    """Holds derived values while an operator reviews them."""

    core_inputs: CoreInputs
    values: Dict[str, DerivedValue]
    modifications: List[UserModification] = field(default_factory=list)

    @classmethod
    def start(
        cls, core_inputs: CoreInputs, defaults: Optional[DerivationDefaults] = None
    ) -> "ConfirmationSession":
        return cls(core_inputs=core_inputs, values=derive(core_inputs, defaults))

    def current(self, field_id: str) -> Any:
        return self.values[field_id].value

    def apply_override(self, field_id: str, value: Any) -> OverrideOutcome:
        """Validate and apply a replacement value for one derived field.

        Rejected replacements leave the previous value in place.
        """
        entry = self.values.get(field_id)
        if entry is None:
            return OverrideOutcome(field_id, False, value, "is not a recognised derived value")

        candidate = value
        if isinstance(candidate, str):
            candidate = candidate.strip()
        if field_id == "features" and isinstance(candidate, str):
            try:
                candidate = parse_feature_toggles(candidate, entry.value)
            except ValueError as exc:
                return self._reject(entry, value, str(exc))

        reason = check_derived_field(field_id, candidate)
        if reason is not None:
            return self._reject(entry, value, f"{field_id} {reason}")

        if candidate == entry.value:
            return OverrideOutcome(field_id, True, entry.value)

        self.values[field_id] = entry.with_value(_copy(candidate))
        self.modifications.append(
            UserModification(field=field_id, assumed=entry.default, chosen=_copy(candidate))
        )
        _LOGGER.debug("Accepted override for %s", field_id)
        return OverrideOutcome(field_id, True, candidate)

    def apply_overrides(self, overrides: Mapping[str, Any]) -> List[OverrideOutcome]:
        return [self.apply_override(name, value) for name, value in overrides.items()]

    def _reject(self, entry: DerivedValue, value: Any, reason: str) -> OverrideOutcome:
        _LOGGER.warning("Rejected override for %s: %s; keeping %r", entry.id, reason, entry.value)
        return OverrideOutcome(entry.id, False, entry.value, reason)


CONFIRMATION_GROUPS: Tuple[Tuple[str, Tuple[Tuple[str, str], ...]], ...] = (
    (
        "Basic Information",
        (
            ("display_name", "Display Name"),
            ("description", "Description"),
            ("version", "Version"),
            ("author", "Author"),
        ),
    ),
    (
        "URLs & Endpoints",
        (
            ("production_url", "Production URL"),
            ("staging_url", "Staging URL"),
            ("development_url", "Development URL"),
            ("documentation_url", "Documentation URL"),
            ("git_repository_url", "Git Repository URL"),
        ),
    ),
    (
        "Service Configuration",
        (
            ("database_name", "Database Name"),
            ("worker_name", "Worker Name"),
            ("package_name", "Package Name"),
            ("health_check_path", "Health Check Path"),
            ("api_base_path", "API Base Path"),
        ),
    ),
)


def confirm_interactively(session: ConfirmationSession, prompter: Prompter) -> List[OverrideOutcome]:
    """Walk every derived value; blank answers keep the current value."""
    outcomes: List[OverrideOutcome] = []
    for _title, items in CONFIRMATION_GROUPS:
        for field_id, label in items:
            answer = prompter.question(f"{label} [{session.current(field_id)}]: ").strip()
            if not answer:
                continue
            outcomes.append(session.apply_override(field_id, answer))

    enabled = sorted(name for name, on in session.current("features").items() if on)
    answer = prompter.question(
        f"Features [{', '.join(enabled)}] (e.g. search=off, cdn=on; blank to keep): "
    ).strip()
    if answer:
        outcomes.append(session.apply_override("features", answer))
    return outcomes


__all__ = [
    "ConfirmationSession",
    "DERIVED_FIELDS",
    "DERIVED_FIELD_IDS",
    "DerivationDefaults",
    "OverrideOutcome",
    "confirm_interactively",
    "derive",
    "display_name_for",
    "features_for",
    "parse_feature_toggles",
    "service_url",
]
