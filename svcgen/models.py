"""Core data models shared across svcgen components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

SERVICE_TYPES: Tuple[str, ...] = (
    "data-service",
    "auth-service",
    "content-service",
    "api-gateway",
    "generic",
)

ENVIRONMENTS: Tuple[str, ...] = ("development", "staging", "production")

GENERATOR_CATEGORIES: Tuple[str, ...] = (
    "core",
    "service",
    "environment",
    "testing",
    "documentation",
    "automation",
)

CAPABILITY_SLOTS: Tuple[str, ...] = (
    "deployment",
    "database",
    "storage",
    "messaging",
    "authentication",
    "framework",
    "security",
    "monitoring",
)

CORE_INPUT_FIELDS: Tuple[str, ...] = (
    "service_name",
    "service_type",
    "domain_name",
    "api_credential",
    "account_id",
    "zone_id",
    "environment",
)


def mask_credential(token: str) -> str:
    """Return a display-safe rendition of an API credential."""
    if not token:
        return ""
    return f"{token[:4]}***({len(token)} chars)"


@dataclass(frozen=True)
class CoreInputs:
    """The seven facts required before any derivation runs."""

    service_name: str
    service_type: str
    domain_name: str
    api_credential: str = field(repr=False)
    account_id: str
    zone_id: str
    environment: str

    def to_dict(self) -> Dict[str, str]:
        """Serialise with the credential masked."""
        data = asdict(self)
        data["api_credential"] = mask_credential(self.api_credential)
        return data


@dataclass(frozen=True)
class DerivedValue:
    """A computed default that an operator may confirm or override."""

    id: str
    default: Any
    value: Any

    @property
    def user_modified(self) -> bool:
        return self.value != self.default

    def with_value(self, value: Any) -> "DerivedValue":
        return DerivedValue(id=self.id, default=self.default, value=value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "default": self.default,
            "user_modified": self.user_modified,
        }


@dataclass(frozen=True)
class UserModification:
    """Transparency record for an accepted override."""

    field: str
    assumed: Any
    chosen: Any

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GeneratorDescriptor:
    """Identity, output category and ordering constraints of a generator."""

    name: str
    category: str
    depends_on: Tuple[str, ...] = ()


@dataclass
class CapabilitySlot:
    """Inferred state of a single platform capability."""

    configured: bool = False
    provider: Optional[str] = None
    quantity: Optional[int] = None
    possible: Optional[bool] = None
    sources: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"configured": self.configured}
        if self.provider is not None:
            data["provider"] = self.provider
        if self.quantity is not None:
            data["quantity"] = self.quantity
        if self.possible is not None:
            data["possible"] = self.possible
        if self.sources:
            data["sources"] = list(self.sources)
        if self.details:
            data["details"] = dict(self.details)
        return data


@dataclass
class CapabilityModel:
    """Fixed set of capability slots built from artifact inspection."""

    slots: Dict[str, CapabilitySlot] = field(
        default_factory=lambda: {name: CapabilitySlot() for name in CAPABILITY_SLOTS}
    )
    hints: Dict[str, str] = field(default_factory=dict)

    def __getattr__(self, name: str) -> CapabilitySlot:
        # Allows ``model.framework.configured`` style access.
        slots = self.__dict__.get("slots")
        if slots is not None and name in slots:
            return slots[name]
        raise AttributeError(name)

    def slot(self, name: str) -> CapabilitySlot:
        if name not in CAPABILITY_SLOTS:
            raise KeyError(f"Unknown capability slot: {name}")
        return self.slots[name]

    def configured_slots(self) -> List[str]:
        return [name for name in CAPABILITY_SLOTS if self.slots[name].configured]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "capabilities": {name: self.slots[name].to_dict() for name in CAPABILITY_SLOTS}
        }
        if self.hints:
            data["hints"] = dict(self.hints)
        return data


@dataclass(frozen=True)
class Recommendation:
    """Ranked advice produced by the assessment engine."""

    kind: str
    slot: Optional[str]
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AssessmentResult:
    """Completeness score, maturity bucket and recommendations."""

    completeness: int
    maturity: str
    missing_capabilities: List[str]
    recommendations: List[Recommendation]
    inferred_service_type: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completeness": self.completeness,
            "maturity": self.maturity,
            "missing_capabilities": list(self.missing_capabilities),
            "recommendations": [rec.to_dict() for rec in self.recommendations],
            "inferred_service_type": self.inferred_service_type,
        }


def derived_values_as_plain(values: Mapping[str, DerivedValue]) -> Dict[str, Any]:
    """Flatten derived values to ``id -> current value``."""
    return {key: value.value for key, value in values.items()}
