"""Capability vocabulary shared by generation and discovery.

Generation records which slots a project is expected to configure; discovery
infers which slots a project actually configures. Both sides use the rules
below so that the two are directly comparable.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from .models import CAPABILITY_SLOTS, DerivedValue

DEPLOYMENT_DESCRIPTOR = "wrangler.toml"
DEPENDENCY_MANIFEST = "package.json"

PLATFORM_PROVIDER = "edge-workers"
FRAMEWORK_PACKAGE = "@svcgen/worker-runtime"
FRAMEWORK_PROVIDER = "worker-runtime"
FRAMEWORK_VERSION = "^1.0.0"

# Packages whose presence in package.json implies request authentication.
AUTH_LIBRARIES: Tuple[str, ...] = ("jose", "jsonwebtoken", "bcrypt", "passport")
GENERATED_AUTH_LIBRARY = "jose"
GENERATED_AUTH_VERSION = "^5.2.0"

SECRET_MARKER = "SECRET"

REQUIRED_SLOTS: Tuple[str, ...] = ("deployment", "framework")
OPTIONAL_SLOTS: Tuple[str, ...] = ("database", "storage", "authentication", "security")

# Artifact each slot is read from. Drift checks skip slots whose artifact is missing.
SLOT_SOURCES: Dict[str, str] = {
    "deployment": DEPLOYMENT_DESCRIPTOR,
    "database": DEPLOYMENT_DESCRIPTOR,
    "storage": DEPLOYMENT_DESCRIPTOR,
    "messaging": DEPLOYMENT_DESCRIPTOR,
    "security": DEPLOYMENT_DESCRIPTOR,
    "monitoring": DEPLOYMENT_DESCRIPTOR,
    "framework": DEPENDENCY_MANIFEST,
    "authentication": DEPENDENCY_MANIFEST,
}

# Binding tables in the deployment descriptor: (table, slot, provider).
BINDING_RULES: Tuple[Tuple[str, str, str], ...] = (
    ("d1_databases", "database", "d1"),
    ("kv_namespaces", "storage", "kv"),
    ("r2_buckets", "storage", "r2"),
    ("queues", "messaging", "queues"),
)

# Permission substrings (lowercase) granting the ability to provision a slot.
PERMISSION_RULES: Tuple[Tuple[str, str], ...] = (
    ("d1:edit", "database"),
    ("database:edit", "database"),
    ("r2 storage:edit", "storage"),
    ("kv storage:edit", "storage"),
    ("storage:edit", "storage"),
    ("scripts:edit", "deployment"),
    ("routes:edit", "deployment"),
    ("queues:edit", "messaging"),
    ("observability:edit", "monitoring"),
    ("tail:read", "monitoring"),
    ("secrets:edit", "security"),
)


def permission_slots(permission: str) -> List[str]:
    """Return the slots a single permission string makes possible."""
    lowered = permission.strip().lower()
    slots: List[str] = []
    for marker, slot in PERMISSION_RULES:
        if marker in lowered and slot not in slots:
            slots.append(slot)
    return slots


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, DerivedValue) else value


def enabled_features(derived_values: Mapping[str, Any]) -> Dict[str, bool]:
    features = _plain(derived_values.get("features")) or {}
    return {name: bool(flag) for name, flag in features.items()}


def planned_capabilities(derived_values: Mapping[str, Any]) -> Dict[str, bool]:
    """Slots a generated project is expected to configure, keyed in slot order.

    ``derived_values`` may hold ``DerivedValue`` entries or plain values.
    """
    features = enabled_features(derived_values)
    authentication = features.get("authentication", False)
    planned = {
        "deployment": True,
        "database": features.get("database", False),
        "storage": features.get("caching", False) or features.get("file_storage", False),
        "messaging": features.get("queues", False),
        "authentication": authentication,
        "framework": True,
        "security": authentication,
        "monitoring": features.get("monitoring", False),
    }
    return {slot: planned[slot] for slot in CAPABILITY_SLOTS}


__all__ = [
    "AUTH_LIBRARIES",
    "BINDING_RULES",
    "DEPENDENCY_MANIFEST",
    "DEPLOYMENT_DESCRIPTOR",
    "FRAMEWORK_PACKAGE",
    "OPTIONAL_SLOTS",
    "PERMISSION_RULES",
    "REQUIRED_SLOTS",
    "SLOT_SOURCES",
    "enabled_features",
    "permission_slots",
    "planned_capabilities",
]
