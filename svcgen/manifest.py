"""Service manifest: the record of what a generation run produced."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .capabilities import planned_capabilities
from .models import GENERATOR_CATEGORIES, CoreInputs, DerivedValue, UserModification

MANIFEST_FILENAME = "service-manifest.json"
MANIFEST_VERSION = "1.0"


class ManifestError(ValueError):
    """Raised when a manifest file exists but cannot be understood."""


def compute_checksum(paths: Iterable[str]) -> str:
    """SHA-256 over the sorted, newline-joined relative path list."""
    joined = "\n".join(sorted(paths))
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


@dataclass
class ServiceManifest:
    """Generated file inventory plus the inputs that produced it."""

    generated_at: str
    tool_version: str
    core_inputs: Dict[str, Any]
    derived_values: Dict[str, Dict[str, Any]]
    files: Dict[str, List[str]]
    checksum: str
    capabilities: Dict[str, bool] = field(default_factory=dict)
    user_modifications: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    manifest_version: str = MANIFEST_VERSION

    @property
    def all_files(self) -> List[str]:
        return sorted(path for paths in self.files.values() for path in paths)

    @property
    def total_files(self) -> int:
        return sum(len(paths) for paths in self.files.values())

    @property
    def service_name(self) -> Optional[str]:
        value = self.core_inputs.get("service_name")
        return value if isinstance(value, str) else None

    @property
    def service_type(self) -> Optional[str]:
        value = self.core_inputs.get("service_type")
        return value if isinstance(value, str) else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "manifest_version": self.manifest_version,
            "generated_at": self.generated_at,
            "tool_version": self.tool_version,
            "core_inputs": dict(self.core_inputs),
            "derived_values": {key: dict(value) for key, value in self.derived_values.items()},
            "user_modifications": list(self.user_modifications),
            "capabilities": dict(self.capabilities),
            "files": {
                "total": self.total_files,
                "by_category": {key: list(value) for key, value in self.files.items()},
            },
            "skipped": list(self.skipped),
            "checksum": self.checksum,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServiceManifest":
        files = data.get("files")
        by_category = files.get("by_category") if isinstance(files, Mapping) else None
        if not isinstance(by_category, Mapping):
            raise ManifestError("Manifest is missing files.by_category")
        checksum = data.get("checksum")
        if not isinstance(checksum, str):
            raise ManifestError("Manifest is missing checksum")
        core_inputs = data.get("core_inputs")
        if not isinstance(core_inputs, Mapping):
            raise ManifestError("Manifest is missing core_inputs")

        capabilities = data.get("capabilities")
        if not isinstance(capabilities, Mapping):
            capabilities = {}
        return cls(
            generated_at=str(data.get("generated_at", "")),
            tool_version=str(data.get("tool_version", "")),
            core_inputs=dict(core_inputs),
            derived_values=dict(data.get("derived_values") or {}),
            files={str(key): [str(path) for path in value] for key, value in by_category.items()},
            checksum=checksum,
            capabilities={str(key): bool(value) for key, value in capabilities.items()},
            user_modifications=list(data.get("user_modifications") or []),
            skipped=[str(path) for path in data.get("skipped") or []],
            manifest_version=str(data.get("manifest_version", MANIFEST_VERSION)),
        )


def build_manifest(
    core_inputs: CoreInputs,
    derived_values: Mapping[str, DerivedValue],
    files_by_category: Mapping[str, Sequence[str]],
    *,
    generated_at: str,
    tool_version: str,
    user_modifications: Sequence[UserModification] = (),
    skipped: Sequence[str] = (),
) -> ServiceManifest:
    files: Dict[str, List[str]] = {}
    for category in GENERATOR_CATEGORIES:
        if category in files_by_category:
            files[category] = sorted(set(files_by_category[category]))
    for category, paths in files_by_category.items():
        if category not in files:
            files[category] = sorted(set(paths))

    all_paths = [path for paths in files.values() for path in paths]
    return ServiceManifest(
        generated_at=generated_at,
        tool_version=tool_version,
        core_inputs=core_inputs.to_dict(),
        derived_values={key: value.to_dict() for key, value in derived_values.items()},
        files=files,
        checksum=compute_checksum(all_paths),
        capabilities=planned_capabilities(derived_values),
        user_modifications=[modification.to_dict() for modification in user_modifications],
        skipped=sorted(skipped),
    )


def write_manifest(manifest: ServiceManifest, root: Path) -> Path:
    path = Path(root) / MANIFEST_FILENAME
    path.write_text(json.dumps(manifest.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return path


def load_manifest(root: Path) -> Optional[ServiceManifest]:
    """Return the manifest under ``root``; ``None`` when there is none."""
    path = Path(root) / MANIFEST_FILENAME
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ManifestError(f"Failed to read {MANIFEST_FILENAME}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{MANIFEST_FILENAME} must contain a JSON object")
    return ServiceManifest.from_dict(data)


__all__ = [
    "MANIFEST_FILENAME",
    "MANIFEST_VERSION",
    "ManifestError",
    "ServiceManifest",
    "build_manifest",
    "compute_checksum",
    "load_manifest",
    "write_manifest",
]
