"""Configuration loading for svcgen (.svcgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".svcgen.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class DefaultsConfig:
    """Organisation-wide defaults feeding derived values."""

    author: Optional[str] = None
    git_organization: Optional[str] = None


@dataclass
class GenerationConfig:
    """Settings for the generation pipeline."""

    overwrite: bool = False
    output_dir: Optional[Path] = None
    templates_dir: Optional[Path] = None


@dataclass
class DiscoveryConfig:
    """Settings for capability discovery."""

    parallel: bool = True
    credential_timeout: float = 5.0
    permissions_file: str = ".svcgen/token-permissions.json"


@dataclass
class AssessmentConfig:
    """Settings for the assessment engine."""

    max_recommendations: int = 5


@dataclass
class SvcGenConfig:
    """Represents the high-level settings defined in .svcgen.yml."""

    root: Path
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    assessment: AssessmentConfig = field(default_factory=AssessmentConfig)


def load_config(config_path: Path) -> SvcGenConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SvcGenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    defaults_data = _as_dict(data.get("defaults"))
    defaults = DefaultsConfig(
        author=_as_str(defaults_data.get("author")),
        git_organization=_as_str(defaults_data.get("git_organization")),
    )

    generation_data = _as_dict(data.get("generation"))
    generation = GenerationConfig()
    if generation_data:
        overwrite = _as_bool(generation_data.get("overwrite"))
        if overwrite is not None:
            generation.overwrite = overwrite
        output_dir = _as_str(generation_data.get("output_dir"))
        generation.output_dir = root / output_dir if output_dir else None
        templates_dir = _as_str(generation_data.get("templates_dir"))
        generation.templates_dir = root / templates_dir if templates_dir else None

    discovery_data = _as_dict(data.get("discovery"))
    discovery = DiscoveryConfig()
    if discovery_data:
        parallel = _as_bool(discovery_data.get("parallel"))
        if parallel is not None:
            discovery.parallel = parallel
        timeout = _as_float(discovery_data.get("credential_timeout"))
        if timeout is not None:
            if timeout <= 0:
                raise ConfigError("discovery.credential_timeout must be positive")
            discovery.credential_timeout = timeout
        permissions_file = _as_str(discovery_data.get("permissions_file"))
        if permissions_file:
            discovery.permissions_file = permissions_file

    assessment_data = _as_dict(data.get("assessment"))
    assessment = AssessmentConfig()
    if assessment_data:
        limit = _as_int(assessment_data.get("max_recommendations"))
        if limit is not None:
            if limit < 1:
                raise ConfigError("assessment.max_recommendations must be at least 1")
            assessment.max_recommendations = limit

    return SvcGenConfig(
        root=root,
        defaults=defaults,
        generation=generation,
        discovery=discovery,
        assessment=assessment,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None

