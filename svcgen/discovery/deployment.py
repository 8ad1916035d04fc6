"""Deployment descriptor inspection (wrangler.toml / wrangler.json)."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..capabilities import BINDING_RULES, DEPLOYMENT_DESCRIPTOR, PLATFORM_PROVIDER, SECRET_MARKER
from ..scanner import ProjectLayout
from .base import Analysis, Contribution

_JSON_DESCRIPTORS = ("wrangler.json", "wrangler.jsonc")


def load_descriptor(root: Path) -> Optional[Dict[str, Any]]:
    """Parse the deployment descriptor; ``None`` when the project has none.

    Parse errors propagate so callers can report them.
    """
    toml_path = root / DEPLOYMENT_DESCRIPTOR
    if toml_path.is_file():
        return tomllib.loads(toml_path.read_text(encoding="utf-8"))
    for name in _JSON_DESCRIPTORS:
        json_path = root / name
        if json_path.is_file():
            data = json.loads(_strip_line_comments(json_path.read_text(encoding="utf-8")))
            if not isinstance(data, dict):
                raise ValueError(f"{name} must contain an object")
            return data
    return None


def _strip_line_comments(text: str) -> str:
    return "\n".join(line for line in text.splitlines() if not line.lstrip().startswith("//"))


def count_bindings(value: Any) -> int:
    """Array tables count their entries; queue tables count producers and consumers."""
    if isinstance(value, list):
        return len(value)
    if isinstance(value, dict):
        return sum(len(entries) for entries in value.values() if isinstance(entries, list))
    return 0


def secret_variables(descriptor: Dict[str, Any]) -> List[str]:
    variables = descriptor.get("vars")
    if not isinstance(variables, dict):
        return []
    return sorted(key for key in variables if SECRET_MARKER in key.upper())


def environments(descriptor: Dict[str, Any]) -> List[str]:
    names = ["production"]
    env = descriptor.get("env")
    if isinstance(env, dict):
        names.extend(name for name in env if name not in names)
    return names


class DeploymentAnalysis(Analysis):
    """Maps descriptor bindings to capability slots."""

    name = "deployment"

    def analyze(self, layout: ProjectLayout) -> Contribution:
        contribution = Contribution()
        descriptor = load_descriptor(layout.root)
        if descriptor is None:
            return contribution

        deployment = contribution.configure("deployment", source=self.name, provider=PLATFORM_PROVIDER)
        deployment.details["environments"] = environments(descriptor)
        if isinstance(descriptor.get("name"), str):
            deployment.details["worker_name"] = descriptor["name"]

        for table, slot_name, provider in BINDING_RULES:
            count = count_bindings(descriptor.get(table))
            if count < 1:
                continue
            slot = contribution.configure(slot_name, source=self.name, quantity=count)
            providers = slot.details.setdefault("providers", [])
            providers.append(provider)
            if slot.provider is None:
                slot.provider = provider

        secrets = secret_variables(descriptor)
        if secrets:
            slot = contribution.configure(
                "security", source=self.name, provider="secrets", quantity=len(secrets)
            )
            slot.details["variables"] = secrets

        observability = descriptor.get("observability")
        if isinstance(observability, dict) and observability.get("enabled") is True:
            contribution.configure("monitoring", source=self.name, provider="observability")
        elif descriptor.get("tail_consumers"):
            contribution.configure("monitoring", source=self.name, provider="tail")

        return contribution
