"""Dependency manifest inspection (package.json)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..capabilities import AUTH_LIBRARIES, DEPENDENCY_MANIFEST, FRAMEWORK_PACKAGE, FRAMEWORK_PROVIDER
from ..scanner import ProjectLayout
from .base import Analysis, Contribution


def load_package_json(root: Path) -> Optional[Dict[str, Any]]:
    """Parse package.json; ``None`` when absent. Parse errors propagate."""
    path = root / DEPENDENCY_MANIFEST
    if not path.is_file():
        return None
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{DEPENDENCY_MANIFEST} must contain an object")
    return data


def declared_dependencies(package: Dict[str, Any]) -> Dict[str, str]:
    merged: Dict[str, str] = {}
    for key in ("devDependencies", "peerDependencies", "dependencies"):
        section = package.get(key)
        if isinstance(section, dict):
            merged.update({str(name): str(version) for name, version in section.items()})
    return merged


class DependencyAnalysis(Analysis):
    """Infers framework and authentication support from declared packages."""

    name = "dependencies"

    def analyze(self, layout: ProjectLayout) -> Contribution:
        contribution = Contribution()
        package = load_package_json(layout.root)
        if package is None:
            return contribution

        dependencies = declared_dependencies(package)
        if FRAMEWORK_PACKAGE in dependencies:
            slot = contribution.configure("framework", source=self.name, provider=FRAMEWORK_PROVIDER)
            slot.details["version"] = dependencies[FRAMEWORK_PACKAGE]

        auth_libraries = [name for name in AUTH_LIBRARIES if name in dependencies]
        if auth_libraries:
            slot = contribution.configure("authentication", source=self.name, provider=auth_libraries[0])
            slot.details["libraries"] = auth_libraries

        scripts = package.get("scripts")
        if isinstance(scripts, dict):
            deployment = contribution.slot("deployment")
            deployment.details["scripts"] = sorted(
                name for name in scripts if name == "deploy" or name.startswith("deploy:")
            )
        return contribution
