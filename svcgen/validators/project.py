"""Project validation and diagnostics.

Validation reports problems in a project directory and the drift between its
service manifest and a fresh discovery run. Nothing here modifies the project.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from ..assessment import assess
from ..capabilities import DEPENDENCY_MANIFEST, DEPLOYMENT_DESCRIPTOR, SLOT_SOURCES
from ..discovery import CapabilityDiscovery
from ..logging import get_logger
from ..manifest import MANIFEST_FILENAME, ManifestError, ServiceManifest, load_manifest
from ..models import CAPABILITY_SLOTS
from .base import DiagnosticEntry, Diagnosis, ValidationReport

REQUIRED_FILES: Tuple[str, ...] = (DEPENDENCY_MANIFEST, DEPLOYMENT_DESCRIPTOR, "src/index.js")
PACKAGE_REQUIRED_FIELDS: Tuple[str, ...] = ("name", "version")
DESCRIPTOR_REQUIRED_FIELDS: Tuple[str, ...] = ("name", "main", "compatibility_date")

MISMATCH_PREFIX = "Configuration mismatch"

_SUGGESTIONS = {
    "missing": "Run svcgen create to regenerate the missing files",
    "invalid": "Review and correct the configuration",
    "mismatch": "Regenerate with svcgen create --overwrite or restore the missing bindings",
    "other": "Consider updating for better compatibility",
}


def _describe(configured: bool) -> str:
    return "configured" if configured else "not configured"


class ProjectValidator:
    """Checks required files, parses descriptors and detects drift."""

    def __init__(
        self,
        discovery: CapabilityDiscovery | None = None,
        *,
        max_recommendations: int = 5,
    ) -> None:
        self.discovery = discovery or CapabilityDiscovery()
        self.max_recommendations = max_recommendations
        self.logger = get_logger("validators.project")

    def validate(self, project_path: Path | str) -> ValidationReport:
        root = Path(project_path).expanduser().resolve()
        if not root.is_dir():
            return ValidationReport(
                valid=False,
                issues=[f"Missing required directory: {root}"],
                project_path=str(root),
            )

        issues: List[str] = []
        warnings: List[str] = []
        unavailable: Set[str] = set()

        for relative in REQUIRED_FILES:
            if not (root / relative).is_file():
                issues.append(f"Missing required file: {relative}")
                unavailable.add(relative)

        if DEPENDENCY_MANIFEST not in unavailable:
            package_issues, package_warnings = self._check_package_json(root)
            if package_issues and package_issues[0].startswith(f"{DEPENDENCY_MANIFEST}: Invalid"):
                unavailable.add(DEPENDENCY_MANIFEST)
            issues.extend(package_issues)
            warnings.extend(package_warnings)

        if DEPLOYMENT_DESCRIPTOR not in unavailable:
            descriptor_issues = self._check_descriptor(root)
            if descriptor_issues and descriptor_issues[0].startswith(f"{DEPLOYMENT_DESCRIPTOR}: Invalid"):
                unavailable.add(DEPLOYMENT_DESCRIPTOR)
            issues.extend(descriptor_issues)

        try:
            manifest = load_manifest(root)
        except ManifestError as exc:
            issues.append(f"{MANIFEST_FILENAME}: Invalid manifest - {exc}")
            manifest = None
        else:
            if manifest is None:
                warnings.append(f"No {MANIFEST_FILENAME} found; drift detection skipped")

        if manifest is not None:
            issues.extend(self._check_drift(root, manifest, unavailable))
            warnings.extend(self._check_manifest_files(root, manifest, unavailable))

        self.logger.debug("Validated %s: %d issue(s), %d warning(s)", root, len(issues), len(warnings))
        return ValidationReport(
            valid=not issues,
            issues=issues,
            warnings=warnings,
            project_path=str(root),
        )

    def diagnose(self, project_path: Path | str, *, deep_scan: bool = False) -> Diagnosis:
        """Sort validation findings into errors and warnings, then recommend.

        Deep scan adds recommendations only, never errors.
        """
        root = Path(project_path).expanduser().resolve()
        report = self.validate(root)
        diagnosis = Diagnosis()

        for issue in report.issues:
            if "Missing required" in issue:
                diagnosis.errors.append(DiagnosticEntry(issue, "high", _SUGGESTIONS["missing"]))
            elif "Invalid" in issue:
                diagnosis.errors.append(DiagnosticEntry(issue, "medium", _SUGGESTIONS["invalid"]))
            elif issue.startswith(MISMATCH_PREFIX):
                diagnosis.warnings.append(DiagnosticEntry(issue, "medium", _SUGGESTIONS["mismatch"]))
            else:
                diagnosis.warnings.append(DiagnosticEntry(issue, "low", _SUGGESTIONS["other"]))
        for warning in report.warnings:
            diagnosis.warnings.append(DiagnosticEntry(warning, "low", _SUGGESTIONS["other"]))

        package = self._read_package_json(root)
        diagnosis.service_name = self._service_name(root, package)
        if package is not None:
            scripts = package.get("scripts") if isinstance(package.get("scripts"), dict) else {}
            if "dev" not in scripts:
                diagnosis.recommendations.append("Add development scripts for easier testing")
            if "deploy" not in scripts:
                diagnosis.recommendations.append("Add deployment scripts for easier publishing")

        if deep_scan:
            for recommendation in self._deep_scan(root, package):
                if recommendation not in diagnosis.recommendations:
                    diagnosis.recommendations.append(recommendation)
        return diagnosis

    def _check_package_json(self, root: Path) -> Tuple[List[str], List[str]]:
        package = None
        try:
            package = json.loads((root / DEPENDENCY_MANIFEST).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            return [f"{DEPENDENCY_MANIFEST}: Invalid JSON format - {exc}"], []
        if not isinstance(package, dict):
            return [f"{DEPENDENCY_MANIFEST}: Invalid JSON format - expected an object"], []

        issues = [
            f"{DEPENDENCY_MANIFEST}: Missing required field '{name}'"
            for name in PACKAGE_REQUIRED_FIELDS
            if not package.get(name)
        ]
        warnings: List[str] = []
        if package.get("type") != "module":
            warnings.append(f'{DEPENDENCY_MANIFEST}: Should use "type": "module" for ES modules')
        return issues, warnings

    def _check_descriptor(self, root: Path) -> List[str]:
        try:
            descriptor = tomllib.loads((root / DEPLOYMENT_DESCRIPTOR).read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            return [f"{DEPLOYMENT_DESCRIPTOR}: Invalid TOML - {exc}"]
        return [
            f"{DEPLOYMENT_DESCRIPTOR}: Missing required field '{name}'"
            for name in DESCRIPTOR_REQUIRED_FIELDS
            if not descriptor.get(name)
        ]

    def _check_drift(self, root: Path, manifest: ServiceManifest, unavailable: Set[str]) -> List[str]:
        if not manifest.capabilities:
            return []
        model = self.discovery.discover(root)
        issues: List[str] = []
        for slot in CAPABILITY_SLOTS:
            if slot not in manifest.capabilities:
                continue
            if SLOT_SOURCES.get(slot) in unavailable:
                continue
            expected = manifest.capabilities[slot]
            actual = model.slot(slot).configured
            if expected != actual:
                issues.append(
                    f"{MISMATCH_PREFIX}: {slot} expected {_describe(expected)} "
                    f"but discovered {_describe(actual)}"
                )
        return issues

    def _check_manifest_files(
        self, root: Path, manifest: ServiceManifest, already_reported: Set[str]
    ) -> List[str]:
        return [
            f"File listed in {MANIFEST_FILENAME} is missing: {relative}"
            for relative in manifest.all_files
            if relative not in already_reported and not (root / relative).exists()
        ]

    def _read_package_json(self, root: Path) -> Optional[Dict[str, Any]]:
        try:
            data = json.loads((root / DEPENDENCY_MANIFEST).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None
        return data if isinstance(data, dict) else None

    def _service_name(self, root: Path, package: Optional[Dict[str, Any]]) -> Optional[str]:
        try:
            manifest = load_manifest(root)
        except ManifestError:
            manifest = None
        if manifest is not None and manifest.service_name:
            return manifest.service_name
        if package is not None and isinstance(package.get("name"), str):
            return package["name"]
        return None

    def _deep_scan(self, root: Path, package: Optional[Dict[str, Any]]) -> List[str]:
        recommendations: List[str] = []
        if package is not None:
            scripts = package.get("scripts") if isinstance(package.get("scripts"), dict) else {}
            if "test" not in scripts:
                recommendations.append("Add a test script so CI can run the suite")
            if "lint" not in scripts:
                recommendations.append("Add a lint script to catch errors before deploy")
        if not (root / "README.md").is_file():
            recommendations.append("Add a README.md describing the service")
        if not (root / ".gitignore").is_file():
            recommendations.append("Add a .gitignore that excludes node_modules and .wrangler")
        if not (root / ".github" / "workflows").is_dir():
            recommendations.append("Add a CI workflow under .github/workflows")

        result = assess(self.discovery.discover(root), max_recommendations=self.max_recommendations)
        recommendations.extend(rec.message for rec in result.recommendations)
        return recommendations


__all__ = ["ProjectValidator", "REQUIRED_FILES"]
