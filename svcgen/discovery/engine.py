"""Capability discovery: run the analyses and merge them by fixed precedence."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..config import DiscoveryConfig
from ..logging import get_logger
from ..manifest import ManifestError, load_manifest
from ..models import CapabilityModel
from ..scanner import ProjectLayout, ProjectScanner
from .base import Analysis, Contribution
from .credentials import CredentialAnalysis, FilePermissionSource, PermissionSource
from .dependencies import DependencyAnalysis
from .deployment import DeploymentAnalysis
from .layout import LayoutAnalysis

# Merge order: later analyses win the slots they configure.
ANALYSIS_PRECEDENCE = ("credentials", "layout", "dependencies", "deployment")


def merge_contribution(model: CapabilityModel, contribution: Contribution) -> None:
    """Fold one contribution into ``model``.

    A configuring contribution replaces configured/provider/quantity. ``possible``
    flags are OR-ed; sources and details accumulate.
    """
    for name, partial in contribution.slots.items():
        target = model.slot(name)
        if partial.configured:
            target.configured = True
            target.provider = partial.provider
            target.quantity = partial.quantity
        if partial.possible is not None:
            target.possible = bool(target.possible) or partial.possible
        for source in partial.sources:
            if source not in target.sources:
                target.sources.append(source)
        target.details.update(partial.details)
    model.hints.update(contribution.hints)


class CapabilityDiscovery:
    """Infers a capability model from an existing project directory."""

    def __init__(
        self,
        analyses: Optional[Iterable[Analysis]] = None,
        *,
        scanner: ProjectScanner | None = None,
        parallel: bool = True,
        permission_source: PermissionSource | None = None,
        credential_timeout: float = 5.0,
    ) -> None:
        if analyses is None:
            analyses = default_analyses(
                permission_source=permission_source, credential_timeout=credential_timeout
            )
        self.analyses: List[Analysis] = list(analyses)
        self.scanner = scanner or ProjectScanner()
        self.parallel = parallel
        self.logger = get_logger("discovery")

    @classmethod
    def from_config(
        cls, config: DiscoveryConfig, *, permission_source: PermissionSource | None = None
    ) -> "CapabilityDiscovery":
        source = permission_source or FilePermissionSource(config.permissions_file)
        return cls(
            parallel=config.parallel,
            permission_source=source,
            credential_timeout=config.credential_timeout,
        )

    def discover(self, project_path: Path | str) -> CapabilityModel:
        """Return the capability model for ``project_path``; never raises."""
        try:
            return self._discover(Path(project_path))
        except Exception as exc:
            self.logger.debug("Discovery failed for %s: %s", project_path, exc)
            return CapabilityModel()

    def _discover(self, project_path: Path) -> CapabilityModel:
        layout = self.scanner.scan(project_path)
        contributions = self._run_analyses(layout)

        model = CapabilityModel()
        for name in self._merge_order(contributions):
            merge_contribution(model, contributions[name])
        model.hints.update(self._manifest_hints(layout.root))
        self.logger.debug(
            "Discovered %s in %s", ", ".join(model.configured_slots()) or "nothing", layout.root
        )
        return model

    def _run_analyses(self, layout: ProjectLayout) -> Dict[str, Contribution]:
        if self.parallel and len(self.analyses) > 1:
            with ThreadPoolExecutor(
                max_workers=len(self.analyses), thread_name_prefix="svcgen-discovery"
            ) as executor:
                futures = {
                    analysis.name: executor.submit(self._safe_analyze, analysis, layout)
                    for analysis in self.analyses
                }
                return {name: future.result() for name, future in futures.items()}
        return {analysis.name: self._safe_analyze(analysis, layout) for analysis in self.analyses}

    def _safe_analyze(self, analysis: Analysis, layout: ProjectLayout) -> Contribution:
        try:
            return analysis.analyze(layout)
        except Exception as exc:
            self.logger.debug("Analysis %s degraded: %s", analysis.name, exc)
            return Contribution()

    @staticmethod
    def _merge_order(contributions: Dict[str, Contribution]) -> List[str]:
        known = [name for name in ANALYSIS_PRECEDENCE if name in contributions]
        extra = sorted(name for name in contributions if name not in ANALYSIS_PRECEDENCE)
        # Unlisted (plugin) analyses rank below the built-in ones.
        return extra + known

    def _manifest_hints(self, root: Path) -> Dict[str, str]:
        try:
            manifest = load_manifest(root)
        except ManifestError as exc:
            self.logger.debug("Ignoring unreadable manifest: %s", exc)
            return {}
        if manifest is None:
            return {}
        hints: Dict[str, str] = {}
        if manifest.service_name:
            hints["service_name"] = manifest.service_name
        if manifest.service_type:
            hints["service_type"] = manifest.service_type
        if manifest.tool_version:
            hints["tool_version"] = manifest.tool_version
        return hints


def default_analyses(
    *, permission_source: PermissionSource | None = None, credential_timeout: float = 5.0
) -> List[Analysis]:
    return [
        DeploymentAnalysis(),
        DependencyAnalysis(),
        LayoutAnalysis(),
        CredentialAnalysis(permission_source, timeout=credential_timeout),
    ]


def discover(project_path: Path | str, **kwargs: object) -> CapabilityModel:
    """Convenience wrapper around ``CapabilityDiscovery(**kwargs).discover``."""
    return CapabilityDiscovery(**kwargs).discover(project_path)  # type: ignore[arg-type]
