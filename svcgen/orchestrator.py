"""Pipeline orchestration for create/discover/assess/validate/diagnose flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .assessment import assess
from .config import SvcGenConfig, load_config
from .coordinator import GenerationCoordinator, GenerationResult
from .derivation import ConfirmationSession, DerivationDefaults, OverrideOutcome, confirm_interactively
from .discovery import CapabilityDiscovery, PermissionSource
from .inputs import build_core_inputs, collect_core_inputs
from .logging import get_logger, register_secret
from .models import AssessmentResult, CapabilityModel, CoreInputs
from .prompts import Prompter
from .validators import Diagnosis, ProjectValidator, ValidationReport


@dataclass
class CreateOutcome:
    """Everything a create run decided and produced."""

    core_inputs: CoreInputs
    session: ConfirmationSession
    result: GenerationResult
    rejected: List[OverrideOutcome] = field(default_factory=list)

    @property
    def target_root(self) -> Path:
        return self.result.manifest_path.parent

    def to_dict(self) -> Dict[str, Any]:
        data = self.result.to_dict()
        data["service_name"] = self.core_inputs.service_name
        data["user_modifications"] = [mod.to_dict() for mod in self.session.modifications]
        data["rejected_overrides"] = [
            {"field": outcome.field, "reason": outcome.reason} for outcome in self.rejected
        ]
        return data


class ServiceOrchestrator:
    """Wires configuration, derivation, generation and discovery together."""

    def __init__(
        self,
        config: SvcGenConfig | None = None,
        *,
        coordinator: GenerationCoordinator | None = None,
        discovery: CapabilityDiscovery | None = None,
        validator: ProjectValidator | None = None,
        permission_source: PermissionSource | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or SvcGenConfig(root=Path.cwd())
        self.coordinator = coordinator or GenerationCoordinator(
            templates_dir=self.config.generation.templates_dir,
            clock=clock,
        )
        self.discovery = discovery or CapabilityDiscovery.from_config(
            self.config.discovery, permission_source=permission_source
        )
        self.validator = validator or ProjectValidator(
            self.discovery,
            max_recommendations=self.config.assessment.max_recommendations,
        )
        self.logger = get_logger("orchestrator")

    @classmethod
    def from_path(cls, path: Path | str, **kwargs: Any) -> "ServiceOrchestrator":
        """Build an orchestrator using the .svcgen.yml found at ``path``."""
        return cls(load_config(Path(path)), **kwargs)

    def derivation_defaults(self) -> DerivationDefaults:
        defaults = self.config.defaults
        base = DerivationDefaults()
        return DerivationDefaults(
            author=defaults.author or base.author,
            git_organization=defaults.git_organization or base.git_organization,
        )

    def collect_inputs(
        self, raw: Mapping[str, Any], prompter: Prompter | None = None
    ) -> CoreInputs:
        if prompter is None:
            return build_core_inputs(raw)
        return collect_core_inputs(prompter, provided=raw)

    def create(
        self,
        raw_inputs: Mapping[str, Any],
        target_root: Path | str | None = None,
        *,
        overrides: Mapping[str, Any] | None = None,
        prompter: Prompter | None = None,
        confirm: bool = False,
        overwrite: bool | None = None,
    ) -> CreateOutcome:
        """Validate inputs, derive and confirm values, then generate the project.

        ``prompter`` fills in missing inputs; with ``confirm`` it also walks the
        derived values. Explicit ``overrides`` apply before confirmation.
        """
        try:
            core_inputs = self.collect_inputs(raw_inputs, prompter)
            register_secret(core_inputs.api_credential)
            session = ConfirmationSession.start(core_inputs, self.derivation_defaults())

            rejected: List[OverrideOutcome] = []
            for outcome in session.apply_overrides(overrides or {}):
                if not outcome.accepted:
                    rejected.append(outcome)
            if confirm and prompter is not None:
                rejected.extend(
                    outcome
                    for outcome in confirm_interactively(session, prompter)
                    if not outcome.accepted
                )
        finally:
            if prompter is not None:
                prompter.close()

        root = self._target_root(core_inputs, target_root)
        effective_overwrite = self.config.generation.overwrite if overwrite is None else overwrite
        result = self.coordinator.generate(
            core_inputs,
            session.values,
            root,
            overwrite=effective_overwrite,
            user_modifications=session.modifications,
        )
        return CreateOutcome(core_inputs=core_inputs, session=session, result=result, rejected=rejected)

    def discover(self, path: Path | str) -> CapabilityModel:
        return self.discovery.discover(path)

    def assess(self, path: Path | str) -> Tuple[CapabilityModel, AssessmentResult]:
        model = self.discover(path)
        result = assess(model, max_recommendations=self.config.assessment.max_recommendations)
        return model, result

    def validate(self, path: Path | str) -> ValidationReport:
        return self.validator.validate(path)

    def diagnose(self, path: Path | str, *, deep_scan: bool = False) -> Diagnosis:
        return self.validator.diagnose(path, deep_scan=deep_scan)

    def _target_root(self, core_inputs: CoreInputs, target_root: Path | str | None) -> Path:
        if target_root is not None:
            return Path(target_root).expanduser()
        base = self.config.generation.output_dir or Path.cwd()
        return Path(base) / core_inputs.service_name


__all__ = ["CreateOutcome", "ServiceOrchestrator"]
