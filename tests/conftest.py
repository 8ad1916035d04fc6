from __future__ import annotations

from pathlib import Path

import pytest

from svcgen.coordinator import GenerationCoordinator, GenerationResult
from svcgen.derivation import derive
from svcgen.inputs import build_core_inputs
from svcgen.models import CoreInputs
from tests._fixtures.project_builder import FIXED_TIME, ProjectBuilder, valid_inputs


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def core_inputs() -> CoreInputs:
    return build_core_inputs(valid_inputs())


@pytest.fixture
def coordinator() -> GenerationCoordinator:
    return GenerationCoordinator(clock=lambda: FIXED_TIME)


@pytest.fixture
def generated_project(
    tmp_path: Path, core_inputs: CoreInputs, coordinator: GenerationCoordinator
) -> GenerationResult:
    """Generate the billing-api data service into tmp_path/billing-api."""
    return coordinator.generate(core_inputs, derive(core_inputs), tmp_path / "billing-api")
