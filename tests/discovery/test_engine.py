"""Capability discovery tests."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional, Sequence

from svcgen.coordinator import GenerationResult
from svcgen.discovery import (
    Analysis,
    CapabilityDiscovery,
    Contribution,
    CredentialAnalysis,
    StaticPermissionSource,
)
from svcgen.models import CAPABILITY_SLOTS
from svcgen.scanner import ProjectLayout, ProjectScanner
from tests._fixtures.project_builder import ProjectBuilder


def test_generated_project_round_trips(generated_project: GenerationResult) -> None:
    root = generated_project.manifest_path.parent

    model = CapabilityDiscovery().discover(root)

    discovered = {slot: model.slot(slot).configured for slot in CAPABILITY_SLOTS}
    assert discovered == generated_project.manifest.capabilities
    assert model.deployment.provider == "edge-workers"
    assert model.framework.provider == "worker-runtime"
    assert model.authentication.provider == "jose"
    assert model.database.provider == "d1"
    assert model.database.quantity == 1
    assert model.storage.details["providers"] == ["kv"]
    assert model.hints["service_name"] == "billing-api"
    assert model.hints["credentials"] == "unavailable"


def test_generated_project_records_layout_details(generated_project: GenerationResult) -> None:
    model = CapabilityDiscovery(parallel=False).discover(generated_project.manifest_path.parent)

    deployment = model.deployment.details
    assert deployment["environments"] == ["production", "staging", "development"]
    assert deployment["scripts"] == ["deploy", "deploy:staging"]
    assert deployment["pipelines"] == ["ci.yml", "deploy.yml"]
    assert model.framework.details["version"] == "^1.0.0"
    assert model.monitoring.details["health_checks"] == ["scripts/health-check.sh"]


def test_empty_directory_configures_nothing(tmp_path: Path) -> None:
    model = CapabilityDiscovery().discover(tmp_path)

    assert model.configured_slots() == []


def test_missing_directory_degrades_to_empty_model(tmp_path: Path) -> None:
    model = CapabilityDiscovery().discover(tmp_path / "missing")

    assert model.configured_slots() == []
    assert model.hints == {}


def test_unparsable_descriptor_does_not_break_other_analyses(project_builder: ProjectBuilder) -> None:
    project_builder.write({"wrangler.toml": "name = [unterminated\n"})
    project_builder.write_json(
        "package.json", {"name": "svc", "dependencies": {"@svcgen/worker-runtime": "^1.2.0"}}
    )

    model = project_builder.discover()

    assert not model.deployment.configured
    assert model.framework.configured
    assert model.framework.details["version"] == "^1.2.0"


def test_descriptor_bindings_map_to_slots(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "wrangler.toml": """
            name = "files"
            main = "src/index.js"
            compatibility_date = "2024-09-23"
            tail_consumers = [{ service = "logs" }]

            [vars]
            API_SECRET_NAME = "x"
            SESSION_SECRET = "y"

            [[r2_buckets]]
            binding = "FILES"
            bucket_name = "files"

            [[kv_namespaces]]
            binding = "CACHE"
            id = "a"

            [[kv_namespaces]]
            binding = "SESSIONS"
            id = "b"

            [queues]
            producers = [{ binding = "Q", queue = "q" }]
            consumers = [{ queue = "q" }]
            """
        }
    )

    model = project_builder.discover()

    assert model.storage.quantity == 3
    assert model.storage.details["providers"] == ["kv", "r2"]
    assert model.storage.provider == "kv"
    assert model.messaging.quantity == 2
    assert model.security.details["variables"] == ["API_SECRET_NAME", "SESSION_SECRET"]
    assert model.monitoring.provider == "tail"


def test_json_descriptor_is_supported(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "wrangler.jsonc": """
            // comment
            {"name": "svc", "d1_databases": [{"binding": "DB"}]}
            """
        }
    )

    model = project_builder.discover()

    assert model.deployment.configured
    assert model.database.configured


def test_gitignored_paths_are_not_scanned(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            ".gitignore": "generated/\n*.log\n",
            "src/index.js": "export default {};\n",
            "generated/out.js": "x\n",
            "debug.log": "x\n",
            "node_modules/pkg/index.js": "x\n",
        }
    )

    layout = ProjectScanner().scan(project_builder.path())

    assert layout.files == [".gitignore", "src/index.js"]
    assert layout.source_files() == ["src/index.js"]


class _Fixed(Analysis):
    def __init__(self, name: str, slot: str, provider: str) -> None:
        self.name = name
        self._slot = slot
        self._provider = provider

    def analyze(self, layout: ProjectLayout) -> Contribution:
        contribution = Contribution()
        contribution.configure(self._slot, source=self.name, provider=self._provider)
        contribution.slot(self._slot).details[self.name] = True
        return contribution


def test_precedence_is_fixed_regardless_of_registration_order(tmp_path: Path) -> None:
    analyses = [
        _Fixed("deployment", "storage", "from-deployment"),
        _Fixed("layout", "storage", "from-layout"),
        _Fixed("plugin", "storage", "from-plugin"),
        _Fixed("dependencies", "storage", "from-dependencies"),
    ]

    model = CapabilityDiscovery(analyses, parallel=True).discover(tmp_path)

    storage = model.storage
    assert storage.provider == "from-deployment"
    assert storage.sources == ["plugin", "layout", "dependencies", "deployment"]
    assert storage.details == {"plugin": True, "layout": True, "dependencies": True, "deployment": True}


class _Broken(Analysis):
    name = "dependencies"

    def analyze(self, layout: ProjectLayout) -> Contribution:
        raise RuntimeError("boom")


def test_failing_analysis_degrades_to_no_contribution(tmp_path: Path) -> None:
    analyses = [_Broken(), _Fixed("deployment", "deployment", "edge-workers")]

    model = CapabilityDiscovery(analyses).discover(tmp_path)

    assert model.configured_slots() == ["deployment"]


def test_credentials_mark_possible_slots(project_builder: ProjectBuilder) -> None:
    source = StaticPermissionSource(["Workers Scripts:Edit", "D1:Edit", "Account Settings:Read"])

    model = project_builder.discover(permission_source=source)

    assert model.hints["credentials"] == "available"
    assert model.database.possible is True
    assert model.database.configured is False
    assert model.database.sources == ["credentials"]
    assert model.deployment.possible is True
    assert model.storage.possible is False


def test_credentials_read_from_project_file(project_builder: ProjectBuilder) -> None:
    project_builder.write_json(
        ".svcgen/token-permissions.json", {"permissions": ["Workers R2 Storage:Edit"]}
    )

    model = CapabilityDiscovery(parallel=False).discover(project_builder.path())

    assert model.storage.possible is True
    assert model.database.possible is False


class _SlowSource:
    def __init__(self) -> None:
        self.release = threading.Event()

    def permissions(self, project_root: Path) -> Optional[Sequence[str]]:
        self.release.wait(5)
        return ["D1:Edit"]


def test_credential_timeout_reports_unavailable(tmp_path: Path) -> None:
    source = _SlowSource()
    analysis = CredentialAnalysis(source, timeout=0.05)

    try:
        model = CapabilityDiscovery([analysis]).discover(tmp_path)
    finally:
        source.release.set()

    assert model.hints["credentials"] == "unavailable"
    assert model.database.possible is None


class _FailingSource:
    def permissions(self, project_root: Path) -> Optional[Sequence[str]]:
        raise ConnectionError("platform API unreachable")


def test_credential_failure_reports_unavailable(tmp_path: Path) -> None:
    model = CapabilityDiscovery([CredentialAnalysis(_FailingSource())]).discover(tmp_path)

    assert model.hints["credentials"] == "unavailable"
