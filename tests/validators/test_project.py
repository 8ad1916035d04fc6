"""Project validation and diagnostics tests."""

from __future__ import annotations

import json
from pathlib import Path

from svcgen.coordinator import GenerationResult
from svcgen.manifest import MANIFEST_FILENAME
from svcgen.validators import ProjectValidator
from tests._fixtures.project_builder import ProjectBuilder


def _root(result: GenerationResult) -> Path:
    return result.manifest_path.parent


def test_freshly_generated_project_is_valid(generated_project: GenerationResult) -> None:
    report = ProjectValidator().validate(_root(generated_project))

    assert report.valid
    assert report.issues == []
    assert report.warnings == []


def test_deleted_package_json_yields_exactly_one_issue(generated_project: GenerationResult) -> None:
    root = _root(generated_project)
    (root / "package.json").unlink()

    report = ProjectValidator().validate(root)

    assert not report.valid
    assert report.issues == ["Missing required file: package.json"]
    assert report.warnings == []


def test_missing_directory_is_reported(tmp_path: Path) -> None:
    report = ProjectValidator().validate(tmp_path / "absent")

    assert not report.valid
    assert report.issues[0].startswith("Missing required directory")


def test_missing_manifest_is_a_warning(generated_project: GenerationResult) -> None:
    root = _root(generated_project)
    (root / MANIFEST_FILENAME).unlink()

    report = ProjectValidator().validate(root)

    assert report.valid
    assert report.warnings == [f"No {MANIFEST_FILENAME} found; drift detection skipped"]


def test_corrupt_manifest_is_an_issue(generated_project: GenerationResult) -> None:
    root = _root(generated_project)
    (root / MANIFEST_FILENAME).write_text("{not json", encoding="utf-8")

    report = ProjectValidator().validate(root)

    assert not report.valid
    assert report.issues[0].startswith(f"{MANIFEST_FILENAME}: Invalid manifest")


def test_removed_binding_is_reported_as_drift(generated_project: GenerationResult) -> None:
    root = _root(generated_project)
    descriptor = root / "wrangler.toml"
    text = descriptor.read_text(encoding="utf-8")
    descriptor.write_text(text.replace("[[d1_databases]]", "[[unused_databases]]"), encoding="utf-8")

    report = ProjectValidator().validate(root)

    assert report.issues == [
        "Configuration mismatch: database expected configured but discovered not configured"
    ]


def test_invalid_descriptor_skips_drift_for_its_slots(generated_project: GenerationResult) -> None:
    root = _root(generated_project)
    (root / "wrangler.toml").write_text("name = [broken\n", encoding="utf-8")

    report = ProjectValidator().validate(root)

    assert len(report.issues) == 1
    assert report.issues[0].startswith("wrangler.toml: Invalid TOML")


def test_package_json_field_checks(project_builder: ProjectBuilder) -> None:
    project_builder.write_json("package.json", {"version": "1.0.0"})
    project_builder.write(
        {
            "wrangler.toml": 'name = "svc"\nmain = "src/index.js"\n',
            "src/index.js": "export default {};\n",
        }
    )

    report = ProjectValidator().validate(project_builder.path())

    assert report.issues == [
        "package.json: Missing required field 'name'",
        "wrangler.toml: Missing required field 'compatibility_date'",
    ]
    assert 'package.json: Should use "type": "module" for ES modules' in report.warnings


def test_deleted_generated_file_is_a_warning(generated_project: GenerationResult) -> None:
    root = _root(generated_project)
    (root / "docs" / "API.md").unlink()

    report = ProjectValidator().validate(root)

    assert report.valid
    assert report.warnings == [f"File listed in {MANIFEST_FILENAME} is missing: docs/API.md"]


def test_diagnose_healthy_project(generated_project: GenerationResult) -> None:
    diagnosis = ProjectValidator().diagnose(_root(generated_project))

    assert diagnosis.healthy
    assert diagnosis.errors == []
    assert diagnosis.warnings == []
    assert diagnosis.recommendations == []
    assert diagnosis.service_name == "billing-api"


def test_diagnose_sorts_issues_by_severity(generated_project: GenerationResult) -> None:
    root = _root(generated_project)
    (root / "src" / "index.js").unlink()
    package = json.loads((root / "package.json").read_text(encoding="utf-8"))
    del package["scripts"]["dev"]
    (root / "package.json").write_text(json.dumps(package), encoding="utf-8")
    descriptor = root / "wrangler.toml"
    descriptor.write_text(
        descriptor.read_text(encoding="utf-8").replace("[[kv_namespaces]]", "[[unused_namespaces]]"),
        encoding="utf-8",
    )

    diagnosis = ProjectValidator().diagnose(root)

    assert not diagnosis.healthy
    assert [(entry.message, entry.severity) for entry in diagnosis.errors] == [
        ("Missing required file: src/index.js", "high")
    ]
    assert [(entry.message, entry.severity) for entry in diagnosis.warnings] == [
        ("Configuration mismatch: storage expected configured but discovered not configured", "medium")
    ]
    assert diagnosis.recommendations == ["Add development scripts for easier testing"]


def test_diagnose_deep_scan_adds_best_practices(project_builder: ProjectBuilder) -> None:
    project_builder.write_json(
        "package.json",
        {"name": "svc", "version": "1.0.0", "type": "module", "scripts": {"dev": "x", "deploy": "y"}},
    )

    diagnosis = ProjectValidator().diagnose(project_builder.path(), deep_scan=True)

    assert diagnosis.service_name == "svc"
    assert "Add a test script so CI can run the suite" in diagnosis.recommendations
    assert "Add a README.md describing the service" in diagnosis.recommendations
    assert "Add a CI workflow under .github/workflows" in diagnosis.recommendations
    assert len(diagnosis.recommendations) == len(set(diagnosis.recommendations))
    assert {entry.severity for entry in diagnosis.errors} == {"high"}
