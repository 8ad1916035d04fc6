"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator, List

import pytest

from svcgen.cli import _build_parser, main, parse_overrides
from tests._fixtures.project_builder import VALID_INPUTS


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    logger = logging.getLogger("svcgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


def _create_args(output: Path, *extra: str) -> List[str]:
    return [
        "create",
        "--service-name",
        VALID_INPUTS["service_name"],
        "--service-type",
        VALID_INPUTS["service_type"],
        "--domain",
        VALID_INPUTS["domain_name"],
        "--api-token",
        VALID_INPUTS["api_credential"],
        "--account-id",
        VALID_INPUTS["account_id"],
        "--zone-id",
        VALID_INPUTS["zone_id"],
        "--environment",
        VALID_INPUTS["environment"],
        "--output",
        str(output),
        *extra,
    ]


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "validate"])
    assert args.verbose is True
    assert args.command == "validate"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["diagnose", "svc", "--verbose", "--deep-scan"])
    assert args.verbose is True
    assert args.deep_scan is True
    assert args.path == "svc"


def test_cli_collects_repeated_overrides() -> None:
    parser = _build_parser()
    args = parser.parse_args(["create", "--set", "version=2.0.0", "--set", "features=search=off"])
    assert parse_overrides(args.overrides) == {"version": "2.0.0", "features": "search=off"}


def test_parse_overrides_rejects_missing_separator() -> None:
    with pytest.raises(ValueError):
        parse_overrides(["version"])


def test_create_command_generates_project(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "out"

    main(_create_args(target, "--json", "--set", "version=2.0.0"))

    data = json.loads(capsys.readouterr().out)
    assert data["service_name"] == "billing-api"
    assert data["files"]["total"] == len(data["written"])
    assert data["user_modifications"][0]["chosen"] == "2.0.0"
    assert (target / "service-manifest.json").is_file()


def test_create_reads_token_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SVCGEN_API_TOKEN", VALID_INPUTS["api_credential"])
    args = _create_args(tmp_path / "out")
    index = args.index("--api-token")
    del args[index : index + 2]

    main(args)

    assert "Generated" in capsys.readouterr().out


def test_create_command_reports_invalid_inputs(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    args = _create_args(tmp_path / "out")
    args[args.index("--service-name") + 1] = "bad_name"

    with pytest.raises(SystemExit) as excinfo:
        main(args)

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "svcgen create failed (high)" in err
    assert "service_name" in err
    assert not (tmp_path / "out").exists()


def test_validate_command_exit_codes(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "out"
    main(_create_args(target))
    capsys.readouterr()

    main(["validate", str(target)])
    assert "Project is valid" in capsys.readouterr().out

    (target / "package.json").unlink()
    with pytest.raises(SystemExit) as excinfo:
        main(["validate", str(target), "--json"])
    assert excinfo.value.code == 1
    report = json.loads(capsys.readouterr().out)
    assert report["issues"] == ["Missing required file: package.json"]


def test_assess_and_discover_emit_json(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "out"
    main(_create_args(target))
    capsys.readouterr()

    main(["assess", str(target), "--json"])
    assessed = json.loads(capsys.readouterr().out)
    main(["discover", str(target), "--json"])
    discovered = json.loads(capsys.readouterr().out)

    assert assessed["assessment"]["completeness"] == 100
    assert assessed["assessment"]["maturity"] == "mature"
    assert discovered["capabilities"]["database"]["configured"] is True
    assert discovered["capabilities"]["messaging"] == {"configured": False}


def test_diagnose_command_fails_for_broken_project(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["diagnose", str(tmp_path)])

    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "Missing required file: package.json" in out


def test_invalid_config_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / ".svcgen.yml").write_text("- not\n- a mapping\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["discover", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "svcgen discover failed" in capsys.readouterr().err


def test_short_token_is_reported_as_validation_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    args = _create_args(tmp_path / "out")
    args[args.index("--api-token") + 1] = "tok_short"

    with pytest.raises(SystemExit) as excinfo:
        main(args)

    assert excinfo.value.code == 1
    assert "svcgen create failed (high)" in capsys.readouterr().err
