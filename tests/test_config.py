"""Tests for svcgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from svcgen.config import ConfigError, SvcGenConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, SvcGenConfig)
    assert config.root == tmp_path.resolve()
    assert config.defaults.author is None
    assert config.generation.overwrite is False
    assert config.generation.output_dir is None
    assert config.discovery.parallel is True
    assert config.discovery.credential_timeout == 5.0
    assert config.assessment.max_recommendations == 5


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".svcgen.yml"
    config_file.write_text(
        """
defaults:
  author: "Platform Team"
  git_organization: "acme"
generation:
  overwrite: true
  output_dir: "services"
  templates_dir: "templates"
discovery:
  parallel: "no"
  credential_timeout: 2.5
  permissions_file: "perms.json"
assessment:
  max_recommendations: 3
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.defaults.author == "Platform Team"
    assert config.defaults.git_organization == "acme"
    assert config.generation.overwrite is True
    assert config.generation.output_dir == tmp_path.resolve() / "services"
    assert config.generation.templates_dir == tmp_path.resolve() / "templates"
    assert config.discovery.parallel is False
    assert config.discovery.credential_timeout == 2.5
    assert config.discovery.permissions_file == "perms.json"
    assert config.assessment.max_recommendations == 3


def test_load_config_accepts_any_file_in_the_directory(tmp_path: Path) -> None:
    (tmp_path / ".svcgen.yml").write_text("defaults:\n  author: Ops\n", encoding="utf-8")

    config = load_config(tmp_path / "wrangler.toml")

    assert config.defaults.author == "Ops"


def test_load_config_treats_empty_file_as_defaults(tmp_path: Path) -> None:
    (tmp_path / ".svcgen.yml").write_text("   \n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.assessment.max_recommendations == 5


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".svcgen.yml").write_text("- one\n- two\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reports_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".svcgen.yml").write_text("defaults: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "body",
    [
        "discovery:\n  credential_timeout: 0\n",
        "assessment:\n  max_recommendations: 0\n",
    ],
)
def test_load_config_rejects_out_of_range_numbers(tmp_path: Path, body: str) -> None:
    (tmp_path / ".svcgen.yml").write_text(body, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
