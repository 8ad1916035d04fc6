"""Tests for derived values and the confirmation session."""

from __future__ import annotations

import pytest

from svcgen.derivation import (
    DERIVED_FIELD_IDS,
    ConfirmationSession,
    DerivationDefaults,
    confirm_interactively,
    derive,
    parse_feature_toggles,
    service_url,
)
from svcgen.inputs import build_core_inputs
from svcgen.models import CoreInputs
from svcgen.prompts import ScriptedPrompter
from tests._fixtures.project_builder import valid_inputs


def test_derive_produces_every_field_in_declaration_order(core_inputs: CoreInputs) -> None:
    values = derive(core_inputs)

    assert tuple(values) == DERIVED_FIELD_IDS
    assert len(values) == 15
    assert all(not value.user_modified for value in values.values())


def test_derive_defaults_for_data_service(core_inputs: CoreInputs) -> None:
    values = {key: value.value for key, value in derive(core_inputs).items()}

    assert values["display_name"] == "Billing Api"
    assert values["version"] == "1.0.0"
    assert values["author"] == "Service Team"
    assert values["production_url"] == "https://billing-api.example.com"
    assert values["staging_url"] == "https://billing-api-sta.example.com"
    assert values["development_url"] == "https://billing-api-dev.example.com"
    assert values["database_name"] == "billing-api-db"
    assert values["worker_name"] == "billing-api-worker"
    assert values["package_name"] == "billing-api"
    assert values["git_repository_url"] == "https://github.com/your-org/billing-api"
    assert values["documentation_url"] == "https://docs.example.com"
    assert values["health_check_path"] == "/health"
    assert values["features"]["database"] is True
    assert values["features"]["logging"] is True
    assert "file_storage" not in values["features"]


def test_derive_uses_organisation_defaults(core_inputs: CoreInputs) -> None:
    values = derive(core_inputs, DerivationDefaults(author="Platform", git_organization="acme"))

    assert values["author"].value == "Platform"
    assert values["git_repository_url"].value == "https://github.com/acme/billing-api"


def test_derive_is_deterministic(core_inputs: CoreInputs) -> None:
    assert derive(core_inputs) == derive(core_inputs)


def test_service_url_prefixes_non_production_environments() -> None:
    assert service_url("svc", "example.com") == "https://svc.example.com"
    assert service_url("svc", "example.com", "development") == "https://svc-dev.example.com"


def test_content_service_enables_file_storage() -> None:
    core = build_core_inputs(valid_inputs(service_type="content-service"))

    features = derive(core)["features"].value

    assert features["file_storage"] is True
    assert features["caching"] is True
    assert "database" not in features


def test_override_records_modification(core_inputs: CoreInputs) -> None:
    session = ConfirmationSession.start(core_inputs)

    outcome = session.apply_override("version", " 2.0.0 ")

    assert outcome.accepted
    assert session.current("version") == "2.0.0"
    assert session.values["version"].default == "1.0.0"
    assert session.values["version"].user_modified
    assert [mod.to_dict() for mod in session.modifications] == [
        {"field": "version", "assumed": "1.0.0", "chosen": "2.0.0"}
    ]


def test_invalid_override_keeps_previous_value(core_inputs: CoreInputs) -> None:
    session = ConfirmationSession.start(core_inputs)

    outcome = session.apply_override("production_url", "billing.example.com")

    assert not outcome.accepted
    assert "must start with http" in (outcome.reason or "")
    assert session.current("production_url") == "https://billing-api.example.com"
    assert session.modifications == []


def test_quoted_path_override_is_rejected(core_inputs: CoreInputs) -> None:
    session = ConfirmationSession.start(core_inputs)

    outcome = session.apply_override("health_check_path", '/health"check')

    assert not outcome.accepted
    assert session.current("health_check_path") == "/health"
    assert session.modifications == []


def test_unknown_override_is_rejected(core_inputs: CoreInputs) -> None:
    session = ConfirmationSession.start(core_inputs)

    outcome = session.apply_override("colour", "blue")

    assert not outcome.accepted
    assert outcome.reason == "is not a recognised derived value"


def test_unchanged_override_is_not_recorded(core_inputs: CoreInputs) -> None:
    session = ConfirmationSession.start(core_inputs)

    outcome = session.apply_override("version", "1.0.0")

    assert outcome.accepted
    assert session.modifications == []


def test_overrides_do_not_cascade(core_inputs: CoreInputs) -> None:
    session = ConfirmationSession.start(core_inputs)

    session.apply_override("production_url", "https://billing.example.net")

    assert session.current("staging_url") == "https://billing-api-sta.example.com"
    assert session.current("documentation_url") == "https://docs.example.com"


def test_feature_override_accepts_toggle_text(core_inputs: CoreInputs) -> None:
    session = ConfirmationSession.start(core_inputs)

    outcome = session.apply_override("features", "search=off, queues=on")

    assert outcome.accepted
    features = session.current("features")
    assert features["search"] is False
    assert features["queues"] is True
    assert session.values["features"].default["search"] is True


def test_feature_override_cannot_drop_base_features(core_inputs: CoreInputs) -> None:
    session = ConfirmationSession.start(core_inputs)

    outcome = session.apply_override("features", {"search": True})

    assert not outcome.accepted
    assert session.current("features")["logging"] is True


def test_parse_feature_toggles_flips_bare_names() -> None:
    toggled = parse_feature_toggles("metrics", {"metrics": True})

    assert toggled == {"metrics": False}


@pytest.mark.parametrize("text", ["search=maybe", "unknown_feature"])
def test_parse_feature_toggles_rejects_bad_input(text: str) -> None:
    with pytest.raises(ValueError):
        parse_feature_toggles(text, {"search": True})


def test_confirm_interactively_keeps_blank_answers(core_inputs: CoreInputs) -> None:
    session = ConfirmationSession.start(core_inputs)
    answers = [""] * 14 + ["search=off"]
    answers[2] = "3.1.4"
    prompter = ScriptedPrompter(answers)

    outcomes = confirm_interactively(session, prompter)

    assert [outcome.field for outcome in outcomes] == ["version", "features"]
    assert session.current("version") == "3.1.4"
    assert session.current("features")["search"] is False
    assert session.current("display_name") == "Billing Api"
    assert prompter.prompts[-1].startswith("Features [")
