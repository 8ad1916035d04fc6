from __future__ import annotations

import pytest

from svcgen.assessment import KIND_RANK, assess, completeness_score, infer_service_type, maturity_for
from svcgen.models import CAPABILITY_SLOTS, CapabilityModel


def _model(*configured: str, possible: tuple[str, ...] = ()) -> CapabilityModel:
    model = CapabilityModel()
    for name in configured:
        model.slot(name).configured = True
    for name in possible:
        model.slot(name).possible = True
    return model


def test_deployment_only_project_is_developing() -> None:
    result = assess(_model("deployment"))

    assert result.completeness == 50
    assert result.maturity == "developing"
    assert result.missing_capabilities == ["framework"]
    assert result.inferred_service_type == "unknown"


def test_empty_project_is_basic_and_suggests_full_setup() -> None:
    result = assess(CapabilityModel(), max_recommendations=10)

    assert result.completeness == 0
    assert result.maturity == "basic"
    assert result.missing_capabilities == ["deployment", "framework"]
    messages = [rec.message for rec in result.recommendations]
    assert any("full setup" in message for message in messages)


def test_complete_project_is_mature() -> None:
    result = assess(_model("deployment", "framework"))

    assert result.completeness == 100
    assert result.maturity == "mature"
    assert result.missing_capabilities == []
    assert result.inferred_service_type == "generic"


@pytest.mark.parametrize(
    ("score", "maturity"),
    [(0, "basic"), (49, "basic"), (50, "developing"), (79, "developing"), (80, "mature"), (100, "mature")],
)
def test_maturity_thresholds(score: int, maturity: str) -> None:
    assert maturity_for(score) == maturity


def test_optional_slots_never_change_completeness() -> None:
    base = completeness_score(_model("deployment"))
    enriched = completeness_score(_model("deployment", "database", "storage", "security", "monitoring"))

    assert base == enriched == 50


def test_configuring_a_slot_never_lowers_completeness() -> None:
    for slot in CAPABILITY_SLOTS:
        for starting in ((), ("deployment",), ("framework",)):
            before = completeness_score(_model(*starting))
            after = completeness_score(_model(*starting, slot))
            assert after >= before


def test_recommendations_are_ranked_security_first_and_capped() -> None:
    result = assess(CapabilityModel(), max_recommendations=3)

    kinds = [rec.kind for rec in result.recommendations]
    assert len(kinds) == 3
    assert kinds == sorted(kinds, key=KIND_RANK.__getitem__)
    assert kinds[0] == "security"
    assert [rec.slot for rec in result.recommendations[:2]] == ["authentication", "security"]


def test_recommendation_order_is_deterministic() -> None:
    model = _model("deployment", possible=("database", "storage"))

    first = assess(model, max_recommendations=10)
    second = assess(model, max_recommendations=10)

    assert first.recommendations == second.recommendations
    enhancement_slots = [rec.slot for rec in first.recommendations if rec.kind == "enhancement"]
    assert enhancement_slots == ["database", "storage", "monitoring"]


def test_permitted_slots_only_recommended_when_unconfigured() -> None:
    result = assess(_model("deployment", "database", possible=("database",)), max_recommendations=10)

    assert "database" not in [rec.slot for rec in result.recommendations]


def test_zero_limit_returns_no_recommendations() -> None:
    assert assess(CapabilityModel(), max_recommendations=0).recommendations == []


def test_negative_limit_is_rejected() -> None:
    with pytest.raises(ValueError):
        assess(CapabilityModel(), max_recommendations=-1)


def test_infer_service_type_prefers_data_service() -> None:
    assert infer_service_type(_model("database", "framework", "authentication")) == "data-service"
    assert infer_service_type(_model("authentication")) == "auth-service"

    content = _model("storage")
    content.storage.details["providers"] = ["kv", "r2"]
    assert infer_service_type(content) == "content-service"
