"""Completeness scoring, maturity buckets and ranked recommendations."""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from .capabilities import FRAMEWORK_PACKAGE, REQUIRED_SLOTS
from .models import CAPABILITY_SLOTS, AssessmentResult, CapabilityModel, Recommendation

# Lower rank sorts first.
KIND_RANK = {"security": 0, "setup": 1, "enhancement": 2}

MATURE_THRESHOLD = 80
DEVELOPING_THRESHOLD = 50


def completeness_score(model: CapabilityModel) -> int:
    configured = sum(1 for slot in REQUIRED_SLOTS if model.slot(slot).configured)
    return round(100 * configured / len(REQUIRED_SLOTS))


def maturity_for(completeness: int) -> str:
    if completeness >= MATURE_THRESHOLD:
        return "mature"
    if completeness >= DEVELOPING_THRESHOLD:
        return "developing"
    return "basic"


def infer_service_type(model: CapabilityModel) -> str:
    if model.slot("database").configured and model.slot("framework").configured:
        return "data-service"
    if model.slot("authentication").configured:
        return "auth-service"
    if model.slot("storage").configured and "r2" in model.slot("storage").details.get("providers", []):
        return "content-service"
    if model.slot("framework").configured:
        return "generic"
    return "unknown"


_Rule = Callable[[CapabilityModel, int], Optional[Recommendation]]


def _unconfigured(slot: str, kind: str, message: str) -> _Rule:
    def _rule(model: CapabilityModel, _: int) -> Optional[Recommendation]:
        if model.slot(slot).configured:
            return None
        return Recommendation(kind=kind, slot=slot, message=message)

    return _rule


def _permitted_but_unused(slot: str, message: str) -> _Rule:
    def _rule(model: CapabilityModel, _: int) -> Optional[Recommendation]:
        state = model.slot(slot)
        if state.configured or not state.possible:
            return None
        return Recommendation(kind="enhancement", slot=slot, message=message)

    return _rule


def _incomplete(model: CapabilityModel, completeness: int) -> Optional[Recommendation]:
    if completeness >= DEVELOPING_THRESHOLD:
        return None
    return Recommendation(
        kind="setup",
        slot=None,
        message="Service appears incomplete. Consider running the full setup process.",
    )


def _framework_current(model: CapabilityModel, _: int) -> Optional[Recommendation]:
    framework = model.slot("framework")
    if not framework.configured:
        return None
    version = framework.details.get("version", "unknown")
    return Recommendation(
        kind="enhancement",
        slot="framework",
        message=f"Keep {FRAMEWORK_PACKAGE} current (declared {version}) to pick up runtime fixes.",
    )


RULES: Tuple[_Rule, ...] = (
    _unconfigured("deployment", "setup", "Add a wrangler.toml deployment descriptor with name, main and compatibility_date."),
    _unconfigured("framework", "setup", f"Add {FRAMEWORK_PACKAGE} to package.json dependencies."),
    _incomplete,
    _unconfigured("security", "security", "Add secret management for sensitive configuration."),
    _unconfigured("authentication", "security", "Protect API routes with token authentication."),
    _permitted_but_unused("database", "The API token can manage D1; add a d1_databases binding if the service stores data."),
    _permitted_but_unused("storage", "The API token can manage KV/R2; add a storage binding for caching or files."),
    _unconfigured("monitoring", "enhancement", "Enable [observability] in wrangler.toml to collect logs and traces."),
    _framework_current,
)


def _sort_key(recommendation: Recommendation) -> Tuple[int, int]:
    slot_rank = (
        CAPABILITY_SLOTS.index(recommendation.slot)
        if recommendation.slot in CAPABILITY_SLOTS
        else len(CAPABILITY_SLOTS)
    )
    return KIND_RANK[recommendation.kind], slot_rank


def recommendations_for(
    model: CapabilityModel, completeness: int, *, limit: int
) -> List[Recommendation]:
    found = [rec for rec in (rule(model, completeness) for rule in RULES) if rec is not None]
    found.sort(key=_sort_key)
    return found[:limit]


def assess(model: CapabilityModel, *, max_recommendations: int = 5) -> AssessmentResult:
    """Score ``model``; optional slots only influence recommendations."""
    if max_recommendations < 0:
        raise ValueError("max_recommendations must not be negative")
    completeness = completeness_score(model)
    missing = [slot for slot in REQUIRED_SLOTS if not model.slot(slot).configured]
    return AssessmentResult(
        completeness=completeness,
        maturity=maturity_for(completeness),
        missing_capabilities=missing,
        recommendations=recommendations_for(model, completeness, limit=max_recommendations),
        inferred_service_type=infer_service_type(model),
    )


__all__ = [
    "KIND_RANK",
    "assess",
    "completeness_score",
    "infer_service_type",
    "maturity_for",
    "recommendations_for",
]
