"""Capability discovery over existing project directories."""

from .base import Analysis, Contribution
from .credentials import (
    CredentialAnalysis,
    FilePermissionSource,
    PermissionSource,
    StaticPermissionSource,
)
from .dependencies import DependencyAnalysis
from .deployment import DeploymentAnalysis
from .engine import ANALYSIS_PRECEDENCE, CapabilityDiscovery, default_analyses, discover, merge_contribution
from .layout import LayoutAnalysis

__all__ = [
    "ANALYSIS_PRECEDENCE",
    "Analysis",
    "CapabilityDiscovery",
    "Contribution",
    "CredentialAnalysis",
    "DependencyAnalysis",
    "DeploymentAnalysis",
    "FilePermissionSource",
    "LayoutAnalysis",
    "PermissionSource",
    "StaticPermissionSource",
    "default_analyses",
    "discover",
    "merge_contribution",
]
