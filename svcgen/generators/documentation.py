"""README and reference documentation."""

from __future__ import annotations

from typing import Any, Dict

from ..models import GeneratorDescriptor
from .base import GenerationContext, TemplateGenerator


class ReadmeGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="readme", category="documentation", depends_on=("package-json",))
    outputs = (("README.md", "documentation/README.md.j2"),)


class ApiDocsGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="api-docs", category="documentation", depends_on=("request-handlers",))
    outputs = (("docs/API.md", "documentation/API.md.j2"),)


class DeploymentDocsGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(
        name="deployment-docs", category="documentation", depends_on=("deploy-script",)
    )
    outputs = (("docs/DEPLOYMENT.md", "documentation/DEPLOYMENT.md.j2"),)


class ConfigurationDocsGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(
        name="configuration-docs", category="documentation", depends_on=("wrangler-config",)
    )
    outputs = (("docs/CONFIGURATION.md", "documentation/CONFIGURATION.md.j2"),)

    def extra_variables(self, context: GenerationContext) -> Dict[str, Any]:
        return {"all_features": sorted(context.features.items())}


__all__ = [
    "ApiDocsGenerator",
    "ConfigurationDocsGenerator",
    "DeploymentDocsGenerator",
    "ReadmeGenerator",
]
