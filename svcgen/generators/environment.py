"""Per-environment settings and operational scripts."""

from __future__ import annotations

from pathlib import Path
from typing import List

from ..models import ENVIRONMENTS, GeneratorDescriptor
from .base import GenerationContext, Generator, TemplateGenerator


class EnvironmentFilesGenerator(Generator):
    """One ``config/<environment>.env`` file per deployment environment."""

    descriptor = GeneratorDescriptor(name="environment-files", category="environment")

    def generate(self, context: GenerationContext) -> List[Path]:
        values = context.values
        urls = {
            "production": values["production_url"],
            "staging": values["staging_url"],
            "development": values["development_url"],
        }
        paths: List[Path] = []
        for environment in ENVIRONMENTS:
            variables = dict(context.template_variables())
            variables.update(target_environment=environment, service_url=urls[environment])
            content = context.renderer.render("environment/environment.env.j2", variables)
            paths.append(context.writer.write(f"config/{environment}.env", content))
        return paths


class DeployScriptGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(
        name="deploy-script", category="environment", depends_on=("environment-files",)
    )
    outputs = (("scripts/deploy.sh", "environment/deploy.sh.j2"),)
    executable = True


class SetupScriptGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(
        name="setup-script", category="environment", depends_on=("environment-files",)
    )
    outputs = (("scripts/setup.sh", "environment/setup.sh.j2"),)
    executable = True


class HealthCheckScriptGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="health-check-script", category="environment")
    outputs = (("scripts/health-check.sh", "environment/health-check.sh.j2"),)
    executable = True


__all__ = [
    "DeployScriptGenerator",
    "EnvironmentFilesGenerator",
    "HealthCheckScriptGenerator",
    "SetupScriptGenerator",
]
