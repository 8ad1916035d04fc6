"""CI pipelines and repository housekeeping files."""

from __future__ import annotations

from ..models import GeneratorDescriptor
from .base import TemplateGenerator


class CiWorkflowGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="ci-workflow", category="automation", depends_on=("package-json",))
    outputs = ((".github/workflows/ci.yml", "automation/ci.yml.j2"),)


class DeployWorkflowGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(
        name="deploy-workflow", category="automation", depends_on=("ci-workflow", "deploy-script")
    )
    outputs = ((".github/workflows/deploy.yml", "automation/deploy.yml.j2"),)


class GitignoreGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="gitignore", category="automation")
    outputs = ((".gitignore", "automation/gitignore.j2"),)


class DockerComposeGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="docker-compose", category="automation")
    outputs = (("docker-compose.yml", "automation/docker-compose.yml.j2"),)


__all__ = [
    "CiWorkflowGenerator",
    "DeployWorkflowGenerator",
    "DockerComposeGenerator",
    "GitignoreGenerator",
]
