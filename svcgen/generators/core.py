"""Core project files: dependency manifest, deployment descriptor, domain config."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ..capabilities import (
    FRAMEWORK_PACKAGE,
    FRAMEWORK_VERSION,
    GENERATED_AUTH_LIBRARY,
    GENERATED_AUTH_VERSION,
)
from ..models import GeneratorDescriptor
from .base import GenerationContext, Generator, TemplateGenerator

COMPATIBILITY_DATE = "2024-09-23"

_DEV_DEPENDENCIES: Dict[str, str] = {
    "@eslint/js": "^9.9.0",
    "eslint": "^9.9.0",
    "jest": "^29.7.0",
    "wrangler": "^3.78.0",
}


def _host(url: str) -> str:
    return url.split("://", 1)[-1].rstrip("/")


class PackageJsonGenerator(Generator):
    """Writes package.json from derived values."""

    descriptor = GeneratorDescriptor(name="package-json", category="core")

    def build(self, context: GenerationContext) -> Dict[str, Any]:
        values = context.values
        dependencies = {FRAMEWORK_PACKAGE: FRAMEWORK_VERSION}
        if context.features.get("authentication"):
            dependencies[GENERATED_AUTH_LIBRARY] = GENERATED_AUTH_VERSION
        return {
            "name": values["package_name"],
            "version": values["version"],
            "description": values["description"],
            "author": values["author"],
            "type": "module",
            "main": "src/index.js",
            "homepage": values["documentation_url"],
            "repository": {"type": "git", "url": values["git_repository_url"]},
            "scripts": {
                "dev": "wrangler dev",
                "deploy": "wrangler deploy",
                "deploy:staging": "wrangler deploy --env staging",
                "test": "node --experimental-vm-modules node_modules/jest/bin/jest.js",
                "lint": "eslint .",
                "health-check": "bash scripts/health-check.sh",
            },
            "dependencies": dependencies,
            "devDependencies": dict(_DEV_DEPENDENCIES),
        }

    def generate(self, context: GenerationContext) -> List[Path]:
        content = json.dumps(self.build(context), indent=2) + "\n"
        return [context.writer.write("package.json", content)]


class WranglerConfigGenerator(TemplateGenerator):
    """Writes the deployment descriptor with bindings for enabled features."""

    descriptor = GeneratorDescriptor(name="wrangler-config", category="core", depends_on=("package-json",))
    outputs = (("wrangler.toml", "core/wrangler.toml.j2"),)

    def extra_variables(self, context: GenerationContext) -> Dict[str, Any]:
        values = context.values
        return {
            "compatibility_date": COMPATIBILITY_DATE,
            "production_host": _host(values["production_url"]),
            "staging_host": _host(values["staging_url"]),
        }


class DomainConfigGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="domain-config", category="core")
    outputs = (("src/config/domains.js", "core/domains.js.j2"),)


class EnvExampleGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="env-example", category="core")
    outputs = ((".env.example", "core/env.example.j2"),)


__all__ = [
    "COMPATIBILITY_DATE",
    "DomainConfigGenerator",
    "EnvExampleGenerator",
    "PackageJsonGenerator",
    "WranglerConfigGenerator",
]
