"""Test scaffolding and lint configuration."""

from __future__ import annotations

from ..models import GeneratorDescriptor
from .base import TemplateGenerator


class UnitTestGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="unit-tests", category="testing", depends_on=("runtime-entry",))
    outputs = (("test/unit/service.test.js", "testing/service.test.js.j2"),)


class IntegrationTestGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(
        name="integration-tests", category="testing", depends_on=("runtime-entry",)
    )
    outputs = (
        ("test/integration/service.integration.test.js", "testing/service.integration.test.js.j2"),
    )


class JestConfigGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="jest-config", category="testing")
    outputs = (("jest.config.js", "testing/jest.config.js.j2"),)


class EslintConfigGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="eslint-config", category="testing")
    outputs = (("eslint.config.js", "testing/eslint.config.js.j2"),)


__all__ = [
    "EslintConfigGenerator",
    "IntegrationTestGenerator",
    "JestConfigGenerator",
    "UnitTestGenerator",
]
