"""Runtime skeleton: entry point, handlers, middleware, utilities, config schema."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ..models import GeneratorDescriptor
from .base import GenerationContext, Generator, TemplateGenerator


class RuntimeEntryGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(
        name="runtime-entry",
        category="service",
        depends_on=("domain-config", "request-handlers", "middleware"),
    )
    outputs = (("src/index.js", "service/index.js.j2"),)


class RequestHandlersGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="request-handlers", category="service", depends_on=("utilities",))
    outputs = (("src/handlers.js", "service/handlers.js.j2"),)


class MiddlewareGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="middleware", category="service", depends_on=("utilities",))
    outputs = (("src/middleware.js", "service/middleware.js.j2"),)


class UtilitiesGenerator(TemplateGenerator):
    descriptor = GeneratorDescriptor(name="utilities", category="service")
    outputs = (("src/utils.js", "service/utils.js.j2"),)


class ConfigSchemaGenerator(Generator):
    """Writes a JSON schema describing the runtime variables."""

    descriptor = GeneratorDescriptor(name="config-schema", category="service")

    def build(self, context: GenerationContext) -> Dict[str, Any]:
        properties: Dict[str, Any] = {
            "SERVICE_NAME": {"type": "string", "const": context.core_inputs.service_name},
            "SERVICE_TYPE": {"type": "string", "const": context.core_inputs.service_type},
            "ENVIRONMENT": {"type": "string", "enum": ["development", "staging", "production"]},
            "DOMAIN": {"type": "string"},
            "HEALTH_CHECK_PATH": {"type": "string", "pattern": "^/"},
            "API_BASE_PATH": {"type": "string", "pattern": "^/"},
        }
        if context.features.get("authentication"):
            properties["JWT_SECRET_BINDING"] = {"type": "string"}
        return {
            "$schema": "https://json-schema.org/draft/2020-12/schema",
            "title": f"{context.values['display_name']} configuration",
            "type": "object",
            "required": sorted(properties),
            "properties": properties,
            "features": {name: enabled for name, enabled in sorted(context.features.items())},
        }

    def generate(self, context: GenerationContext) -> List[Path]:
        content = json.dumps(self.build(context), indent=2, sort_keys=True) + "\n"
        return [context.writer.write("config/schema.json", content)]


__all__ = [
    "ConfigSchemaGenerator",
    "MiddlewareGenerator",
    "RequestHandlersGenerator",
    "RuntimeEntryGenerator",
    "UtilitiesGenerator",
]
