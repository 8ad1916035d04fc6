"""Artifact generators and the registry that orders them."""

from .base import (
    FileWriter,
    GenerationContext,
    GenerationError,
    Generator,
    TemplateGenerator,
    TemplateRenderer,
)
from .registry import GeneratorRegistry, discover_generators

__all__ = [
    "FileWriter",
    "GenerationContext",
    "GenerationError",
    "Generator",
    "GeneratorRegistry",
    "TemplateGenerator",
    "TemplateRenderer",
    "discover_generators",
]
