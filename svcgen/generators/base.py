"""Generator contract, generation context and filesystem helpers."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..capabilities import FRAMEWORK_PACKAGE
from ..logging import get_logger
from ..models import CoreInputs, DerivedValue, GeneratorDescriptor, derived_values_as_plain

_DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


class GenerationError(RuntimeError):
    """Raised when a generator fails; names the generator and the cause."""

    def __init__(self, generator: str, message: str) -> None:
        self.generator = generator
        self.message = message
        super().__init__(f"Generator '{generator}' failed: {message}")


class FileWriter:
    """Writes files below a root directory, refusing to clobber unless allowed."""

    def __init__(self, root: Path, *, overwrite: bool = False) -> None:
        self.root = Path(root)
        self.overwrite = overwrite
        self.written: List[Path] = []
        self.skipped: List[Path] = []
        self._logger = get_logger("writer")

    def resolve(self, relative: str) -> Path:
        path = (self.root / relative).resolve()
        root = self.root.resolve()
        if path != root and root not in path.parents:
            raise ValueError(f"Refusing to write outside the project root: {relative}")
        return path

    def ensure_dir(self, relative: str) -> Path:
        path = self.resolve(relative)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def exists(self, relative: str) -> bool:
        return self.resolve(relative).exists()

    def read(self, relative: str) -> str:
        return self.resolve(relative).read_text(encoding="utf-8")

    def list_dir(self, relative: str = ".") -> List[str]:
        path = self.resolve(relative)
        if not path.is_dir():
            return []
        return sorted(child.name for child in path.iterdir())

    def write(self, relative: str, content: str, *, executable: bool = False) -> Path:
        """Write ``content`` and return the path, whether written or skipped."""
        path = self.resolve(relative)
        if path.exists() and not self.overwrite:
            self._logger.info("Skipping existing file %s", relative)
            self.skipped.append(path)
            return path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if executable:
            mode = path.stat().st_mode
            os.chmod(path, mode | 0o111)
        self.written.append(path)
        return path


class TemplateRenderer:
    """Renders generator templates with Jinja2.

    A user templates directory, when given, shadows the packaged templates.
    """

    def __init__(self, templates_dir: Optional[Path] = None) -> None:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(_DEFAULT_TEMPLATES_DIR))
        self._env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, variables: Mapping[str, Any]) -> str:
        template = self._env.get_template(template_name)
        return template.render(**variables)


@dataclass
class GenerationContext:
    """Everything a generator may read while producing its files."""

    core_inputs: CoreInputs
    derived_values: Mapping[str, DerivedValue]
    target_path: Path
    writer: FileWriter
    renderer: TemplateRenderer
    _variables: Optional[Dict[str, Any]] = field(default=None, repr=False)

    @property
    def values(self) -> Dict[str, Any]:
        return derived_values_as_plain(self.derived_values)

    @property
    def features(self) -> Dict[str, bool]:
        return dict(self.values.get("features") or {})

    def template_variables(self) -> Dict[str, Any]:
        if self._variables is None:
            core = self.core_inputs
            values = self.values
            self._variables = {
                "core": core.to_dict(),
                "values": values,
                "features": self.features,
                "enabled_features": sorted(name for name, on in self.features.items() if on),
                "service_name": core.service_name,
                "service_type": core.service_type,
                "domain_name": core.domain_name,
                "environment": core.environment,
                "framework_package": FRAMEWORK_PACKAGE,
            }
        return self._variables


class Generator(ABC):
    """Contract for units that turn inputs into project files."""

    descriptor: ClassVar[GeneratorDescriptor]

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def category(self) -> str:
        return self.descriptor.category

    @property
    def depends_on(self) -> Tuple[str, ...]:
        return self.descriptor.depends_on

    @abstractmethod
    def generate(self, context: GenerationContext) -> List[Path]:
        """Write this generator's files and return their paths."""


class TemplateGenerator(Generator):
    """Generator backed by one template per output file."""

    outputs: ClassVar[Tuple[Tuple[str, str], ...]] = ()
    executable: ClassVar[bool] = False

    def extra_variables(self, context: GenerationContext) -> Dict[str, Any]:
        return {}

    def generate(self, context: GenerationContext) -> List[Path]:
        variables = dict(context.template_variables())
        variables.update(self.extra_variables(context))
        paths: List[Path] = []
        for relative, template_name in self.outputs:
            content = context.renderer.render(template_name, variables)
            paths.append(context.writer.write(relative, content, executable=self.executable))
        return paths


__all__ = [
    "FileWriter",
    "GenerationContext",
    "GenerationError",
    "Generator",
    "TemplateGenerator",
    "TemplateRenderer",
]
