"""Generator catalog, plugin discovery and dependency ordering."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, Iterator, List, Sequence, Set

from ..logging import get_logger
from ..models import GENERATOR_CATEGORIES
from .automation import (
    CiWorkflowGenerator,
    DeployWorkflowGenerator,
    DockerComposeGenerator,
    GitignoreGenerator,
)
from .base import Generator
from .core import (
    DomainConfigGenerator,
    EnvExampleGenerator,
    PackageJsonGenerator,
    WranglerConfigGenerator,
)
from .documentation import (
    ApiDocsGenerator,
    ConfigurationDocsGenerator,
    DeploymentDocsGenerator,
    ReadmeGenerator,
)
from .environment import (
    DeployScriptGenerator,
    EnvironmentFilesGenerator,
    HealthCheckScriptGenerator,
    SetupScriptGenerator,
)
from .service import (
    ConfigSchemaGenerator,
    MiddlewareGenerator,
    RequestHandlersGenerator,
    RuntimeEntryGenerator,
    UtilitiesGenerator,
)
from .testing import (
    EslintConfigGenerator,
    IntegrationTestGenerator,
    JestConfigGenerator,
    UnitTestGenerator,
)

_ENTRY_POINT_GROUP = "svcgen.generators"

_LOGGER = get_logger("generators")

_BUILTIN_FACTORIES: Dict[str, Callable[[], Generator]] = {
    "package-json": PackageJsonGenerator,
    "wrangler-config": WranglerConfigGenerator,
    "domain-config": DomainConfigGenerator,
    "env-example": EnvExampleGenerator,
    "utilities": UtilitiesGenerator,
    "request-handlers": RequestHandlersGenerator,
    "middleware": MiddlewareGenerator,
    "runtime-entry": RuntimeEntryGenerator,
    "config-schema": ConfigSchemaGenerator,
    "environment-files": EnvironmentFilesGenerator,
    "deploy-script": DeployScriptGenerator,
    "setup-script": SetupScriptGenerator,
    "health-check-script": HealthCheckScriptGenerator,
    "unit-tests": UnitTestGenerator,
    "integration-tests": IntegrationTestGenerator,
    "jest-config": JestConfigGenerator,
    "eslint-config": EslintConfigGenerator,
    "readme": ReadmeGenerator,
    "api-docs": ApiDocsGenerator,
    "deployment-docs": DeploymentDocsGenerator,
    "configuration-docs": ConfigurationDocsGenerator,
    "ci-workflow": CiWorkflowGenerator,
    "deploy-workflow": DeployWorkflowGenerator,
    "gitignore": GitignoreGenerator,
    "docker-compose": DockerComposeGenerator,
}


class GeneratorRegistry:
    """Named generators, resolved into a dependency-respecting run order."""

    def __init__(self, generators: Iterable[Generator]) -> None:
        self._generators: Dict[str, Generator] = {}
        for generator in generators:
            self.register(generator)

    def register(self, generator: Generator) -> None:
        if not isinstance(generator, Generator):
            raise TypeError(f"Expected a Generator instance, got {type(generator).__name__}")
        name = generator.name
        if name in self._generators:
            raise ValueError(f"Generator '{name}' is already registered")
        if generator.category not in GENERATOR_CATEGORIES:
            raise ValueError(f"Generator '{name}' has unknown category '{generator.category}'")
        self._generators[name] = generator

    def __contains__(self, name: object) -> bool:
        return name in self._generators

    def __len__(self) -> int:
        return len(self._generators)

    def get(self, name: str) -> Generator:
        return self._generators[name]

    def names(self) -> List[str]:
        return list(self._generators)

    def categories(self) -> Set[str]:
        return {generator.category for generator in self._generators.values()}

    def ordered(self) -> List[Generator]:
        """Return generators so that each runs after everything it depends on.

        Registration order breaks ties, so the result is stable.
        """
        for generator in self._generators.values():
            unknown = [dep for dep in generator.depends_on if dep not in self._generators]
            if unknown:
                raise ValueError(
                    f"Generator '{generator.name}' depends on unknown generator(s): {', '.join(unknown)}"
                )

        ordered: List[Generator] = []
        placed: Set[str] = set()
        remaining = list(self._generators.values())
        while remaining:
            progressed = False
            for generator in list(remaining):
                if all(dep in placed for dep in generator.depends_on):
                    ordered.append(generator)
                    placed.add(generator.name)
                    remaining.remove(generator)
                    progressed = True
                    break
            if not progressed:
                cycle = ", ".join(sorted(generator.name for generator in remaining))
                raise ValueError(f"Generator dependency cycle among: {cycle}")
        return ordered


def discover_generators(enabled: Sequence[str] | None = None) -> GeneratorRegistry:
    """Return a registry of built-in and plugin generators.

    Plugins are loaded from the ``svcgen.generators`` entry-point group and
    are keyed by their descriptor name, so a plugin reusing a built-in name is
    skipped. ``enabled`` restricts the result to the named generators.
    """

    wanted: Set[str] | None = None if enabled is None else {name.lower() for name in enabled}
    selected: Dict[str, Generator] = {}
    for generator in _candidates():
        key = generator.name.lower()
        if key in selected:
            _LOGGER.warning("Ignoring duplicate generator '%s'", generator.name)
            continue
        if wanted is None or key in wanted:
            selected[key] = generator

    if wanted is not None:
        unknown = wanted.difference(selected)
        if unknown:
            raise ValueError(f"Unknown generators requested: {', '.join(sorted(unknown))}")

    return GeneratorRegistry(selected.values())


def _candidates() -> Iterator[Generator]:
    for factory in _BUILTIN_FACTORIES.values():
        yield factory()
    for entry in metadata.entry_points().select(group=_ENTRY_POINT_GROUP):
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load generator entry point '{entry.name}': {exc}") from exc
        yield _as_generator(entry.name, loaded)


def _as_generator(source: str, obj: object) -> Generator:
    if isinstance(obj, type) and issubclass(obj, Generator):
        return obj()
    if isinstance(obj, Generator):
        return obj
    instance = obj() if callable(obj) else None
    if not isinstance(instance, Generator):
        raise TypeError(f"Entry point '{source}' must provide a Generator subclass, instance or factory")
    return instance


__all__ = ["GeneratorRegistry", "discover_generators"]
