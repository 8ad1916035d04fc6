"""Tier 3: directory skeleton, ordered generator runs and the service manifest."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from . import __version__
from .derivation import DERIVED_FIELD_IDS
from .generators import (
    FileWriter,
    GenerationContext,
    GenerationError,
    GeneratorRegistry,
    TemplateRenderer,
    discover_generators,
)
from .logging import get_logger
from .manifest import MANIFEST_FILENAME, ServiceManifest, build_manifest, write_manifest
from .models import CoreInputs, DerivedValue, UserModification

SKELETON_DIRECTORIES = (
    "src",
    "src/config",
    "config",
    "scripts",
    "test/unit",
    "test/integration",
    "docs",
    ".github/workflows",
)


@dataclass
class GenerationResult:
    """Outcome of a successful generation run."""

    manifest: ServiceManifest
    manifest_path: Path
    written: List[str]
    skipped: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "manifest_path": str(self.manifest_path),
            "written": list(self.written),
            "skipped": list(self.skipped),
            "checksum": self.manifest.checksum,
            "files": {"total": self.manifest.total_files, "by_category": self.manifest.files},
        }


def _utc_now() -> datetime:
    return datetime.now(UTC)


class GenerationCoordinator:
    """Runs every registered generator into a target directory.

    Generation is not transactional: when a generator fails, files written by
    earlier generators stay on disk and the manifest is not written.
    """

    def __init__(
        self,
        registry: GeneratorRegistry | None = None,
        *,
        templates_dir: Path | None = None,
        clock: Callable[[], datetime] | None = None,
        tool_version: str = __version__,
    ) -> None:
        self.registry = registry or discover_generators()
        self.templates_dir = templates_dir
        self.clock = clock or _utc_now
        self.tool_version = tool_version
        self.logger = get_logger("coordinator")

    def generate(
        self,
        core_inputs: CoreInputs,
        derived_values: Mapping[str, DerivedValue],
        target_root: Path,
        *,
        overwrite: bool = False,
        user_modifications: Optional[Sequence[UserModification]] = None,
    ) -> GenerationResult:
        missing = [name for name in DERIVED_FIELD_IDS if name not in derived_values]
        if missing:
            raise ValueError(f"Missing derived values: {', '.join(missing)}")

        root = Path(target_root).expanduser().resolve()
        self.logger.info("Generating %s into %s", core_inputs.service_name, root)

        writer = FileWriter(root, overwrite=overwrite)
        for directory in SKELETON_DIRECTORIES:
            writer.ensure_dir(directory)

        context = GenerationContext(
            core_inputs=core_inputs,
            derived_values=derived_values,
            target_path=root,
            writer=writer,
            renderer=TemplateRenderer(self.templates_dir),
        )

        files_by_category: Dict[str, List[str]] = {}
        for generator in self.registry.ordered():
            self.logger.debug("Running generator %s", generator.name)
            try:
                paths = generator.generate(context)
            except Exception as exc:
                self.logger.error("Generator %s failed: %s", generator.name, exc)
                raise GenerationError(generator.name, str(exc)) from exc
            bucket = files_by_category.setdefault(generator.category, [])
            for path in paths:
                bucket.append(self._relative(root, path))

        skipped = [self._relative(root, path) for path in writer.skipped]
        manifest = build_manifest(
            core_inputs,
            derived_values,
            files_by_category,
            generated_at=self.clock().isoformat(),
            tool_version=self.tool_version,
            user_modifications=user_modifications or (),
            skipped=skipped,
        )
        manifest_path = write_manifest(manifest, root)
        self.logger.info(
            "Generated %d files (%d skipped); manifest at %s",
            manifest.total_files,
            len(skipped),
            manifest_path,
        )
        return GenerationResult(
            manifest=manifest,
            manifest_path=manifest_path,
            written=sorted(self._relative(root, path) for path in writer.written),
            skipped=sorted(skipped),
        )

    @staticmethod
    def _relative(root: Path, path: Path) -> str:
        resolved = Path(path).resolve()
        try:
            relative = resolved.relative_to(root).as_posix()
        except ValueError as exc:
            raise GenerationError("coordinator", f"{path} is outside {root}") from exc
        if relative == MANIFEST_FILENAME:
            raise GenerationError("coordinator", f"{MANIFEST_FILENAME} is reserved for the manifest")
        return relative


__all__ = ["GenerationCoordinator", "GenerationResult", "SKELETON_DIRECTORIES"]
