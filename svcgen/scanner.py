"""Project directory walking for discovery and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence, Set

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".wrangler",
    "node_modules",
    "coverage",
    "dist",
    "__pycache__",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

SOURCE_SUFFIXES = (".js", ".mjs", ".ts")


@dataclass(frozen=True)
class IgnoreRule:
    """A single pattern from the project's .gitignore."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored or "/" in self.pattern:
            return fnmatchcase(rel_path, self.pattern)
        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def parse_ignore_rules(path: Path) -> List[IgnoreRule]:
    if not path.is_file():
        return []
    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        directory_only = line.endswith("/")
        line = line.rstrip("/")
        anchored = line.startswith("/")
        line = line.lstrip("/")
        if line:
            rules.append(IgnoreRule(line, directory_only, anchored, negate))
    return rules


def _ignored(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


@dataclass
class ProjectLayout:
    """Relative posix paths of the files and directories under a project root."""

    root: Path
    files: List[str] = field(default_factory=list)
    directories: List[str] = field(default_factory=list)

    def has_file(self, relative: str) -> bool:
        return relative in self._file_set

    def has_directory(self, relative: str) -> bool:
        return relative in self._dir_set

    def files_under(self, prefix: str) -> List[str]:
        prefix = prefix.rstrip("/") + "/"
        return [path for path in self.files if path.startswith(prefix)]

    def source_files(self) -> List[str]:
        return [path for path in self.files_under("src") if path.endswith(SOURCE_SUFFIXES)]

    @property
    def _file_set(self) -> Set[str]:
        return set(self.files)

    @property
    def _dir_set(self) -> Set[str]:
        return set(self.directories)


class ProjectScanner:
    """Walks a project directory, honouring .gitignore and skipping build output."""

    def scan(self, root: Path | str) -> ProjectLayout:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        rules = parse_ignore_rules(root_path / ".gitignore")
        layout = ProjectLayout(root=root_path)
        for rel_path, is_dir in self._walk(root_path, rules):
            (layout.directories if is_dir else layout.files).append(rel_path)
        layout.files.sort()
        layout.directories.sort()
        return layout

    def _walk(self, root: Path, rules: Sequence[IgnoreRule]) -> Iterator[tuple[str, bool]]:
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            rel_dir = current.relative_to(root).as_posix() if current != root else ""

            kept: List[str] = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _ignored(rel_path, True, rules):
                    continue
                kept.append(name)
                yield rel_path, True
            dirnames[:] = kept

            for filename in sorted(filenames):
                if filename in _EXCLUDED_FILES:
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _ignored(rel_path, False, rules):
                    continue
                yield rel_path, False


__all__ = ["IgnoreRule", "ProjectLayout", "ProjectScanner", "parse_ignore_rules"]
