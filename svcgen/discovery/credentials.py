"""Credential permission inspection.

Permission lookup is a collaborator call. It runs under a timeout and any
failure degrades to "unavailable" rather than failing discovery.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from ..capabilities import PERMISSION_RULES, permission_slots
from ..logging import get_logger
from ..scanner import ProjectLayout
from .base import Analysis, Contribution

DEFAULT_PERMISSIONS_FILE = ".svcgen/token-permissions.json"


class PermissionSource(Protocol):
    """Returns the permission strings granted to the project's API token."""

    def permissions(self, project_root: Path) -> Optional[Sequence[str]]:
        ...


class FilePermissionSource:
    """Reads a cached permission list from a JSON file inside the project.

    The file holds either a list of strings or ``{"permissions": [...]}``.
    """

    def __init__(self, relative_path: str = DEFAULT_PERMISSIONS_FILE) -> None:
        self.relative_path = relative_path

    def permissions(self, project_root: Path) -> Optional[Sequence[str]]:
        path = Path(project_root) / self.relative_path
        if not path.is_file():
            return None
        data = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            data = data.get("permissions")
        if not isinstance(data, list):
            raise ValueError(f"{self.relative_path} must list permission strings")
        return [str(item) for item in data]


class StaticPermissionSource:
    """Fixed permission list, for callers that already verified the token."""

    def __init__(self, permissions: Sequence[str]) -> None:
        self._permissions = list(permissions)

    def permissions(self, project_root: Path) -> Optional[Sequence[str]]:
        return list(self._permissions)


class CredentialAnalysis(Analysis):
    """Marks slots the credential could provision as ``possible``."""

    name = "credentials"

    def __init__(self, source: PermissionSource | None = None, *, timeout: float = 5.0) -> None:
        self.source = source or FilePermissionSource()
        self.timeout = timeout
        self.logger = get_logger("discovery.credentials")

    def analyze(self, layout: ProjectLayout) -> Contribution:
        contribution = Contribution()
        permissions = self._lookup(layout.root)
        if permissions is None:
            contribution.hints["credentials"] = "unavailable"
            return contribution

        contribution.hints["credentials"] = "available"
        granted = {slot for permission in permissions for slot in permission_slots(permission)}
        for slot_name in dict.fromkeys(slot for _, slot in PERMISSION_RULES):
            slot = contribution.slot(slot_name)
            slot.possible = slot_name in granted
            if slot.possible:
                slot.sources.append(self.name)
        return contribution

    def _lookup(self, root: Path) -> Optional[List[str]]:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="svcgen-credentials")
        future = executor.submit(self.source.permissions, root)
        try:
            result = future.result(timeout=self.timeout)
        except FutureTimeout:
            self.logger.debug("Permission lookup timed out after %.1fs", self.timeout)
            return None
        except Exception as exc:
            self.logger.debug("Permission lookup failed: %s", exc)
            return None
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        if result is None:
            return None
        return [str(item) for item in result]
