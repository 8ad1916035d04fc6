"""Directory layout inspection."""

from __future__ import annotations

from ..scanner import ProjectLayout
from .base import Analysis, Contribution

_KEY_FILES = ("wrangler.toml", "package.json", "tsconfig.json", "jest.config.js")


class LayoutAnalysis(Analysis):
    """Records structural evidence: sources, pipelines, health checks, migrations."""

    name = "layout"

    def analyze(self, layout: ProjectLayout) -> Contribution:
        contribution = Contribution()

        framework = contribution.slot("framework")
        framework.details["source_files"] = len(layout.source_files())
        framework.details["key_files"] = [name for name in _KEY_FILES if layout.has_file(name)]

        workflows = [
            path.rsplit("/", 1)[-1]
            for path in layout.files_under(".github/workflows")
            if path.endswith((".yml", ".yaml"))
        ]
        if workflows:
            contribution.slot("deployment").details["pipelines"] = workflows

        health_scripts = [path for path in layout.files_under("scripts") if "health" in path]
        if health_scripts:
            contribution.slot("monitoring").details["health_checks"] = health_scripts

        migrations = [path for path in layout.files_under("migrations") if path.endswith(".sql")]
        if migrations:
            contribution.slot("database").details["migrations"] = len(migrations)

        return contribution
