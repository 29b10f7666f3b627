"""
Apply service: routes a parsed artifact to the file tree or the home page.

Routing by repo-relative path (with SANDBOX_DIR = "app"):
  app/<segment>/page.tsx   → written as-is, reported with its route path
  app/components/**/*.tsx  → inlined into the home page
  anything else under app/ → written as-is

Parse and path errors are raised before anything is written.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from engine.codegen.artifact_parser import require_single_file_block
from engine.codegen.host_patcher import HostPagePatcher
from engine.codegen.materializer import create_or_update_file, resolve_inside_root, to_repo_relative
from engine.codegen.types import ApplyResult

logger = logging.getLogger(__name__)


class ApplyService:
    """
    Applies generated artifacts to one project tree.

    Holds the project's single HostPagePatcher, so every embed through
    this service is serialized.
    """

    def __init__(self, project_root: Path, sandbox_dir: str = "app", host_page: str = "app/page.tsx") -> None:
        self.project_root = project_root.resolve()
        self.sandbox_dir = sandbox_dir.strip("/")
        self.sandbox_root = self.project_root / self.sandbox_dir
        self.patcher = HostPagePatcher(self.project_root, host_page)

        prefix = re.escape(self.sandbox_dir)
        self._page_re = re.compile(rf"^{prefix}/(.*)/page\.(t|j)sx?$")
        self._component_re = re.compile(rf"^{prefix}/components/.+\.(t|j)sx?$")

    def apply(self, content: str) -> ApplyResult:
        """
        Parse model output and apply its artifact.

        Raises:
            ArtifactParseError: No header or no fenced block
            PathOutsideSandbox: Target escapes the sandbox root
            WriteFailed: The filesystem refused the write
        """
        artifact = require_single_file_block(content)
        target = resolve_inside_root(self.project_root, self.sandbox_root, artifact.file_path)
        rel_path = to_repo_relative(self.project_root, target)
        result = ApplyResult(file_path=rel_path)

        page = self._page_re.match(rel_path)
        if page:
            create_or_update_file(target, artifact.code)
            result.route_path = route_path_for(page.group(1))
            logger.info("apply: wrote page %s (route %s)", rel_path, result.route_path)
            return result

        if self._component_re.match(rel_path):
            embed = self.patcher.embed(rel_path, artifact.code)
            result.embedded = embed.embedded
            result.import_name = embed.import_name
            return result

        create_or_update_file(target, artifact.code)
        logger.info("apply: wrote %s", rel_path)
        return result


def route_path_for(segment: str) -> str:
    """`blog/index` -> `/blog/`, `about` -> `/about`."""
    return "/" + re.sub(r"index$", "", segment.replace("\\", "/"))
