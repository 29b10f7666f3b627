"""
Forge Kernel: File Materializer

Writes artifacts into the project tree. Paths are checked against the
sandbox root before anything touches the disk.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from engine.codegen.errors import PathOutsideSandbox, WriteFailed

logger = logging.getLogger(__name__)


def resolve_inside_root(project_root: Path, sandbox_root: Path, relative_path: str) -> Path:
    """
    Resolve a repo-relative path and make sure it stays under sandbox_root.

    One leading slash is tolerated (`/app/x.tsx` means `app/x.tsx`). The
    sandbox root itself is not a valid target, only paths strictly inside it.

    Raises:
        PathOutsideSandbox: If the resolved path escapes sandbox_root
    """
    rel = relative_path[1:] if relative_path.startswith("/") else relative_path
    target = Path(os.path.normpath(project_root.resolve() / rel))
    root = Path(os.path.normpath(sandbox_root.resolve()))

    if target == root or root not in target.parents:
        raise PathOutsideSandbox(f"File path must be under {root.name}/")
    return target


def to_repo_relative(project_root: Path, target: Path) -> str:
    """Forward-slash path of target relative to project_root."""
    return Path(os.path.relpath(target, project_root.resolve())).as_posix()


def create_or_update_file(path: Path, contents: str) -> None:
    """
    Create parent directories as needed and overwrite path with contents.

    Raises:
        WriteFailed: On any OSError from the filesystem. There is no rollback.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")
    except OSError as e:
        logger.warning("materializer: write failed for %s: %s", path, e)
        raise WriteFailed("Write failed (read-only filesystem?)", details=str(e)) from e
    logger.info("materializer: wrote %d chars to %s", len(contents), path)
