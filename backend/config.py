"""
Forge UI configuration: all environment variables in one place.

Read from environment at runtime.
"""

from __future__ import annotations

import os
from pathlib import Path


class Settings:
    """Application settings from environment variables."""

    # Project tree the generator writes into
    PROJECT_ROOT: str = os.environ.get("PROJECT_ROOT", os.getcwd())
    SANDBOX_DIR: str = os.environ.get("SANDBOX_DIR", "app")
    HOST_PAGE: str = os.environ.get("HOST_PAGE", "app/page.tsx")

    # System prompts (<kind>-prompt.xml)
    PROMPT_DIR: str = os.environ.get("PROMPT_DIR", "app/config")

    # Request guards
    MAX_CONTENT_CHARS: int = int(os.environ.get("MAX_CONTENT_CHARS", "200000"))

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    @property
    def project_root(self) -> Path:
        return Path(self.PROJECT_ROOT).resolve()

    @property
    def sandbox_root(self) -> Path:
        return self.project_root / self.SANDBOX_DIR

    @property
    def prompt_dir(self) -> Path:
        return self.project_root / self.PROMPT_DIR


# Singleton instance
settings = Settings()

# Validate settings (skip in test mode)
_testing = os.environ.get("TESTING", "").lower() == "true"

if not _testing:
    if not settings.project_root.is_dir():
        raise RuntimeError(f"PROJECT_ROOT does not exist: {settings.PROJECT_ROOT}")
    if settings.HOST_PAGE.startswith("/") or ".." in Path(settings.HOST_PAGE).parts:
        raise RuntimeError("HOST_PAGE must be a path inside PROJECT_ROOT")
