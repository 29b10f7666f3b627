"""
Forge Kernel: Exceptions

Every pipeline failure the boundary layer has to classify. `kind` is the
classification the HTTP layer maps to a status code.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for artifact pipeline failures."""

    kind = "internal"

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ArtifactParseError(PipelineError):
    """Model output has no `File:` header or no fenced code block."""

    kind = "bad_input"


class PathOutsideSandbox(PipelineError):
    """Target path resolves outside the writable sandbox root."""

    kind = "bad_input"


class WriteFailed(PipelineError):
    """Underlying storage refused the write."""

    kind = "write_failed"
