"""Artifact routes: apply generated code to the project, inspect and split text for display."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from backend.config import settings
from backend.models.codegen import (
    ApplyRequest,
    ApplyResponse,
    ArtifactModel,
    ArtifactRequest,
    ArtifactResponse,
    BlockModel,
    BlocksRequest,
    BlocksResponse,
    ErrorResponse,
)
from backend.services.apply_service import ApplyService
from engine.codegen.artifact_parser import has_single_file_block, parse_single_file_block
from engine.codegen.errors import PipelineError
from engine.codegen.markdown_blocks import split_blocks

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["apply"])

_STATUS_BY_KIND = {
    "bad_input": status.HTTP_400_BAD_REQUEST,
    "write_failed": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_apply_service: ApplyService | None = None


def get_apply_service() -> ApplyService:
    """Process-wide ApplyService; it owns the host page patcher and its lock."""
    global _apply_service
    if _apply_service is None:
        _apply_service = ApplyService(settings.project_root, settings.SANDBOX_DIR, settings.HOST_PAGE)
    return _apply_service


def error_response(error: str, kind: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, kind=kind, details=details)
    return JSONResponse(status_code=_STATUS_BY_KIND[kind], content=body.model_dump(exclude_none=True))


@router.post("/apply", response_model=ApplyResponse, response_model_exclude_none=True)
async def apply_artifact(
    req: ApplyRequest,
    service: ApplyService = Depends(get_apply_service),
):
    """
    Apply a single-file artifact from an assistant message.

    Returns filePath plus routePath for pages, or embedded/importName for
    components inlined into the home page.
    """
    try:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, service.apply, req.content)
    except PipelineError as e:
        logger.warning("apply: %s (%s)", e.message, e.kind)
        return error_response(e.message, e.kind, e.details)
    except Exception as e:
        logger.exception("apply: unexpected failure")
        return error_response("Internal server error", "internal", str(e))

    return ApplyResponse(**result.to_dict())


@router.post("/blocks", status_code=200)
async def split_markdown_blocks(req: BlocksRequest) -> BlocksResponse:
    """Segment assistant text into ordered prose and code blocks."""
    return BlocksResponse(blocks=[BlockModel(**b.to_dict()) for b in split_blocks(req.content)])


@router.post("/artifact", status_code=200)
async def inspect_artifact(req: ArtifactRequest) -> ArtifactResponse:
    """Report whether Apply should be offered for a message, and the artifact it would apply."""
    artifact = parse_single_file_block(req.content)
    return ArtifactResponse(
        applicable=has_single_file_block(req.content, settings.SANDBOX_DIR),
        artifact=ArtifactModel(**artifact.to_dict()) if artifact else None,
    )
