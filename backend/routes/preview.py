"""
Preview routes: publish snippets to the preview channel and serve
sandboxed preview documents.

The documents run generated code in the browser only; they are meant to
be loaded into an iframe and never touch the file system.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, status
from fastapi.responses import HTMLResponse, Response

from backend.models.codegen import PreviewPublishRequest, PreviewPublishResponse, PreviewRenderRequest
from backend.routes.apply import error_response
from backend.services.preview_channel import preview_channel
from engine.codegen.artifact_parser import extract_first_jsx_block
from engine.codegen.sandbox_preview import (
    render_component_preview,
    render_preview_for_text,
    render_snippet_preview,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/preview", tags=["preview"])

# Preview documents execute arbitrary generated code; keep them out of caches
_HEADERS = {
    "Cache-Control": "no-store",
    "X-Content-Type-Options": "nosniff",
}


def _html(document: str) -> Response:
    return HTMLResponse(content=document, headers=_HEADERS)


@router.post("", status_code=status.HTTP_202_ACCEPTED)
async def publish_preview(req: PreviewPublishRequest):
    """
    Publish a snippet to every open preview pane.

    With `content`, the first ```tsx/```jsx fence (else any fence) is
    extracted. A loading-only message (no code) keeps the previous code and
    toggles the thinking state.
    """
    code = req.code
    file_path = req.file_path

    if code is None and req.content is not None:
        extracted = extract_first_jsx_block(req.content)
        if extracted is None:
            return error_response("No code block to preview", "bad_input")
        code, header_path = extracted
        file_path = file_path or header_path

    message = preview_channel.resolve(code, file_path, req.loading)
    if message is None:
        return error_response("Missing code", "bad_input")

    delivered = preview_channel.publish(message)
    logger.info("preview: published %d chars to %d subscribers", len(message.code), delivered)
    return PreviewPublishResponse(published=True, subscribers=delivered)


@router.get("", response_class=HTMLResponse)
async def latest_preview() -> Response:
    """Preview document for the latest published snippet (empty element if none yet)."""
    latest = preview_channel.latest
    if latest is None:
        return _html(render_snippet_preview(""))
    return _html(render_snippet_preview(latest.code, loading=latest.loading))


@router.post("/render", response_class=HTMLResponse)
async def render_preview(req: PreviewRenderRequest) -> Response:
    """
    Render a preview document for arbitrary text without publishing it.

    mode="snippet" wraps the return (...) body, mode="component" treats the
    text as a whole component file, mode="auto" picks component when the
    text has a `File:` header and a fence.
    """
    if req.mode == "snippet":
        document = render_snippet_preview(req.content, loading=req.loading)
    elif req.mode == "component":
        extracted = extract_first_jsx_block(req.content)
        if extracted is None:
            document = render_component_preview(req.content)
        else:
            code, file_path = extracted
            document = render_component_preview(code, file_path)
    else:
        document = render_preview_for_text(req.content, loading=req.loading)
    return _html(document)
