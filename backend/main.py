"""
Forge UI FastAPI application.

Entry point for the API server.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.config import settings
from backend.routes import apply as apply_routes
from backend.routes import preview as preview_routes
from backend.routes import prompts as prompt_routes
from backend.routes import ws as ws_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Logs the project layout the pipeline will write into.
    """
    logger.info(
        "Forge UI started: project_root=%s sandbox=%s host_page=%s",
        settings.project_root,
        settings.SANDBOX_DIR,
        settings.HOST_PAGE,
    )
    yield
    logger.info("Forge UI stopped")


app = FastAPI(
    title="Forge UI",
    docs_url=None,
    redoc_url=None,
    lifespan=lifespan,
)

# Register routes
app.include_router(apply_routes.router)
app.include_router(preview_routes.router)
app.include_router(prompt_routes.router)
app.include_router(ws_routes.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are bad input, reported in the pipeline's error shape."""
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid {field}", "kind": "bad_input", "details": first.get("msg")},
    )


@app.get("/health")
async def health():
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}
