"""System prompt route: GET /api/prompts/{kind}."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter

from backend.config import settings
from backend.models.codegen import PromptResponse
from backend.services.prompt_loader import load_prompt

router = APIRouter(prefix="/api/prompts", tags=["prompts"])


@router.get("/{kind}", status_code=200)
async def get_prompt(kind: Literal["code", "decision"]) -> PromptResponse:
    """
    Return the system prompt the chat client sends with its model request.

    Prompt templates may use {{sandbox_dir}} and {{host_page}}.
    """
    prompt = load_prompt(
        kind,
        settings.prompt_dir,
        context={"sandbox_dir": settings.SANDBOX_DIR, "host_page": settings.HOST_PAGE},
    )
    return PromptResponse(kind=kind, prompt=prompt)
