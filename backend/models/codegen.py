"""Request/response models for the artifact pipeline routes."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from backend.config import settings


class ApplyRequest(BaseModel):
    """What the client sends to POST /api/apply."""

    model_config = {"extra": "forbid"}

    content: str = Field(min_length=1, max_length=settings.MAX_CONTENT_CHARS)


class ApplyResponse(BaseModel):
    """What the apply endpoint returns. Optional fields are omitted when unset."""

    model_config = {"populate_by_name": True}

    file_path: str = Field(alias="filePath")
    route_path: str | None = Field(default=None, alias="routePath")
    embedded: bool | None = None
    import_name: str | None = Field(default=None, alias="importName")


class ErrorResponse(BaseModel):
    """Body of every pipeline error."""

    error: str
    kind: Literal["bad_input", "write_failed", "internal"]
    details: str | None = None


class ArtifactRequest(BaseModel):
    """Assistant text to inspect for an applicable artifact."""

    model_config = {"extra": "forbid"}

    content: str = Field(max_length=settings.MAX_CONTENT_CHARS)


class ArtifactModel(BaseModel):
    model_config = {"populate_by_name": True}

    file_path: str = Field(alias="filePath")
    language: str
    code: str


class ArtifactResponse(BaseModel):
    """
    applicable: the text has a header under the sandbox root plus a fence,
    so the chat view should offer Apply. artifact: what Apply would use.
    """

    applicable: bool
    artifact: ArtifactModel | None = None


class BlocksRequest(BaseModel):
    """Text to segment for display."""

    model_config = {"extra": "forbid"}

    content: str = Field(max_length=settings.MAX_CONTENT_CHARS)


class BlockModel(BaseModel):
    """One display segment: either code (language + code) or text."""

    type: Literal["code", "text"]
    language: str | None = None
    code: str | None = None
    text: str | None = None


class BlocksResponse(BaseModel):
    blocks: list[BlockModel]


class PreviewPublishRequest(BaseModel):
    """
    What the chat view publishes on the preview channel.

    Either `code` (an already extracted snippet) or `content` (a whole
    assistant message, from which the first JSX fence is taken).
    """

    model_config = {"extra": "forbid", "populate_by_name": True}

    code: str | None = Field(default=None, max_length=settings.MAX_CONTENT_CHARS)
    content: str | None = Field(default=None, max_length=settings.MAX_CONTENT_CHARS)
    file_path: str | None = Field(default=None, alias="filePath")
    loading: bool = False


class PreviewPublishResponse(BaseModel):
    published: bool
    subscribers: int


class PreviewRenderRequest(BaseModel):
    """Render a preview document for arbitrary text without publishing it."""

    model_config = {"extra": "forbid"}

    content: str = Field(max_length=settings.MAX_CONTENT_CHARS)
    mode: Literal["auto", "snippet", "component"] = "auto"
    loading: bool = False


class PromptResponse(BaseModel):
    kind: Literal["code", "decision"]
    prompt: str
