"""
Pydantic models for Forge UI.

All request/response shapes defined here. No imports from routes or services.
"""

from backend.models.codegen import (
    ApplyRequest,
    ApplyResponse,
    BlockModel,
    BlocksRequest,
    BlocksResponse,
    ErrorResponse,
    PreviewPublishRequest,
    PreviewPublishResponse,
    PreviewRenderRequest,
    PromptResponse,
)

__all__ = [
    # Apply models
    "ApplyRequest",
    "ApplyResponse",
    "ErrorResponse",
    # Display models
    "BlocksRequest",
    "BlockModel",
    "BlocksResponse",
    # Preview models
    "PreviewPublishRequest",
    "PreviewPublishResponse",
    "PreviewRenderRequest",
    # Prompt models
    "PromptResponse",
]
