"""
WebSocket endpoint for the live preview pane.

Accepts connections at /ws/preview. Each connection subscribes to the
preview channel and receives a rendered preview document whenever a new
snippet is published. Only the latest snippet is ever delivered.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from backend.services.preview_channel import Subscription, preview_channel
from engine.codegen.sandbox_preview import render_snippet_preview
from engine.codegen.types import PreviewMessage, parse_flag

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


def _make_preview_event(message: PreviewMessage) -> dict[str, Any]:
    """Build the payload a preview pane renders into its iframe."""
    return {
        "type": "preview",
        "html": render_snippet_preview(message.code, loading=message.loading),
        "code": message.code,
        "filePath": message.file_path,
        "loading": message.loading,
    }


async def _pump(websocket: WebSocket, sub: Subscription) -> None:
    """Forward channel messages to the client until cancelled."""
    while True:
        message = await sub.get()
        await websocket.send_text(json.dumps(_make_preview_event(message)))


async def _receive(websocket: WebSocket) -> None:
    """
    Handle client messages until the socket closes.

    Protocol:
      Client → Server:  {"type": "publish", "code": "...", "filePath": "...", "loading": false}
                        (code may be omitted to toggle loading over the previous code)
                        {"type": "ping"}
      Server → Client:  {"type": "preview", "html", "code", "filePath", "loading"}
                        {"type": "pong"} | {"type": "error", "error": "..."}
    """
    while True:
        raw = await websocket.receive_text()
        try:
            msg = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("ws: skipping malformed message: %r", raw[:200])
            await websocket.send_text(json.dumps({"type": "error", "error": "Invalid JSON"}))
            continue

        msg_type = msg.get("type") if isinstance(msg, dict) else None
        if msg_type == "ping":
            await websocket.send_text(json.dumps({"type": "pong"}))
        elif msg_type == "publish":
            code = msg.get("code")
            if code is not None and not isinstance(code, str):
                await websocket.send_text(json.dumps({"type": "error", "error": "code must be a string"}))
                continue
            file_path = msg.get("filePath")
            message = preview_channel.resolve(
                code,
                file_path if isinstance(file_path, str) else None,
                parse_flag(msg.get("loading")),
            )
            if message is None:
                await websocket.send_text(json.dumps({"type": "error", "error": "Missing code"}))
                continue
            preview_channel.publish(message)
        else:
            logger.warning("ws: unknown message type %r", msg_type)
            await websocket.send_text(json.dumps({"type": "error", "error": f"Unknown message type: {msg_type}"}))


@router.websocket("/ws/preview")
async def preview_websocket(websocket: WebSocket) -> None:
    """
    Stream preview documents to a preview pane.

    On connect, the latest snippet (if any) is sent immediately.
    """
    await websocket.accept()
    sub = preview_channel.subscribe()
    if preview_channel.latest is not None:
        sub.offer(preview_channel.latest)

    pump = asyncio.create_task(_pump(websocket, sub))
    receive = asyncio.create_task(_receive(websocket))
    try:
        done, _ = await asyncio.wait({pump, receive}, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("ws: preview connection ended with error: %s", exc)
    finally:
        pump.cancel()
        receive.cancel()
        sub.close()
        logger.info("ws: preview connection closed")
