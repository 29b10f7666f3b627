"""
Preview channel: fan-out of the latest preview snippet to open preview panes.

Fire-and-forget: publish() never blocks. Each subscriber holds at most one
pending message; a newer one replaces it, so a slow or momentarily
detached listener only ever sees the latest state.
"""

from __future__ import annotations

import asyncio
import logging

from engine.codegen.types import PreviewMessage

logger = logging.getLogger(__name__)

CHANNEL_NAME = "ai-preview"


class Subscription:
    """One listener's mailbox (capacity 1)."""

    def __init__(self, channel: PreviewChannel) -> None:
        self._channel = channel
        self._queue: asyncio.Queue[PreviewMessage] = asyncio.Queue(maxsize=1)

    def offer(self, message: PreviewMessage) -> None:
        """Deliver message, dropping any undelivered older one."""
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            self._queue.put_nowait(message)

    async def get(self) -> PreviewMessage:
        return await self._queue.get()

    def pending(self) -> bool:
        return not self._queue.empty()

    def close(self) -> None:
        self._channel.unsubscribe(self)


class PreviewChannel:
    """Named broadcast channel with last-message-wins delivery."""

    def __init__(self, name: str = CHANNEL_NAME) -> None:
        self.name = name
        self.latest: PreviewMessage | None = None
        self._subscribers: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> Subscription:
        sub = Subscription(self)
        self._subscribers.add(sub)
        logger.info("preview_channel[%s]: subscribed (%d listening)", self.name, len(self._subscribers))
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        self._subscribers.discard(sub)
        logger.info("preview_channel[%s]: unsubscribed (%d listening)", self.name, len(self._subscribers))

    def publish(self, message: PreviewMessage) -> int:
        """
        Record message as the latest and offer it to every subscriber.

        Returns:
            Number of subscribers the message was offered to
        """
        self.latest = message
        for sub in list(self._subscribers):
            sub.offer(message)
        return len(self._subscribers)

    def resolve(self, code: str | None, file_path: str | None = None, loading: bool = False) -> PreviewMessage | None:
        """
        Build the message for a publish request.

        Without code, the previous code and file path are kept, so a
        loading-only publish just toggles the thinking state. With no code
        and nothing published yet, only a loading publish is accepted (over
        empty code).

        Returns:
            PreviewMessage, or None when there is no code to show
        """
        if code is None:
            previous = self.latest
            if previous is None and not loading:
                return None
            code = previous.code if previous else ""
            file_path = file_path or (previous.file_path if previous else None)
        return PreviewMessage(code=code, file_path=file_path, loading=loading)


# Singleton instance
preview_channel = PreviewChannel()
