"""
Chat message polling.

A MessagePoller asks a fetcher for messages newer than its last-seen cursor
on a fixed interval and hands them to a callback. The cursor only moves
after a fetch and its delivery both succeeded, so a failed or interrupted
poll is simply repeated on the next tick.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from uuid import UUID

import httpx

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 3.0

Message = Dict[str, Any]
Fetch = Callable[[Optional[str]], Awaitable[List[Message]]]
Deliver = Callable[[List[Message]], Union[None, Awaitable[None]]]


class MessagePoller:
    """
    Fixed-interval poller with an explicit last-seen cursor.

    Args:
        fetch: Coroutine returning the messages after a cursor, oldest first
        on_messages: Callback receiving each non-empty batch (sync or async)
        interval: Seconds between polls
        cursor: Id of the last message already seen
    """

    def __init__(self, fetch: Fetch, on_messages: Deliver, interval: float = DEFAULT_INTERVAL,
                 cursor: Optional[str] = None):
        self.fetch = fetch
        self.on_messages = on_messages
        self.interval = interval
        self.cursor = cursor
        self._stopped = asyncio.Event()

    async def poll_once(self) -> bool:
        """Run one poll. Returns False when fetching or delivery failed."""
        try:
            messages = await self.fetch(self.cursor)
            if messages:
                delivered = self.on_messages(messages)
                if asyncio.iscoroutine(delivered):
                    await delivered
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Message poll after cursor {self.cursor} failed")
            return False

        if messages:
            self.cursor = str(messages[-1]["id"])
        return True

    async def run(self):
        """Poll until stop() is called."""
        self._stopped.clear()
        logger.info(f"Message polling started every {self.interval}s")
        while not self._stopped.is_set():
            await self.poll_once()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                continue
        logger.info("Message polling stopped")

    def stop(self):
        self._stopped.set()


class HttpMessageFetcher:
    """Fetch chat messages from the WorkHub API."""

    def __init__(self, client: httpx.AsyncClient, chat_id: UUID, token: str,
                 page_size: int = 100):
        self.client = client
        self.chat_id = chat_id
        self.token = token
        self.page_size = page_size

    async def __call__(self, cursor: Optional[str]) -> List[Message]:
        params = {"limit": self.page_size}
        if cursor:
            params["after_id"] = cursor
        response = await self.client.get(
            f"/api/v1/chats/{self.chat_id}/messages",
            params=params,
            headers={"Authorization": f"Bearer {self.token}"},
        )
        response.raise_for_status()
        return response.json()["data"]["messages"]
