from __future__ import annotations

import asyncio
from typing import Any, Iterable, Optional

import aiohttp
from loguru import logger


class RelayRegistry:
    """Owned set of relay URLs plus a background task that forwards events to them."""

    def __init__(self, urls: Iterable[str] = (), timeout_s: float = 5.0) -> None:
        self._urls: dict[str, None] = {}
        for url in urls:
            self.add(url)
        self.timeout_s = timeout_s
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self._session: Optional[aiohttp.ClientSession] = None

    def urls(self) -> list[str]:
        return list(self._urls)

    def add(self, url: str) -> list[str]:
        url = url.strip()
        if not url:
            raise ValueError("url is required")
        self._urls[url] = None
        logger.info("Added relay URL {}", url)
        return self.urls()

    def remove(self, url: str) -> list[str]:
        url = url.strip()
        if url in self._urls:
            del self._urls[url]
            logger.info("Removed relay URL {}", url)
        return self.urls()

    async def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_s))
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        if self._session:
            await self._session.close()
            self._session = None

    async def publish(self, event: dict[str, Any]) -> None:
        await self.queue.put(event)

    async def _run(self) -> None:
        while True:
            event = await self.queue.get()
            try:
                await self.broadcast(event)
            except Exception as exc:
                logger.exception("Failed to relay event {}: {}", event, exc)
            finally:
                self.queue.task_done()

    async def broadcast(self, event: dict[str, Any]) -> int:
        """POST ``event`` to every relay; returns how many deliveries succeeded."""
        delivered = 0
        session = self._session
        owns_session = session is None
        if owns_session:
            session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout_s))
        try:
            for url in self.urls():
                try:
                    async with session.post(url, json=event) as resp:
                        resp.raise_for_status()
                    delivered += 1
                except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                    logger.error("Relay POST to {} failed: {}", url, exc)
        finally:
            if owns_session:
                await session.close()
        return delivered
