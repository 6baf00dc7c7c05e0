from __future__ import annotations

import asyncio
from typing import Any

import pytest


class FakeSocket:
    """In-memory stand-in for ``aiohttp.ClientWebSocketResponse``."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.close_calls = 0
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()

    async def send_str(self, data: str) -> None:
        if self.closed:
            raise ConnectionResetError("socket closed")
        self.sent.append(data)

    async def close(self) -> bool:
        self.close_calls += 1
        if not self.closed:
            self.closed = True
            self._inbox.put_nowait(None)
        return True

    def feed(self, message: Any) -> None:
        self._inbox.put_nowait(message)

    def drop(self) -> None:
        """Simulate the remote side closing the connection."""
        self.closed = True
        self._inbox.put_nowait(None)

    def __aiter__(self) -> FakeSocket:
        return self

    async def __anext__(self) -> Any:
        message = await self._inbox.get()
        if message is None:
            raise StopAsyncIteration
        return message


class FakeConnector:
    """Connector double: fails ``failures`` times, then hands out sockets.

    When ``gate`` is set, each attempt waits for it before resolving.
    """

    def __init__(self, *, failures: int = 0, gate: asyncio.Event | None = None) -> None:
        self.failures = failures
        self.gate = gate
        self.urls: list[str] = []
        self.sockets: list[FakeSocket] = []

    async def __call__(self, url: str) -> FakeSocket:
        self.urls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionRefusedError("collector unreachable")
        socket = FakeSocket()
        self.sockets.append(socket)
        return socket


@pytest.fixture
def make_connector() -> type[FakeConnector]:
    return FakeConnector
