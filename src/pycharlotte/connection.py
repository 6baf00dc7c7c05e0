"""Outbound WebSocket lifecycle: health check, reconnect, best-effort send."""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

import aiohttp

from pycharlotte._constants import MAX_PENDING_SENDS, RETRY_PERIOD_SECONDS
from pycharlotte._redact import redact_url
from pycharlotte.exceptions import RelayError
from pycharlotte.models.wire import WireObject

_logger = logging.getLogger(__name__)


class WireSocket(Protocol):
    """Structural socket interface.

    ``aiohttp.ClientWebSocketResponse`` satisfies it; tests pass doubles.
    Iteration yields inbound messages and ends when the socket closes.
    """

    @property
    def closed(self) -> bool: ...

    async def send_str(self, data: str) -> None: ...

    async def close(self) -> Any: ...

    def __aiter__(self) -> AsyncIterator[Any]: ...


Connector = Callable[[str], Awaitable[WireSocket]]


async def _ws_connect(http_session: aiohttp.ClientSession, url: str) -> WireSocket:
    return await http_session.ws_connect(url)


class ConnectionPhase(StrEnum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    STOPPED = "stopped"


@dataclass
class ConnectionState:
    """Connection state; written only by :class:`ConnectionSupervisor`."""

    socket: WireSocket | None = None
    alive: bool = False
    phase: ConnectionPhase = ConnectionPhase.IDLE


async def _close_quietly(socket: WireSocket, logger: logging.Logger) -> None:
    try:
        await socket.close()
    except Exception:
        logger.debug("Socket close failed", exc_info=True)


class ConnectionSupervisor:
    """Keeps one outbound socket open, retrying at a fixed interval.

    All state changes happen on the event loop that called :meth:`start`:
    the timer task, the connection attempt, the socket reader, and
    :meth:`send` never run concurrently with each other.
    """

    def __init__(
        self,
        url: str,
        *,
        retry_period: float = RETRY_PERIOD_SECONDS,
        connector: Connector | None = None,
        http_session: aiohttp.ClientSession | None = None,
        max_pending_sends: int = MAX_PENDING_SENDS,
        logger: logging.Logger | None = None,
    ) -> None:
        self._url = url
        self._retry_period = retry_period
        self._connector = connector
        self._external_session = http_session is not None
        self._http_session = http_session
        self._max_pending_sends = max_pending_sends
        self._logger = logger or _logger
        self._state = ConnectionState()
        self._timer_task: asyncio.Task[None] | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._pending_sends: set[asyncio.Task[None]] = set()
        self._connect_attempts = 0
        self._stopped = False

    @property
    def alive(self) -> bool:
        """Whether the socket is open and frames will be sent."""
        return self._state.alive

    @property
    def phase(self) -> ConnectionPhase:
        return self._state.phase

    @property
    def connect_attempts(self) -> int:
        """Number of connection attempts made so far."""
        return self._connect_attempts

    @property
    def is_running(self) -> bool:
        return self._timer_task is not None and not self._stopped

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the reconnect timer. The first health check runs immediately."""
        if self._stopped:
            raise RelayError("Connection supervisor was stopped; create a new one")
        if self._timer_task is not None:
            return
        if self._connector is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._connector = functools.partial(_ws_connect, self._http_session)
        self._logger.debug(
            "Connection supervisor starting url=%s retry_period=%s",
            redact_url(self._url),
            self._retry_period,
        )
        self._timer_task = asyncio.create_task(self._run(), name="pycharlotte-reconnect")

    async def stop(self) -> None:
        """Stop for good: cancel the timer and close the socket.

        A connection attempt still in flight is given one retry period to
        complete; the socket it produces is closed instead of adopted.
        """
        if self._stopped:
            return
        self._stopped = True
        self._state.phase = ConnectionPhase.STOPPED

        timer = self._timer_task
        self._timer_task = None
        if timer is not None:
            timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await timer

        connect = self._connect_task
        self._connect_task = None
        if connect is not None and not connect.done():
            done, _ = await asyncio.wait({connect}, timeout=self._retry_period)
            if not done:
                connect.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await connect

        await self._discard_socket()

        reader = self._reader_task
        self._reader_task = None
        if reader is not None and not reader.done():
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader

        for task in list(self._pending_sends):
            task.cancel()
        self._pending_sends.clear()

        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._logger.debug("Connection supervisor stopped after %d attempts", self._connect_attempts)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                await self.check()
            except asyncio.CancelledError:
                raise
            except Exception:
                self._logger.exception("Connection health check failed")
            # Ticks stay on a fixed cadence however long the check took.
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, self._retry_period - elapsed))

    # ------------------------------------------------------------------
    # Health check and socket events
    # ------------------------------------------------------------------

    async def check(self) -> None:
        """Run one health check: reconnect unless the socket is alive."""
        if self._stopped or self._state.alive:
            return
        task = self._connect_task
        if task is None or task.done():
            await self._discard_socket()
            task = asyncio.create_task(self._connect(), name="pycharlotte-connect")
            self._connect_task = task
        # Shielded so that cancelling the timer leaves the attempt to finish
        # and be closed by _on_open.
        await asyncio.shield(task)

    async def _connect(self) -> None:
        connector = self._connector
        if connector is None:
            raise RelayError("Connection supervisor not started")
        self._connect_attempts += 1
        self._state.phase = ConnectionPhase.CONNECTING
        self._logger.debug("Connecting to %s attempt=%d", redact_url(self._url), self._connect_attempts)
        try:
            socket = await asyncio.wait_for(connector(self._url), self._retry_period)
        except asyncio.CancelledError:
            raise
        except TimeoutError:
            self._logger.debug("Connection attempt timed out after %ss", self._retry_period)
            self._state.alive = False
            if not self._stopped:
                self._state.phase = ConnectionPhase.CLOSED
            return
        except Exception:
            self._logger.debug("Connection attempt failed", exc_info=True)
            self._state.alive = False
            if not self._stopped:
                self._state.phase = ConnectionPhase.CLOSED
            return
        await self._on_open(socket)

    async def _on_open(self, socket: WireSocket) -> None:
        if self._stopped:
            self._logger.debug("Socket opened after stop; closing it")
            await _close_quietly(socket, self._logger)
            return
        self._state.socket = socket
        self._state.alive = True
        self._state.phase = ConnectionPhase.OPEN
        self._logger.info("Socket open.")
        self._reader_task = asyncio.create_task(self._receive(socket), name="pycharlotte-receive")

    async def _receive(self, socket: WireSocket) -> None:
        try:
            async for message in socket:
                self._on_message(message)
        except asyncio.CancelledError:
            raise
        except Exception:
            self._logger.debug("Socket receive failed", exc_info=True)
        finally:
            self._on_close(socket)

    def _on_message(self, message: Any) -> None:
        msg_type = getattr(message, "type", None)
        if msg_type == aiohttp.WSMsgType.ERROR:
            self._logger.debug("Socket error frame: %s", getattr(message, "data", message))
            return
        self._logger.debug("Message received: %s", getattr(message, "data", message))

    def _on_close(self, socket: WireSocket) -> None:
        if self._state.socket is not socket:
            return
        if self._state.alive:
            self._logger.info("Cloud socket closed.")
        self._state.alive = False
        if not self._stopped:
            self._state.phase = ConnectionPhase.CLOSED

    async def _discard_socket(self) -> None:
        socket = self._state.socket
        self._state.socket = None
        self._state.alive = False
        if socket is not None and not socket.closed:
            await _close_quietly(socket, self._logger)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def send(self, wire: WireObject) -> bool:
        """Hand a frame to the socket if it is alive; drop it otherwise.

        Never raises. Returns ``True`` when the frame was scheduled.
        """
        socket = self._state.socket
        if socket is None or not self._state.alive:
            return False
        if len(self._pending_sends) >= self._max_pending_sends:
            self._logger.debug("Send backlog full (%d frames); dropping frame", len(self._pending_sends))
            return False
        task = asyncio.get_running_loop().create_task(self._send(socket, wire.to_json()))
        self._pending_sends.add(task)
        task.add_done_callback(self._pending_sends.discard)
        return True

    async def _send(self, socket: WireSocket, payload: str) -> None:
        try:
            await socket.send_str(payload)
        except asyncio.CancelledError:
            raise
        except Exception:
            self._logger.debug("Send failed", exc_info=True)
