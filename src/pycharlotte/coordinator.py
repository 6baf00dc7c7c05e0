"""Relay coordination.

Owns:
- option validation and the inert state when options are missing
- the sensor-bus subscription and its cancellation handle
- the connection supervisor
- the delta -> wire -> socket path
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp
from pydantic import ValidationError

from pycharlotte._constants import SELF_CONTEXT_PREFIX
from pycharlotte._redact import redact_options
from pycharlotte.config import RelayConfig
from pycharlotte.connection import ConnectionSupervisor, Connector
from pycharlotte.exceptions import RelayConfigError
from pycharlotte.host import SelfIdentity, SensorBus, Unsubscribe, build_subscription
from pycharlotte.mapping import PathMappingTable, default_table
from pycharlotte.models.delta import Delta
from pycharlotte.transform import transform_delta

_logger = logging.getLogger(__name__)


class RelayCoordinator:
    """Relays own-vessel deltas from the sensor bus to the collector.

    Usage::

        relay = RelayCoordinator(bus, identity)
        if await relay.start({"boatId": "...", "apiKey": "..."}):
            ...
        await relay.stop()
    """

    def __init__(
        self,
        bus: SensorBus,
        identity: SelfIdentity,
        *,
        table: PathMappingTable | None = None,
        connector: Connector | None = None,
        http_session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._bus = bus
        self._identity = identity
        self._table = table if table is not None else default_table()
        self._connector = connector
        self._http_session = http_session
        self._config: RelayConfig | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._supervisor: ConnectionSupervisor | None = None
        self._unsubscribe: Unsubscribe | None = None
        self._self_context: str | None = None

    @property
    def is_running(self) -> bool:
        return self._supervisor is not None

    @property
    def self_context(self) -> str | None:
        return self._self_context

    @property
    def supervisor(self) -> ConnectionSupervisor | None:
        return self._supervisor

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, options: Mapping[str, Any] | RelayConfig | None) -> bool:
        """Start relaying. Returns ``False`` and stays inert on bad options."""
        if self._supervisor is not None:
            _logger.debug("Relay already started")
            return True

        try:
            config = options if isinstance(options, RelayConfig) else RelayConfig.from_options(options)
        except RelayConfigError as exc:
            _logger.warning("Relay not started: %s", exc)
            if isinstance(options, Mapping):
                _logger.debug("Rejected options: %s", redact_options(options))
            return False

        try:
            self_context = f"{SELF_CONTEXT_PREFIX}{self._identity.self_uuid()}"
        except Exception:
            _logger.exception("Relay not started: cannot resolve own vessel identity")
            return False

        self._config = config
        self._self_context = self_context
        self._loop = asyncio.get_running_loop()
        _logger.debug("I am %s", self_context)

        supervisor = ConnectionSupervisor(
            config.destination_url,
            retry_period=config.retry_period,
            connector=self._connector,
            http_session=self._http_session,
            max_pending_sends=config.max_pending_sends,
        )
        await supervisor.start()
        self._supervisor = supervisor

        try:
            self._unsubscribe = self._bus.subscribe(
                build_subscription(config.period),
                self._on_subscription_error,
                self._on_delta,
            )
        except Exception:
            _logger.exception("Subscription to the sensor bus failed")

        _logger.info("Relay started boat_id=%s period=%sms", config.boat_id, config.period)
        return True

    async def stop(self) -> None:
        """Cancel the subscription and stop the connection supervisor."""
        unsubscribe = self._unsubscribe
        self._unsubscribe = None
        if unsubscribe is not None:
            try:
                unsubscribe()
            except Exception:
                _logger.debug("Unsubscribe failed", exc_info=True)

        supervisor = self._supervisor
        self._supervisor = None
        self._loop = None
        if supervisor is None:
            return
        await supervisor.stop()
        _logger.info("Relay stopped")

    # ------------------------------------------------------------------
    # Bus callbacks
    # ------------------------------------------------------------------

    def _on_subscription_error(self, error: Any) -> None:
        _logger.error("Subscription error: %s", error)

    def _on_delta(self, raw: Any) -> None:
        """Bus callback; hops onto the relay's event loop."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._handle_delta, raw)

    def _handle_delta(self, raw: Any) -> None:
        supervisor = self._supervisor
        config = self._config
        self_context = self._self_context
        if supervisor is None or config is None or self_context is None:
            return

        try:
            delta = Delta.model_validate(raw)
        except ValidationError:
            _logger.debug("Dropping malformed delta", exc_info=True)
            return

        for wire in transform_delta(
            delta,
            self_context,
            table=self._table,
            include_timestamp=config.include_timestamp,
        ):
            if supervisor.send(wire):
                _logger.debug("Sending: %s", wire.to_json())
