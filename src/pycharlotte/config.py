"""Relay configuration for pycharlotte."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from pycharlotte._constants import DEFAULT_PERIOD_MS, MAX_PENDING_SENDS, RETRY_PERIOD_SECONDS, SERVER_URL
from pycharlotte.exceptions import RelayConfigError
from pycharlotte.models.options import RelayOptions


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class RelayConfig:
    """Relay configuration.

    Parameters
    ----------
    boat_id : str
        Boat identifier on the collector.
    api_key : str
        Pre-shared API key, sent as a query parameter of the socket URI.
    period : float
        Milliseconds between delta pushes requested from the sensor bus.
    include_timestamp : bool
        Forward each update's timestamp in the ``time`` wire field.
    server_url : str
        Collector base URI; the boat path is appended to it.
    retry_period : float
        Seconds between connection health checks.
    max_pending_sends : int
        Frames that may be queued on the socket before new frames are dropped.
    """

    boat_id: str
    api_key: str
    period: float = DEFAULT_PERIOD_MS
    include_timestamp: bool = True
    server_url: str = SERVER_URL
    retry_period: float = RETRY_PERIOD_SECONDS
    max_pending_sends: int = MAX_PENDING_SENDS

    def __post_init__(self) -> None:
        missing = [name for name in ("boat_id", "api_key") if not str(getattr(self, name) or "").strip()]
        if missing:
            raise RelayConfigError(f"Missing option(s): {', '.join(missing)}")
        if self.period <= 0:
            raise RelayConfigError(f"period must be positive, got {self.period}")
        if self.retry_period <= 0:
            raise RelayConfigError(f"retry_period must be positive, got {self.retry_period}")
        if self.max_pending_sends <= 0:
            raise RelayConfigError(f"max_pending_sends must be positive, got {self.max_pending_sends}")
        if not self.server_url.startswith(("ws://", "wss://")):
            raise RelayConfigError(f"server_url must be a ws:// or wss:// URI, got {self.server_url!r}")

    @property
    def destination_url(self) -> str:
        """Socket URI: ``<server_url><boat_id>/data?api_key=<api_key>``."""
        base = self.server_url if self.server_url.endswith("/") else f"{self.server_url}/"
        return f"{base}{quote(self.boat_id, safe='')}/data?api_key={quote(self.api_key, safe='')}"

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None, **overrides: Any) -> RelayConfig:
        """Create configuration from the host's camelCase option mapping.

        Raises
        ------
        RelayConfigError
            When options are absent, a required option is missing, or a
            value is invalid.
        """
        if not isinstance(options, Mapping):
            raise RelayConfigError(f"Options must be a mapping, got {type(options).__name__}")
        try:
            parsed = RelayOptions.model_validate(dict(options))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'options'}: {error['msg']}" for error in exc.errors()
            )
            raise RelayConfigError(f"Invalid options: {problems}") from exc

        config_kwargs: dict[str, Any] = {
            "boat_id": parsed.boat_id,
            "api_key": parsed.api_key,
            "period": parsed.period,
            "include_timestamp": parsed.include_timestamp,
        }
        config_kwargs.update(overrides)
        return cls(**config_kwargs)

    @classmethod
    def from_env(cls, **overrides: Any) -> RelayConfig:
        """Create configuration from environment variables.

        Reads ``CHARLOTTE_BOAT_ID``, ``CHARLOTTE_API_KEY`` and optional
        ``CHARLOTTE_*`` variables. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CHARLOTTE_BOAT_ID": "boat_id",
            "CHARLOTTE_API_KEY": "api_key",
            "CHARLOTTE_SERVER_URL": "server_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            period_env = env.get("CHARLOTTE_PERIOD")
            if period_env is not None and "period" not in overrides:
                config_kwargs["period"] = float(period_env)

            retry_env = env.get("CHARLOTTE_RETRY_PERIOD")
            if retry_env is not None and "retry_period" not in overrides:
                config_kwargs["retry_period"] = float(retry_env)
        except ValueError as exc:
            raise RelayConfigError(f"Invalid numeric environment value: {exc}") from exc

        if "include_timestamp" not in overrides:
            config_kwargs["include_timestamp"] = _env_bool(env.get("CHARLOTTE_INCLUDE_TIMESTAMP"), True)

        config_kwargs.update(overrides)

        missing = [name for name in ("boat_id", "api_key") if name not in config_kwargs]
        if missing:
            raise RelayConfigError(f"Missing option(s): {', '.join(missing)}")
        return cls(**config_kwargs)
