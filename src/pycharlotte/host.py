"""Interfaces the relay consumes from its host application.

Having protocols here keeps the coordinator independent of any particular
host while making it easy to pass test doubles.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

Unsubscribe = Callable[[], None]


class SensorBus(Protocol):
    """The host's data bus."""

    def subscribe(
        self,
        subscription: Mapping[str, Any],
        on_error: Callable[[Any], None],
        on_delta: Callable[[Any], None],
    ) -> Unsubscribe:
        """Register for delta pushes; returns a cancellation handle.

        ``on_error`` receives subscription-level errors (e.g. a rejected
        filter). ``on_delta`` receives delta envelopes and may be called
        from any thread.
        """
        ...


class SelfIdentity(Protocol):
    """Resolves the identity of the host's own vessel."""

    def self_uuid(self) -> str: ...


def build_subscription(period_ms: float) -> dict[str, Any]:
    """Subscription for every path of every context at *period_ms*.

    Filtering happens locally, in the transformer.
    """
    return {
        "context": "*",
        "subscribe": [
            {
                "path": "*",
                "period": period_ms,
            }
        ],
    }
