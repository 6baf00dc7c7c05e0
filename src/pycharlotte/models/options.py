"""Host option set.

The host stores the relay's settings as a flat camelCase mapping and renders
a settings form from :func:`options_schema`.
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from pycharlotte._constants import DEFAULT_PERIOD_MS, PLUGIN_DESCRIPTION, PLUGIN_NAME
from pycharlotte.models._base import RelayBaseModel


class RelayOptions(RelayBaseModel):
    """Options recognised by the relay.

    Parameters
    ----------
    boat_id : str
        Boat identifier from the Charlotte settings page.
    api_key : str
        API key from the Charlotte settings page.
    period : float
        Milliseconds between delta pushes requested from the bus.
    include_timestamp : bool
        Forward the update timestamp with every frame. Turn off to replay
        recorded data as if it were live.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        title=PLUGIN_NAME,
        json_schema_extra={"description": PLUGIN_DESCRIPTION},
    )

    boat_id: str = Field(
        ...,
        min_length=1,
        title="Boat ID",
        description="The Boat ID retrieved from the settings page on https://charlotte.lc",
    )
    api_key: str = Field(
        ...,
        min_length=1,
        title="API Key",
        description="The API Key retrieved from the settings page on https://charlotte.lc",
    )
    period: float = Field(
        default=DEFAULT_PERIOD_MS,
        gt=0,
        title="Update period in milliseconds. Default: 100 ms = 10 times/second",
        description=(
            "Specify how frequently the plugin will send data to Charlotte. The default value is 100 ms, "
            "meaning 10 times per second. 1000 ms would be once a second."
        ),
    )
    include_timestamp: bool = Field(
        default=True,
        title="Include timestamps.",
        description="Uncheck this if you want to replay existing log data as if it is happening live",
    )


def options_schema() -> dict[str, Any]:
    """JSON schema of the option set, keyed by the host's camelCase names."""
    return RelayOptions.model_json_schema(by_alias=True)
