"""Catch-up queries against the Gerrit events-log plugin.

The events-log plugin keeps a copy of every stream event and serves them
over REST, filtered by creation date:

    GET /a/plugins/events-log/events/?t1=2014.11.13 19:22:55

The response body holds one JSON event per line, in creation order.
"""

import logging
from datetime import datetime

import httpx

from ..domain import FetchError
from ..recovery import EventFetcher, RawRecord
from .config import GerritServerConfiguration

LOGGER = logging.getLogger(__name__)

EVENTS_LOG_PLUGIN_NAME = "events-log"
GERRIT_DATE_FORMAT = "%Y.%m.%d %H:%M:%S"


def format_lower_bound(lower_bound: int, config: GerritServerConfiguration) -> str:
    """Format an epoch-millisecond bound the way events-log expects it.

    The query only has a resolution of one second, so the bound is rounded
    down: the result may include events created shortly before it.
    """
    moment = datetime.fromtimestamp(lower_bound / 1000, tz=config.tzinfo)
    return moment.strftime(GERRIT_DATE_FORMAT)


class EventsLogFetcher(EventFetcher):
    """EventFetcher backed by the events-log plugin of one Gerrit server.

    Attributes:
        config: The server to query
        plugin_name: Name the events-log plugin is installed under

    Example:
        >>> fetcher = EventsLogFetcher(GerritServerConfiguration(name="MyGerritServer"))
        >>> records = await fetcher.fetch_events_since("MyGerritServer", 1415906575128)
    """

    __slots__ = ("config", "plugin_name")

    def __init__(
        self,
        config: GerritServerConfiguration,
        plugin_name: str = EVENTS_LOG_PLUGIN_NAME,
    ):
        self.config = config
        self.plugin_name = plugin_name

    async def fetch_events_since(self, identity: str, lower_bound: int) -> list[RawRecord]:
        if not self.config.use_rest_api:
            raise FetchError(f"REST API is not enabled for {identity}, cannot query missed events")

        since = format_lower_bound(lower_bound, self.config)
        LOGGER.debug(
            f"Querying {self.plugin_name} on {identity} for events since {since}",
            extra={"identity": identity},
        )

        try:
            response = await self.config.client.get(
                f"a/plugins/{self.plugin_name}/events/",
                params={"t1": since},
            )
        except httpx.HTTPError as e:
            raise FetchError(f"Events query to {identity} failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise FetchError(
                f"Events query to {identity} failed with HTTP status {response.status_code}"
            )

        return [line for line in response.text.splitlines() if line.strip()]
