"""Helper to determine if a plugin is installed on a Gerrit server."""

import logging

import httpx

from ..recovery import CapabilityProbe
from .config import GerritServerConfiguration
from .events_log import EVENTS_LOG_PLUGIN_NAME

LOGGER = logging.getLogger(__name__)


class GerritPluginChecker(CapabilityProbe):
    """Capability probe asking Gerrit whether a plugin is enabled.

    Any answer other than HTTP 200 counts as "not enabled", including
    authentication failures and unreachable servers.

    Attributes:
        config: The server to ask
        plugin_name: The plugin that must be installed
    """

    __slots__ = ("config", "plugin_name")

    def __init__(
        self,
        config: GerritServerConfiguration,
        plugin_name: str = EVENTS_LOG_PLUGIN_NAME,
    ):
        self.config = config
        self.plugin_name = plugin_name

    async def probe(self, identity: str) -> bool:
        return await self.is_plugin_enabled()

    async def is_plugin_enabled(self) -> bool:
        name = self.plugin_name
        if not self.config.use_rest_api:
            LOGGER.info(f"REST API is not enabled. Cannot verify if Gerrit {name} plugin is enabled.")
            return False

        try:
            response = await self.config.client.get(f"plugin/{name}")
        except httpx.HTTPError as e:
            LOGGER.warning(f"Not able to verify if Gerrit plugin {name} is installed. Error: {e}")
            return False

        status = response.status_code
        if status == httpx.codes.OK:
            LOGGER.info(f"Gerrit Plugin {name} is installed")
            return True
        if status == httpx.codes.UNAUTHORIZED:
            LOGGER.warning(
                f"Not able to verify if Gerrit plugin {name} is installed. "
                "Error: unauthorized, check the HTTP credentials"
            )
        else:
            LOGGER.warning(
                f"Not able to verify if Gerrit plugin {name} is installed. "
                f"Error: HTTP status {status}"
            )
        return False
