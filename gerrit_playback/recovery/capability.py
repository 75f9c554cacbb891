import logging

from .collaborators import CapabilityProbe

LOGGER = logging.getLogger(__name__)


class CapabilityGate:
    """Caches whether catch-up queries are supported per connection identity.

    The probe runs once per identity for the lifetime of the gate. A new
    gate (e.g. after the connection is reconfigured) probes again.

    If the probe cannot be reached or raises, the identity is reported
    unsupported and no catch-up is attempted.

    Example:
        >>> gate = CapabilityGate(GerritPluginChecker(server_config, "events-log"))
        >>> if await gate.is_supported("MyGerritServer"):
        ...     ...
    """

    __slots__ = ("probe", "_supported")

    def __init__(self, probe: CapabilityProbe):
        self.probe = probe
        self._supported: dict[str, bool] = {}

    async def is_supported(self, identity: str) -> bool:
        if identity not in self._supported:
            self._supported[identity] = await self._probe(identity)
        return self._supported[identity]

    def forget(self, identity: str) -> None:
        """Drop the cached answer so the next check probes again."""
        self._supported.pop(identity, None)

    async def _probe(self, identity: str) -> bool:
        try:
            supported = await self.probe.probe(identity)
        except Exception as e:
            LOGGER.warning(
                f"Capability probe failed for {identity}, disabling playback: {e}",
                extra={"identity": identity},
            )
            return False

        LOGGER.info(
            f"Missed events playback {'supported' if supported else 'not supported'} for {identity}",
            extra={"identity": identity},
        )
        return bool(supported)
