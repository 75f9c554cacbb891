"""Gerrit server configuration using pydantic-settings."""

from functools import cached_property
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


class GerritServerConfiguration(BaseSettings):
    """Configuration and HTTP client factory for one Gerrit server.

    Implements the HasLifecycle protocol: the HTTP client is closed on
    shutdown.

    All settings can be configured via environment variables with the
    GERRIT_ prefix. For example:
    - GERRIT_NAME=MyGerritServer
    - GERRIT_FRONTEND_URL=https://review.example.com/
    - GERRIT_HTTP_USERNAME=jenkins

    Attributes:
        name: Server name, used as the connection identity of its checkpoint.
        frontend_url: Base URL of the Gerrit web front end.
        http_username: User for the REST API (HTTP basic auth).
        http_password: HTTP password of that user.
        use_rest_api: Whether the REST API may be used at all. Without it
            neither the capability probe nor the catch-up query can run.
        timeout_seconds: Timeout of each HTTP request.
        server_timezone: IANA time zone the server uses to interpret the
            date bounds of events-log queries.

    Example:
        >>> config = GerritServerConfiguration(
        ...     name="MyGerritServer",
        ...     frontend_url="https://review.example.com",
        ...     http_username="jenkins",
        ...     http_password="secret",
        ... )
        >>> config.rest_url
        'https://review.example.com/'
    """

    name: str = "defaultServer"
    frontend_url: str = "http://localhost:8080/"
    http_username: str | None = None
    http_password: SecretStr | None = None
    use_rest_api: bool = True
    timeout_seconds: float = Field(default=30.0, gt=0)
    server_timezone: str = "UTC"

    model_config = {"env_prefix": "GERRIT_"}

    @field_validator("server_timezone")
    @classmethod
    def validate_server_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {value}") from e
        return value

    @property
    def rest_url(self) -> str:
        """The front end URL, always ending with a slash."""
        if self.frontend_url.endswith("/"):
            return self.frontend_url
        return self.frontend_url + "/"

    @cached_property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.server_timezone)

    @cached_property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client for this server.

        The client is lazily created and cached for reuse. Requests are
        relative to ``rest_url`` and authenticated with basic auth when a
        user is configured.
        """
        auth = None
        if self.http_username is not None:
            password = self.http_password.get_secret_value() if self.http_password else ""
            auth = httpx.BasicAuth(self.http_username, password)
        return httpx.AsyncClient(
            base_url=self.rest_url,
            auth=auth,
            timeout=self.timeout_seconds,
        )

    # HasLifecycle protocol implementation

    async def on_startup(self) -> None:
        """No-op - the client connects lazily."""
        pass

    async def on_shutdown(self) -> None:
        """Close the HTTP client if it was created."""
        if "client" in self.__dict__:
            await self.client.aclose()
