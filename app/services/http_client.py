"""
Shared HTTP Client Manager with Connection Pooling.

Provides a pooled httpx.AsyncClient for outbound calls that are not made
through a vendor SDK (currently the identity provider's signing-key
endpoint). One manager is created per process in the application lifespan
and handed to whoever needs it.

Lifecycle:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http = HTTPClientManager()
        await http.startup()
        yield
        await http.shutdown()
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger("QJournal.HTTP.Client")


class HTTPClientManager:
    """
    Manages a shared httpx.AsyncClient with connection pooling.

    Configuration:
    - max_connections: Maximum total connections (default: 20)
    - max_keepalive_connections: Max idle connections to keep (default: 5)
    - default_timeout: Default request timeout in seconds (default: 10.0)
    """

    def __init__(
        self,
        max_connections: int = 20,
        max_keepalive_connections: int = 5,
        default_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HTTP client manager.

        Args:
            max_connections: Maximum number of concurrent connections
            max_keepalive_connections: Maximum number of idle keepalive connections
            default_timeout: Default timeout for requests in seconds
            transport: Optional transport handed to the client (tests use httpx.MockTransport)
        """
        self._max_connections = max_connections
        self._max_keepalive_connections = max_keepalive_connections
        self._default_timeout = default_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def limits(self) -> httpx.Limits:
        """Get the connection limits configuration."""
        return httpx.Limits(
            max_connections=self._max_connections,
            max_keepalive_connections=self._max_keepalive_connections,
        )

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    async def startup(self) -> None:
        """
        Initialize the shared HTTP client.

        Called from the application lifespan. Creates the pooled AsyncClient
        with configured limits; a second call only logs a warning.
        """
        if self._client is not None:
            logger.warning("HTTP client manager already initialized")
            return

        self._client = httpx.AsyncClient(
            limits=self.limits,
            timeout=httpx.Timeout(self._default_timeout),
            follow_redirects=True,
            transport=self._transport,
        )
        logger.info(
            f"HTTP client manager initialized "
            f"(max_connections={self._max_connections}, "
            f"max_keepalive={self._max_keepalive_connections})"
        )

    async def shutdown(self) -> None:
        """
        Close the shared HTTP client and release all connections.

        Called from the application lifespan when the service stops.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("HTTP client manager shut down")

    async def get_client(self) -> httpx.AsyncClient:
        """
        Get the shared HTTP client.

        Initializes lazily if startup() was not called, though explicit
        startup is preferred.

        Returns:
            The shared httpx.AsyncClient instance
        """
        if self._client is None:
            logger.warning(
                "HTTP client accessed before startup - initializing now. "
                "Consider calling startup() during app initialization."
            )
            await self.startup()
        return self._client
