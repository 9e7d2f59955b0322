import asyncio
import logging
import re
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import AuthenticationError, ConnectionError, ResponseError, TimeoutError

from ...config.provider import ConnectionTarget

logger = logging.getLogger(__name__)

# ConnectionRefusedError is the usual cause, the message covers wrapped errors
CONNECTION_REFUSED = re.compile(r"ECONNREFUSED|Connection refused|Connect call failed|Errno 111")


def create_client(target: ConnectionTarget) -> redis.Redis:
    """
    Create the Redis client for a connection target.

    The client holds a single connection so commands run in the order
    they are issued.
    """
    if target.is_unix_socket:
        return redis.Redis(
            unix_socket_path=target.socket_path,
            password=target.password,
            decode_responses=True,
            single_connection_client=True,
        )

    return redis.Redis(
        host=target.host,
        port=target.port,
        password=target.password,
        decode_responses=True,
        single_connection_client=True,
    )


def is_connection_refused(exc: BaseException) -> bool:
    """Check if an error (or anything it wraps) is a refused connection."""
    seen = set()
    error: Optional[BaseException] = exc
    while error is not None and id(error) not in seen:
        if isinstance(error, ConnectionRefusedError):
            return True
        if CONNECTION_REFUSED.search(str(error)):
            return True
        seen.add(id(error))
        error = error.__cause__ or error.__context__
    return False


class StorageModule:
    """Black box Redis connection owner."""

    def __init__(
        self,
        target: ConnectionTarget,
        reconnect_delay: float = 1.0,
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize storage module.

        Args:
            target: Resolved connection target
            reconnect_delay: Seconds to wait between connection attempts
            client: Optional pre-built Redis client
        """
        self.target = target
        self.reconnect_delay = reconnect_delay
        self._client = client
        self._closed = False

    @property
    def client(self) -> redis.Redis:
        """
        The Redis client, created on first use.

        Raises:
            RuntimeError: If the module has been disconnected
        """
        if self._closed:
            raise RuntimeError("Storage module is closed")
        if self._client is None:
            self._client = create_client(self.target)
        return self._client

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> bool:
        """
        Connect to Redis and get it ready for the first load.

        Returns:
            True if the brain can be loaded, False if authentication failed
            or the module was closed before a connection was made

        Logic:
        1. Ping until the server answers (authenticates when credentials are set)
        2. Run the ready check unless it is disabled for this target
        """
        try:
            connected = await self._wait_until_connected()
        except AuthenticationError:
            logger.error("Failed to authenticate to Redis")
            return False

        if not connected:
            return False

        if self.target.has_credentials:
            logger.info("Successfully authenticated to Redis")
        else:
            logger.debug("Successfully connected to Redis")

        if not self.target.skip_ready_check:
            await self._ready_check()

        return True

    async def _wait_until_connected(self) -> bool:
        while not self._closed:
            try:
                await self.client.ping()
                return True
            except AuthenticationError:
                raise
            except ResponseError as e:
                # Proxies such as Twemproxy reject PING but the connection is up
                logger.debug(f"Redis rejected PING, treating as connected: {e}")
                return True
            except (ConnectionError, TimeoutError) as e:
                self._report_error(e)
            await asyncio.sleep(self.reconnect_delay)
        return False

    async def _ready_check(self) -> None:
        """Wait for the server to finish loading its dataset."""
        while True:
            info = await self.client.info("persistence")
            if not int(info.get("loading", 0)):
                return

            delay = min(float(info.get("loading_eta_seconds", 1)), 1.0)
            logger.info(f"Redis server still loading, retrying in {delay:.1f}s")
            await asyncio.sleep(delay)

    def _report_error(self, exc: Exception) -> None:
        if is_connection_refused(exc):
            # Expected while Redis is still booting
            logger.debug(f"Redis refused connection: {exc}")
            return
        logger.error(f"Redis connection error: {exc}", exc_info=exc)

    async def disconnect(self) -> None:
        """Close storage connection."""
        self._closed = True
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = ["StorageModule", "create_client", "is_connection_refused"]
