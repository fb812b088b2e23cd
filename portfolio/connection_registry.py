"""WebSocket connection registry for managing active client connections."""

import asyncio
from typing import Generic, TypeVar

from portfolio.logging import logger

ChannelT = TypeVar("ChannelT")


class ConnectionRegistry(Generic[ChannelT]):
    """
    In-memory mapping of connection ids to live channels.

    All operations run under a single ``asyncio.Lock`` so that connects and
    disconnects racing with a broadcast never observe a half-updated map.
    ``all()`` returns a snapshot, callers iterate it without holding the
    lock.
    """

    def __init__(self) -> None:
        self._channels: dict[str, ChannelT] = {}
        self._lock = asyncio.Lock()

    async def register(
        self, connection_id: str, channel: ChannelT
    ) -> ChannelT | None:
        """
        Insert or overwrite the channel for ``connection_id`` (last write wins).

        The previous channel, if any, is not closed here. It is returned so
        the caller can close it.

        Args:
            connection_id: Connection identifier.
            channel: Live transport handle.

        Returns:
            The channel previously registered under the id, or None.
        """
        async with self._lock:
            previous = self._channels.get(connection_id)
            self._channels[connection_id] = channel

        logger.debug(
            f"channel object ({id(channel)}) registered with key {connection_id}"
        )
        return previous

    async def deregister(
        self, connection_id: str, channel: ChannelT | None = None
    ) -> bool:
        """
        Remove the mapping for ``connection_id`` if present.

        Args:
            connection_id: Connection identifier.
            channel: When given, the mapping is only removed if the id still
                points to this exact channel, so a stale close cannot evict
                a newer registration under the same id.

        Returns:
            True if a mapping was removed, False otherwise.
        """
        async with self._lock:
            current = self._channels.get(connection_id)
            if current is None:
                return False
            if channel is not None and current is not channel:
                return False
            del self._channels[connection_id]

        logger.debug(
            f"channel object ({id(current)}) removed for key {connection_id}"
        )
        return True

    async def lookup(self, connection_id: str) -> ChannelT | None:
        """Return the channel registered under ``connection_id``, or None."""
        async with self._lock:
            return self._channels.get(connection_id)

    async def all(self) -> list[tuple[str, ChannelT]]:
        """Return a snapshot of ``(connection_id, channel)`` pairs."""
        async with self._lock:
            return list(self._channels.items())

    def __len__(self) -> int:
        return len(self._channels)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._channels
