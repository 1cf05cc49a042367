"""Per-campaign rooms and event fan-out to connected viewers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol, Set

from .events import BroadcastEvent

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """A viewer connection able to receive named JSON events."""

    async def send(self, event_name: str, payload: dict[str, Any]) -> None:
        ...


class SessionBroadcaster:
    """Maintain campaign rooms and deliver events to every member.

    Rooms hold live connections only. There is no message log: a viewer that
    reconnects re-fetches the campaign state instead of replaying events.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Set[Connection]] = {}

    def join(self, connection: Connection, campaign_id: str) -> None:
        """Add ``connection`` to the room of ``campaign_id``. Joining twice is a no-op."""
        room = self._rooms.setdefault(campaign_id, set())
        if connection in room:
            return
        room.add(connection)
        logger.info(
            "Connection joined campaign %s (members: %d)", campaign_id, len(room)
        )

    def leave(self, connection: Connection, campaign_id: Optional[str] = None) -> None:
        """Remove ``connection`` from one room, or from every room when ``campaign_id`` is omitted."""
        targets = [campaign_id] if campaign_id is not None else list(self._rooms)
        for room_id in targets:
            room = self._rooms.get(room_id)
            if room is None or connection not in room:
                continue
            room.discard(connection)
            if not room:
                del self._rooms[room_id]
            logger.info("Connection left campaign %s", room_id)

    def members(self, campaign_id: str) -> frozenset:
        """Return the connections currently joined to ``campaign_id``."""
        return frozenset(self._rooms.get(campaign_id, ()))

    def room_count(self) -> int:
        return len(self._rooms)

    async def publish(self, campaign_id: str, event: BroadcastEvent) -> int:
        """Deliver ``event`` to every connection joined to ``campaign_id``.

        The member set is captured before the first send, so connections that
        join while the event is in flight do not receive it. A connection whose
        send fails is dropped from all rooms; the others still get the event.

        Returns
        -------
        int
            Number of connections the event was delivered to.
        """
        members = list(self._rooms.get(campaign_id, ()))
        if not members:
            logger.debug("No viewers for %s on campaign %s", event.event_name, campaign_id)
            return 0

        payload = event.to_payload()
        results = await asyncio.gather(
            *(conn.send(event.event_name, payload) for conn in members),
            return_exceptions=True,
        )

        delivered = 0
        for conn, result in zip(members, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Dropping connection after failed %s send: %s",
                    event.event_name,
                    result,
                )
                self.leave(conn)
            else:
                delivered += 1
        logger.debug(
            "Published %s to %d/%d viewers of campaign %s",
            event.event_name,
            delivered,
            len(members),
            campaign_id,
        )
        return delivered


__all__ = ["Connection", "SessionBroadcaster"]
