"""Dispatch of inbound control messages from viewer and admin connections."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .broadcast import Connection, SessionBroadcaster, StartSpin
from .config import DEFAULT_SPIN_DURATION_MS

logger = logging.getLogger(__name__)


def _error(message: str) -> dict[str, Any]:
    return {"type": "error", "message": message}


def _campaign_id(message: Mapping[str, Any]) -> Optional[str]:
    value = message.get("campaign_id")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class ControlRouter:
    """Route ``join_campaign``, ``leave_campaign`` and ``trigger_spin`` messages.

    Messages are JSON objects with a ``type`` key. The router never selects a
    winner; ``trigger_spin`` only tells every screen in the room to start the
    spin animation.
    """

    def __init__(
        self,
        broadcaster: SessionBroadcaster,
        *,
        spin_duration_ms: int = DEFAULT_SPIN_DURATION_MS,
    ) -> None:
        self._broadcaster = broadcaster
        self._spin_duration_ms = spin_duration_ms
        self._handlers = {
            "join_campaign": self._handle_join,
            "leave_campaign": self._handle_leave,
            "trigger_spin": self._handle_trigger_spin,
        }

    async def handle(
        self, connection: Connection, message: Any
    ) -> Optional[dict[str, Any]]:
        """Apply ``message`` on behalf of ``connection``.

        Returns
        -------
        Optional[dict[str, Any]]
            Reply to send back on the same connection, or ``None``. Malformed
            and unknown messages produce an ``{"type": "error"}`` reply.
        """
        if not isinstance(message, Mapping):
            return _error("message must be a JSON object")
        msg_type = message.get("type")
        handler = self._handlers.get(msg_type) if isinstance(msg_type, str) else None
        if handler is None:
            logger.debug("Ignoring unknown control message type %r", msg_type)
            return _error(f"unknown message type: {msg_type!r}")
        return await handler(connection, message)

    def disconnect(self, connection: Connection) -> None:
        """Forget ``connection`` in every room. Called when the socket closes."""
        self._broadcaster.leave(connection)

    async def _handle_join(self, connection, message):
        campaign_id = _campaign_id(message)
        if campaign_id is None:
            return _error("join_campaign requires a campaign_id")
        self._broadcaster.join(connection, campaign_id)
        return {"type": "joined", "campaign_id": campaign_id}

    async def _handle_leave(self, connection, message):
        campaign_id = _campaign_id(message)
        if campaign_id is None:
            return _error("leave_campaign requires a campaign_id")
        self._broadcaster.leave(connection, campaign_id)
        return {"type": "left", "campaign_id": campaign_id}

    async def _handle_trigger_spin(self, connection, message):
        campaign_id = _campaign_id(message)
        if campaign_id is None:
            return _error("trigger_spin requires a campaign_id")
        duration = message.get("duration", self._spin_duration_ms)
        if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
            return _error("duration must be a non-negative integer (milliseconds)")
        await self._broadcaster.publish(campaign_id, StartSpin(duration=duration))
        return None


__all__ = ["ControlRouter"]
