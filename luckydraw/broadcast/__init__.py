"""Room membership and event fan-out."""

from .broadcaster import Connection, SessionBroadcaster
from .events import (
    BroadcastEvent,
    ParticipantDeleted,
    ParticipantJoined,
    StartSpin,
    WinnerSelected,
)

__all__ = [
    "BroadcastEvent",
    "Connection",
    "ParticipantDeleted",
    "ParticipantJoined",
    "SessionBroadcaster",
    "StartSpin",
    "WinnerSelected",
]
