"""Typed events published to campaign rooms."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Union

from ..models.participant import STATUS_CHECKED_IN, STATUS_WON

if TYPE_CHECKING:
    from ..models import Participant


@dataclass(frozen=True)
class ParticipantJoined:
    """A participant checked in to the campaign."""

    event_name: ClassVar[str] = "participant_joined"

    id: str
    campaign_id: str
    name: str
    contact: Optional[str] = None

    @classmethod
    def from_participant(cls, participant: "Participant") -> "ParticipantJoined":
        return cls(
            id=participant.id,
            campaign_id=participant.campaign_id,
            name=participant.name,
            contact=participant.contact,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "campaign_id": self.campaign_id,
            "name": self.name,
            "contact": self.contact,
            "status": STATUS_CHECKED_IN,
        }


@dataclass(frozen=True)
class ParticipantDeleted:
    """A participant was removed by the organizer."""

    event_name: ClassVar[str] = "participant_deleted"

    id: str

    def to_payload(self) -> dict[str, Any]:
        return {"id": self.id}


@dataclass(frozen=True)
class WinnerSelected:
    """A draw picked ``id`` as the winner of ``won_prize``."""

    event_name: ClassVar[str] = "winner_selected"

    id: str
    campaign_id: str
    name: str
    won_prize: str
    contact: Optional[str] = None

    @classmethod
    def from_participant(cls, participant: "Participant") -> "WinnerSelected":
        if not participant.has_won or participant.won_prize is None:
            raise ValueError("participant has not won a prize")
        return cls(
            id=participant.id,
            campaign_id=participant.campaign_id,
            name=participant.name,
            won_prize=participant.won_prize,
            contact=participant.contact,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "campaign_id": self.campaign_id,
            "name": self.name,
            "contact": self.contact,
            "status": STATUS_WON,
            "won_prize": self.won_prize,
        }


@dataclass(frozen=True)
class StartSpin:
    """Visual cue for every big screen to start the spin animation."""

    event_name: ClassVar[str] = "start_spin"

    duration: int

    def to_payload(self) -> dict[str, Any]:
        return {"duration": self.duration}


BroadcastEvent = Union[ParticipantJoined, ParticipantDeleted, WinnerSelected, StartSpin]

__all__ = [
    "BroadcastEvent",
    "ParticipantDeleted",
    "ParticipantJoined",
    "StartSpin",
    "WinnerSelected",
]
