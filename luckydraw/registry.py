"""Participant check-in and win bookkeeping."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from .broadcast import ParticipantDeleted, ParticipantJoined, SessionBroadcaster
from .errors import AlreadyWon, DuplicateContact, NotFound
from .models import Participant, STATUS_CHECKED_IN, STATUS_WON
from .models.participant import CONTACT_CONSTRAINT
from .models.utils import normalize_contact
from .sequencer import load_campaign, rewind_cursor

logger = logging.getLogger(__name__)

CAMPAIGN_FK = "fk_participants_campaign_id_campaigns"

# what SQLite reports in place of a constraint name
_SQLITE_CONTACT_CONFLICT = (
    "UNIQUE constraint failed: participants.campaign_id, participants.contact"
)
_SQLITE_FK_FAILURE = "FOREIGN KEY constraint failed"


def _violates(exc: IntegrityError, constraint: str, sqlite_marker: str) -> bool:
    """Return whether ``exc`` was raised by ``constraint``.

    PostgreSQL drivers report the constraint name. SQLite does not, so its
    message is matched against ``sqlite_marker`` instead.
    """
    diag = getattr(exc.orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name == constraint
    message = str(exc.orig)
    return constraint in message or sqlite_marker in message


class ParticipantRegistry:
    """Track check-in and win state of participants per campaign.

    Plain methods are blocking storage operations; each runs in its own
    transaction. The coroutines :meth:`register` and :meth:`remove` run the
    storage step in a worker thread and then publish the change to the
    campaign room.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        broadcaster: Optional[SessionBroadcaster] = None,
    ) -> None:
        """Create a registry bound to a SQLAlchemy session factory.

        Parameters
        ----------
        session_factory : sessionmaker
            Factory producing sessions with ``expire_on_commit=False`` so that
            returned records stay readable after their transaction closes.
        broadcaster : Optional[SessionBroadcaster], default: None
            Broadcaster notified of check-ins and removals. When omitted the
            registry is storage-only.
        """
        self._session_factory = session_factory
        self._broadcaster = broadcaster

    async def register(
        self, campaign_id: str, name: str, contact: Optional[str] = None
    ) -> Participant:
        """Check a new participant in and announce them to the campaign room.

        Raises
        ------
        NotFound
            If the campaign does not exist.
        DuplicateContact
            If ``contact`` is already used by a participant of this campaign.
        """
        participant = await asyncio.to_thread(
            self.create_participant, campaign_id, name, contact
        )
        if self._broadcaster is not None:
            await self._broadcaster.publish(
                campaign_id, ParticipantJoined.from_participant(participant)
            )
        return participant

    def create_participant(
        self, campaign_id: str, name: str, contact: Optional[str] = None
    ) -> Participant:
        """Insert a ``CHECKED_IN`` participant without publishing anything."""
        contact = normalize_contact(contact)
        try:
            with self._session_factory.begin() as session:
                load_campaign(session, campaign_id)
                if contact is not None and (
                    Participant.get_by_contact(session, campaign_id, contact)
                    is not None
                ):
                    raise DuplicateContact(campaign_id)

                last_seq = session.scalar(
                    select(func.max(Participant.seq)).where(
                        Participant.campaign_id == campaign_id
                    )
                )
                participant = Participant(
                    campaign_id=campaign_id,
                    name=name,
                    contact=contact,
                    seq=(last_seq or 0) + 1,
                )
                session.add(participant)
                session.flush()
        except IntegrityError as exc:
            # A concurrent check-in with the same contact won the race to the
            # unique constraint.
            if contact is not None and _violates(
                exc, CONTACT_CONSTRAINT, _SQLITE_CONTACT_CONFLICT
            ):
                raise DuplicateContact(campaign_id) from exc
            if _violates(exc, CAMPAIGN_FK, _SQLITE_FK_FAILURE):
                # campaign deleted while the check-in was in flight
                raise NotFound("campaign", campaign_id) from exc
            logger.error(
                "Check-in to campaign %s violated a constraint", campaign_id, exc_info=True
            )
            raise

        logger.info(
            "Participant %s checked in to campaign %s", participant.id, campaign_id
        )
        return participant

    def get(self, participant_id: str) -> Participant:
        """Return the participant with ``participant_id`` or raise :class:`NotFound`."""
        with self._session_factory() as session:
            participant = session.get(Participant, participant_id)
            if participant is None:
                raise NotFound("participant", participant_id)
            return participant

    def list_eligible(self, campaign_id: str) -> list[Participant]:
        """Return the ``CHECKED_IN`` participants of ``campaign_id`` in check-in order."""
        with self._session_factory() as session:
            return Participant.list_for_campaign(
                session, campaign_id, status=STATUS_CHECKED_IN
            )

    def list_participants(self, campaign_id: str) -> list[Participant]:
        """Return every participant of ``campaign_id`` in check-in order."""
        with self._session_factory() as session:
            return Participant.list_for_campaign(session, campaign_id)

    def mark_won(self, participant_id: str, prize_name: str) -> Participant:
        """Record that ``participant_id`` won ``prize_name``.

        Raises
        ------
        NotFound
            If the participant does not exist.
        AlreadyWon
            If the participant already won. The stored prize is left as is.
        """
        if not prize_name or not prize_name.strip():
            raise ValueError("prize_name must not be empty")

        with self._session_factory.begin() as session:
            participant = session.get(Participant, participant_id)
            if participant is None:
                raise NotFound("participant", participant_id)
            if participant.has_won:
                raise AlreadyWon(participant_id, participant.won_prize)
            participant.status = STATUS_WON
            participant.won_prize = prize_name.strip()
            session.flush()
        return participant

    async def remove(self, participant_id: str) -> None:
        """Delete a participant and announce the removal to its campaign room.

        Raises
        ------
        NotFound
            If the participant does not exist.
        """
        campaign_id = await asyncio.to_thread(self.delete_participant, participant_id)
        if self._broadcaster is not None:
            await self._broadcaster.publish(
                campaign_id, ParticipantDeleted(id=participant_id)
            )

    def delete_participant(self, participant_id: str) -> str:
        """Delete a participant without publishing; return its campaign id."""
        with self._session_factory.begin() as session:
            participant = session.get(Participant, participant_id)
            if participant is None:
                raise NotFound("participant", participant_id)
            campaign_id = participant.campaign_id
            session.delete(participant)
        logger.info("Participant %s removed from campaign %s", participant_id, campaign_id)
        return campaign_id

    def reset_campaign(self, campaign_id: str) -> int:
        """Return every winner of ``campaign_id`` to ``CHECKED_IN`` and rewind the prize cursor.

        Check-ins are kept, so a new draw session can start without collecting
        them again.

        Returns
        -------
        int
            Number of participants whose win was cleared.

        Raises
        ------
        NotFound
            If the campaign does not exist.
        """
        with self._session_factory.begin() as session:
            campaign = load_campaign(session, campaign_id)
            result = session.execute(
                update(Participant)
                .where(
                    Participant.campaign_id == campaign_id,
                    Participant.status == STATUS_WON,
                )
                .values(status=STATUS_CHECKED_IN, won_prize=None)
                .execution_options(synchronize_session="fetch")
            )
            rewind_cursor(campaign)
            cleared = result.rowcount or 0
        logger.info("Campaign %s reset; %d winners cleared", campaign_id, cleared)
        return cleared


__all__ = ["ParticipantRegistry"]
