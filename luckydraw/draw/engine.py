"""Draw engine selecting winners for a campaign's current prize."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from .selection import Chooser, choose_uniform
from ..broadcast import SessionBroadcaster, WinnerSelected
from ..errors import (
    DrawInProgress,
    NoEligibleParticipants,
    NoMorePrizes,
    NotFound,
    PersistenceFailure,
)
from ..models import Participant, Prize
from ..registry import ParticipantRegistry
from ..sequencer import PrizeSequencer

logger = logging.getLogger(__name__)


class DrawEngine:
    """Run live draws with at most one draw in flight per campaign."""

    def __init__(
        self,
        registry: ParticipantRegistry,
        sequencer: PrizeSequencer,
        broadcaster: SessionBroadcaster,
        *,
        chooser: Optional[Chooser] = None,
    ) -> None:
        """Create a draw engine.

        Parameters
        ----------
        registry : ParticipantRegistry
            Source of the eligible pool and sink for the win.
        sequencer : PrizeSequencer
            Supplies the prize the draw is for.
        broadcaster : SessionBroadcaster
            Receives the ``winner_selected`` event.
        chooser : Optional[Chooser], default: None
            Selection strategy. Typically omitted, in which case
            :func:`~luckydraw.draw.selection.choose_uniform` backed by the OS
            CSPRNG is used. Tests pass a seeded or scripted chooser.
        """
        self._registry = registry
        self._sequencer = sequencer
        self._broadcaster = broadcaster
        self._chooser: Chooser = chooser or choose_uniform
        self._in_flight: Set[str] = set()

    def in_progress(self, campaign_id: str) -> bool:
        """Return whether a draw is currently running for ``campaign_id``."""
        return campaign_id in self._in_flight

    async def draw(self, campaign_id: str) -> Participant:
        """Select, persist and announce the winner of the current prize.

        Returns
        -------
        Participant
            The winner, already marked ``WON`` with the current prize's name.

        Raises
        ------
        DrawInProgress
            If another draw for ``campaign_id`` has not finished yet. Nothing
            is read from or written to storage in that case.
        NotFound
            If the campaign does not exist.
        NoMorePrizes
            If the prize cursor is past the end of the prize list.
        NoEligibleParticipants
            If every participant has already won (or nobody checked in).
        PersistenceFailure
            If storing the win failed, or the selected participant was removed
            before the win could be stored. The draw is not retried.

        Notes
        -----
        The in-flight check and acquisition happen before the first ``await``,
        so two draw requests for the same campaign can never both pass it.
        The flag is released on every exit path.
        """
        if campaign_id in self._in_flight:
            logger.info("Rejected draw for campaign %s: draw in progress", campaign_id)
            raise DrawInProgress(campaign_id)
        self._in_flight.add(campaign_id)

        try:
            prize, pool = await asyncio.to_thread(self._load_round, campaign_id)
            winner = self._chooser(pool)
            logger.info(
                "Campaign %s: selected %s from %d eligible for '%s'",
                campaign_id,
                winner.id,
                len(pool),
                prize.name,
            )
            try:
                winner = await asyncio.to_thread(
                    self._registry.mark_won, winner.id, prize.name
                )
            except NotFound as exc:
                # removed between selection and persistence
                logger.error(
                    "Winner %s of campaign %s vanished before the win was stored",
                    winner.id,
                    campaign_id,
                )
                raise PersistenceFailure(campaign_id, winner.id) from exc
            except SQLAlchemyError as exc:
                logger.error(
                    "Failed to persist winner %s for campaign %s",
                    winner.id,
                    campaign_id,
                    exc_info=True,
                )
                raise PersistenceFailure(campaign_id, winner.id) from exc
        finally:
            self._in_flight.discard(campaign_id)

        await self._broadcaster.publish(
            campaign_id, WinnerSelected.from_participant(winner)
        )
        return winner

    async def reset(self, campaign_id: str) -> int:
        """Clear every win of ``campaign_id`` and rewind its prize cursor.

        Shares the in-flight flag with :meth:`draw`, so a reset never
        interleaves with a draw that is still persisting its winner.

        Returns
        -------
        int
            Number of participants whose win was cleared.

        Raises
        ------
        DrawInProgress
            If a draw (or another reset) for ``campaign_id`` is running.
        NotFound
            If the campaign does not exist.
        """
        if campaign_id in self._in_flight:
            logger.info("Rejected reset for campaign %s: draw in progress", campaign_id)
            raise DrawInProgress(campaign_id)
        self._in_flight.add(campaign_id)
        try:
            return await asyncio.to_thread(self._registry.reset_campaign, campaign_id)
        finally:
            self._in_flight.discard(campaign_id)

    def _load_round(self, campaign_id: str) -> tuple[Prize, list[Participant]]:
        """Return the current prize and eligible pool, validating both."""
        prize = self._sequencer.current_prize(campaign_id)
        if prize is None:
            raise NoMorePrizes(campaign_id)
        pool = self._registry.list_eligible(campaign_id)
        if not pool:
            raise NoEligibleParticipants(campaign_id)
        return prize, pool


__all__ = ["DrawEngine"]
