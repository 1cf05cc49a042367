"""Prize cursor handling for campaigns.

The cursor is a flow marker for the big screen: it names the prize the next
draw is for. Moving it never touches prize quantities.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from .errors import NoMorePrizes, NotFound
from .models import Campaign, Prize

logger = logging.getLogger(__name__)


def current_prize_of(campaign: Campaign) -> Optional[Prize]:
    """Return the prize at ``campaign``'s cursor, or ``None`` past the end."""
    return campaign.current_prize


def advance_cursor(campaign: Campaign) -> Prize:
    """Move ``campaign``'s cursor to the next prize and return it.

    Raises
    ------
    NoMorePrizes
        If the cursor already points at the last prize (or past it). The
        cursor is left unchanged.
    """
    prize_count = len(campaign.prizes)
    if campaign.current_prize_index >= prize_count - 1:
        raise NoMorePrizes(campaign.id, prize_count)
    campaign.current_prize_index += 1
    return campaign.prizes[campaign.current_prize_index]


def rewind_cursor(campaign: Campaign) -> None:
    """Point ``campaign``'s cursor back at the first prize."""
    campaign.current_prize_index = 0


def load_campaign(session: Session, campaign_id: str) -> Campaign:
    """Fetch ``campaign_id`` or raise :class:`NotFound`."""
    campaign = session.get(Campaign, campaign_id)
    if campaign is None:
        raise NotFound("campaign", campaign_id)
    return campaign


class PrizeSequencer:
    """Storage-backed access to the prize cursor of each campaign."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def current_prize(self, campaign_id: str) -> Optional[Prize]:
        """Return the prize the next draw in ``campaign_id`` is for.

        Raises
        ------
        NotFound
            If the campaign does not exist.
        """
        with self._session_factory() as session:
            campaign = load_campaign(session, campaign_id)
            return current_prize_of(campaign)

    def advance(self, campaign_id: str) -> Prize:
        """Persist a one-step move of the cursor and return the new current prize.

        Raises
        ------
        NotFound
            If the campaign does not exist.
        NoMorePrizes
            If the current prize is the last one.
        """
        with self._session_factory.begin() as session:
            campaign = load_campaign(session, campaign_id)
            prize = advance_cursor(campaign)
            logger.info(
                "Campaign %s advanced to prize %d/%d",
                campaign_id,
                campaign.current_prize_index + 1,
                len(campaign.prizes),
            )
        return prize

    def reset(self, campaign_id: str) -> None:
        """Persist the cursor back at the first prize."""
        with self._session_factory.begin() as session:
            rewind_cursor(load_campaign(session, campaign_id))


__all__ = [
    "PrizeSequencer",
    "advance_cursor",
    "current_prize_of",
    "load_campaign",
    "rewind_cursor",
]
