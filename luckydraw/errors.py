"""
luckydraw.errors
================

Exception hierarchy for the draw coordination layer. Every error keeps the
identifiers involved so callers can log or map it without parsing messages.
"""

from __future__ import annotations

from typing import Optional


class LuckyDrawError(Exception):
    """Base exception for all luckydraw errors."""


class NotFound(LuckyDrawError):
    """Raised when a referenced campaign or participant does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class DuplicateContact(LuckyDrawError):
    """Raised when a contact is already checked in to the same campaign."""

    def __init__(self, campaign_id: str):
        self.campaign_id = campaign_id
        # The contact value itself is personal data and stays out of the message.
        super().__init__(
            f"contact is already registered for campaign '{campaign_id}'"
        )


class AlreadyWon(LuckyDrawError):
    """Raised when marking a participant who has already won."""

    def __init__(self, participant_id: str, won_prize: Optional[str]):
        self.participant_id = participant_id
        self.won_prize = won_prize
        super().__init__(
            f"participant '{participant_id}' already won '{won_prize}'"
        )


class NoEligibleParticipants(LuckyDrawError):
    """Raised when a draw is requested but nobody is left to win."""

    def __init__(self, campaign_id: str):
        self.campaign_id = campaign_id
        super().__init__(f"no eligible participants in campaign '{campaign_id}'")


class DrawInProgress(LuckyDrawError):
    """Raised when a draw is requested while another is running for the campaign."""

    def __init__(self, campaign_id: str):
        self.campaign_id = campaign_id
        super().__init__(f"a draw is already in progress for campaign '{campaign_id}'")


class NoMorePrizes(LuckyDrawError):
    """Raised when the prize cursor cannot move past the end of the prize list."""

    def __init__(self, campaign_id: str, prize_count: Optional[int] = None):
        self.campaign_id = campaign_id
        self.prize_count = prize_count
        super().__init__(f"campaign '{campaign_id}' has no more prizes to draw")


class PersistenceFailure(LuckyDrawError):
    """Raised when storing a draw result fails after a winner was selected.

    The draw is not retried: a second attempt could pick a different winner
    for what the audience already saw as a single event.
    """

    def __init__(self, campaign_id: str, participant_id: Optional[str] = None):
        self.campaign_id = campaign_id
        self.participant_id = participant_id
        super().__init__(f"failed to persist draw result for campaign '{campaign_id}'")


__all__ = [
    "LuckyDrawError",
    "NotFound",
    "DuplicateContact",
    "AlreadyWon",
    "NoEligibleParticipants",
    "DrawInProgress",
    "NoMorePrizes",
    "PersistenceFailure",
]
