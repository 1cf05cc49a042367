"""Database model for checked-in participants."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import Base
from .utils import generate_id, normalize_contact

if TYPE_CHECKING:
    from .campaign import Campaign

STATUS_CHECKED_IN = "CHECKED_IN"
STATUS_WON = "WON"

CONTACT_CONSTRAINT = "uq_participants_campaign_contact"


class Participant(Base):
    """An attendee checked in to a campaign.

    A participant starts ``CHECKED_IN`` and moves to ``WON`` exactly once,
    when a draw selects them. Only a campaign reset moves them back.
    """

    __tablename__ = "participants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    """UUID primary key."""

    campaign_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    contact: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Phone number or e-mail. Unique within a campaign when present."""

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=STATUS_CHECKED_IN
    )
    """``"CHECKED_IN"`` or ``"WON"``."""

    won_prize: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Name of the prize won. Set together with ``status = "WON"``."""

    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Check-in order within the campaign, used for stable listings."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    campaign: Mapped["Campaign"] = relationship(back_populates="participants")

    __table_args__ = (
        UniqueConstraint("campaign_id", "contact", name=CONTACT_CONSTRAINT),
        Index("ix_participants_campaign_status", "campaign_id", "status"),
    )

    def __init__(
        self,
        *,
        campaign_id: str,
        name: str,
        contact: Optional[str] = None,
        seq: int = 0,
        id: Optional[str] = None,
    ) -> None:
        name = (name or "").strip()
        if not name:
            raise ValueError("participant name must not be empty")
        self.campaign_id = campaign_id
        self.name = name
        self.contact = normalize_contact(contact)
        self.status = STATUS_CHECKED_IN
        self.won_prize = None
        self.seq = seq
        if id is not None:
            self.id = id

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        # contact is deliberately left out; it is personal data
        return (
            f"<Participant(id={self.id}, campaign_id={self.campaign_id}, "
            f"name='{self.name}', status={self.status}, won_prize={self.won_prize!r})>"
        )

    @property
    def has_won(self) -> bool:
        return self.status == STATUS_WON

    @classmethod
    def get_by_contact(
        cls, session: Session, campaign_id: str, contact: str
    ) -> Optional["Participant"]:
        """Return the participant in ``campaign_id`` registered with ``contact``."""

        return session.scalar(
            select(cls).where(cls.campaign_id == campaign_id, cls.contact == contact)
        )

    @classmethod
    def list_for_campaign(
        cls,
        session: Session,
        campaign_id: str,
        *,
        status: Optional[str] = None,
    ) -> list["Participant"]:
        """Return participants of ``campaign_id`` in check-in order.

        When ``status`` is given only participants in that state are returned.
        """

        stmt = select(cls).where(cls.campaign_id == campaign_id)
        if status is not None:
            stmt = stmt.where(cls.status == status)
        stmt = stmt.order_by(cls.seq, cls.created_at)
        return list(session.scalars(stmt))

    def to_json(self) -> dict[str, Any]:
        """Return the wire representation used in API responses and events."""
        return {
            "id": self.id,
            "campaign_id": self.campaign_id,
            "name": self.name,
            "contact": self.contact,
            "status": self.status,
            "won_prize": self.won_prize,
        }


__all__ = ["CONTACT_CONSTRAINT", "Participant", "STATUS_CHECKED_IN", "STATUS_WON"]
