"""Database models for campaigns and their ordered prize lists."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from .base import Base
from .utils import generate_id
from ..db.utils import dt_iso

if TYPE_CHECKING:
    from .participant import Participant

CAMPAIGN_CATEGORIES = ("OFFLINE", "ONLINE")
"""Supported campaign categories: in-person and remote events."""


class Campaign(Base):
    """A single lucky-draw event with its own participants and prizes."""

    __tablename__ = "campaigns"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    """UUID primary key."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    """Display name shown on the big screen."""

    category: Mapped[str] = mapped_column(String(20), nullable=False, default="OFFLINE")
    """Either ``"OFFLINE"`` (in-person) or ``"ONLINE"`` (remote)."""

    current_prize_index: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    """Cursor into :attr:`prizes` pointing at the prize currently being drawn."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    prizes: Mapped[list["Prize"]] = relationship(
        back_populates="campaign",
        cascade="all, delete-orphan",
        order_by="Prize.position",
    )
    """Ordered prize list. The list order is the draw order."""

    participants: Mapped[list["Participant"]] = relationship(
        back_populates="campaign",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("current_prize_index >= 0", name="prize_cursor_non_negative"),
    )

    def __init__(
        self,
        *,
        name: str,
        category: str = "OFFLINE",
        prizes: Optional[Iterable[Mapping[str, Any]]] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.name = name
        self.category = category
        self.current_prize_index = 0
        if id is not None:
            self.id = id
        if created_at is not None:
            self.created_at = created_at
        if prizes is not None:
            self.replace_prizes(prizes)

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Campaign(id={self.id}, name='{self.name}', category={self.category}, "
            f"current_prize_index={self.current_prize_index})>"
        )

    @validates("name")
    def _validate_name(self, _key: str, value: str) -> str:
        if value is None or not value.strip():
            raise ValueError("campaign name must not be empty")
        return value.strip()

    @validates("category")
    def _validate_category(self, _key: str, value: str) -> str:
        normalized = (value or "").strip().upper()
        if normalized not in CAMPAIGN_CATEGORIES:
            raise ValueError(
                f"campaign category must be one of {', '.join(CAMPAIGN_CATEGORIES)}"
            )
        return normalized

    @classmethod
    def list_newest_first(cls, session: Session) -> list["Campaign"]:
        """Return every campaign ordered by creation time, newest first."""

        stmt = select(cls).order_by(cls.created_at.desc(), cls.id)
        return list(session.scalars(stmt))

    @property
    def current_prize(self) -> Optional["Prize"]:
        """Prize at the cursor, or ``None`` once the cursor is past the end."""
        if 0 <= self.current_prize_index < len(self.prizes):
            return self.prizes[self.current_prize_index]
        return None

    def replace_prizes(self, prizes: Iterable[Mapping[str, Any]]) -> None:
        """Replace the prize list with ``prizes``, in the given order.

        Each entry is a mapping with ``name`` and optional ``quantity``
        (default 1). Entries with a blank name are skipped, matching what the
        organizer dashboard submits for unfilled rows.

        Raises
        ------
        ValueError
            If a quantity is negative or not an integer.
        """
        new_prizes: list[Prize] = []
        for entry in prizes:
            name = (entry.get("name") or "").strip()
            if not name:
                continue
            quantity = entry.get("quantity", 1)
            new_prizes.append(
                Prize(name=name, quantity=quantity, position=len(new_prizes))
            )
        self.prizes = new_prizes

    def to_json(self, *, include_prizes: bool = True) -> dict[str, Any]:
        """Return a JSON-serializable representation of this campaign."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.category,
            "current_prize_index": self.current_prize_index,
            "created_at": dt_iso(self.created_at),
        }
        if include_prizes:
            data["prizes"] = [prize.to_json() for prize in self.prizes]
        return data


class Prize(Base):
    """One entry in a campaign's ordered prize list."""

    __tablename__ = "prizes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    campaign_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    position: Mapped[int] = mapped_column(Integer, nullable=False)
    """Zero-based position in the campaign's draw order."""

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Number of units on offer. Shown to the audience; draws never decrement it."""

    campaign: Mapped["Campaign"] = relationship(back_populates="prizes")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
    )

    def __init__(self, *, name: str, quantity: int = 1, position: int = 0) -> None:
        self.name = name
        self.quantity = quantity
        self.position = position

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Prize(campaign_id={cid}, position={pos}, name={name}, quantity={qty})>".format(
            cid=self.campaign_id,
            pos=self.position,
            name=self.name,
            qty=self.quantity,
        )

    @validates("quantity")
    def _validate_quantity(self, _key: str, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("prize quantity must be an integer")
        if value < 0:
            raise ValueError("prize quantity must be >= 0")
        return value

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "quantity": self.quantity}


__all__ = ["CAMPAIGN_CATEGORIES", "Campaign", "Prize"]
