"""Pydantic request bodies for the HTTP adapter."""
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class PrizeIn(BaseModel):
    name: str
    quantity: int = Field(default=1, ge=0)


class CampaignCreate(BaseModel):
    name: str = Field(min_length=1)
    type: str = "OFFLINE"  # "OFFLINE" | "ONLINE"
    prizes: list[PrizeIn] = Field(default_factory=list)


class CampaignUpdate(BaseModel):
    name: Optional[str] = None
    prizes: Optional[list[PrizeIn]] = None


class ParticipantCreate(BaseModel):
    campaign_id: str
    name: str = Field(min_length=1)
    # Older check-in forms post the contact as "phone"
    contact: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("contact", "phone")
    )
