from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .campaign import Campaign, Prize, CAMPAIGN_CATEGORIES  # noqa: F401
from .participant import (  # noqa: F401
    Participant,
    STATUS_CHECKED_IN,
    STATUS_WON,
)

__all__ = [
    "Base",
    "Campaign",
    "Prize",
    "CAMPAIGN_CATEGORIES",
    "Participant",
    "STATUS_CHECKED_IN",
    "STATUS_WON",
]
