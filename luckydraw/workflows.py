from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from .models import Campaign, Participant, STATUS_CHECKED_IN, STATUS_WON
from .sequencer import current_prize_of, load_campaign


def create_campaign(
    session: Session,
    name: str,
    category: str = "OFFLINE",
    prizes: Optional[Iterable[Mapping[str, Any]]] = None,
) -> Campaign:
    """Create a campaign with its ordered prize list.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    name : str
        Display name of the event.
    category : str, default: "OFFLINE"
        ``"OFFLINE"`` for in-person events or ``"ONLINE"`` for remote ones.
    prizes : Optional[Iterable[Mapping[str, Any]]]
        Prize entries in draw order, each with ``name`` and optional
        ``quantity``. Entries with a blank name are dropped.

    Returns
    -------
    Campaign
        The persisted campaign, with ``id`` populated and the prize cursor at 0.

    Raises
    ------
    ValueError
        If the name is blank, the category unknown, or a quantity invalid.
    """
    campaign = Campaign(name=name, category=category, prizes=prizes or [])
    session.add(campaign)
    session.flush()
    return campaign


def get_campaign(session: Session, campaign_id: str) -> Campaign:
    """Return the campaign with ``campaign_id`` or raise ``NotFound``."""
    return load_campaign(session, campaign_id)


def list_campaigns(session: Session) -> list[Campaign]:
    """Return every campaign, newest first."""
    return Campaign.list_newest_first(session)


def update_campaign(
    session: Session,
    campaign_id: str,
    *,
    name: Optional[str] = None,
    prizes: Optional[Iterable[Mapping[str, Any]]] = None,
) -> Campaign:
    """Rename a campaign and/or replace its prize list.

    Only the fields supplied are changed. Replacing the prizes leaves the
    prize cursor where it is; if it now points past the end, the campaign
    simply has no current prize until it is reset.
    """
    campaign = get_campaign(session, campaign_id)
    if name is not None:
        campaign.name = name
    if prizes is not None:
        campaign.replace_prizes(prizes)
    session.flush()
    return campaign


def delete_campaign(session: Session, campaign_id: str) -> None:
    """Delete a campaign together with its prizes and participants."""
    campaign = get_campaign(session, campaign_id)
    session.delete(campaign)
    session.flush()


def campaign_state(session: Session, campaign_id: str) -> dict[str, Any]:
    """Return everything a (re)connecting big screen needs to render.

    There is no event replay. A viewer joins the room and then calls this to
    catch up on whatever it missed.
    """
    campaign = get_campaign(session, campaign_id)
    participants = Participant.list_for_campaign(session, campaign_id)
    prize = current_prize_of(campaign)
    return {
        "campaign": campaign.to_json(),
        "current_prize": prize.to_json() if prize is not None else None,
        "participants": [p.to_json() for p in participants],
        "eligible_count": sum(1 for p in participants if p.status == STATUS_CHECKED_IN),
        "winners": [p.to_json() for p in participants if p.status == STATUS_WON],
    }
