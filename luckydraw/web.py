"""
FastAPI adapter exposing the draw coordination layer over HTTP and WebSocket.

The adapter only translates requests into calls on the registry, sequencer,
draw engine and workflows, and maps domain errors to status codes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from . import workflows
from .broadcast import SessionBroadcaster
from .config import Settings
from .control import ControlRouter
from .db.engine import get_sessionmaker, make_engine
from .draw import Chooser, DrawEngine
from .errors import (
    AlreadyWon,
    DrawInProgress,
    DuplicateContact,
    LuckyDrawError,
    NoEligibleParticipants,
    NoMorePrizes,
    NotFound,
    PersistenceFailure,
)
from .registry import ParticipantRegistry
from .schemas import CampaignCreate, CampaignUpdate, ParticipantCreate
from .sequencer import PrizeSequencer

logger = logging.getLogger(__name__)

# (status code, machine readable code) per domain error
_ERROR_STATUS = {
    NotFound: (404, "not_found"),
    DuplicateContact: (409, "duplicate_contact"),
    AlreadyWon: (409, "already_won"),
    DrawInProgress: (409, "draw_in_progress"),
    NoEligibleParticipants: (409, "no_eligible_participants"),
    NoMorePrizes: (409, "no_more_prizes"),
    PersistenceFailure: (500, "persistence_failure"),
}


@dataclass
class Services:
    """Components shared by every request of one application instance."""

    session_factory: sessionmaker
    broadcaster: SessionBroadcaster
    registry: ParticipantRegistry
    sequencer: PrizeSequencer
    engine: DrawEngine
    router: ControlRouter


class WebSocketConnection:
    """Room member backed by a FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def send(self, event_name: str, payload: dict[str, Any]) -> None:
        await self._websocket.send_json({"event": event_name, "data": payload})


def build_services(
    settings: Settings,
    *,
    session_factory: Optional[sessionmaker] = None,
    chooser: Optional[Chooser] = None,
) -> Services:
    """Wire the registry, sequencer, engine and broadcaster together."""
    if session_factory is None:
        session_factory = get_sessionmaker(make_engine(settings.database_url))
    broadcaster = SessionBroadcaster()
    registry = ParticipantRegistry(session_factory, broadcaster)
    sequencer = PrizeSequencer(session_factory)
    return Services(
        session_factory=session_factory,
        broadcaster=broadcaster,
        registry=registry,
        sequencer=sequencer,
        engine=DrawEngine(registry, sequencer, broadcaster, chooser=chooser),
        router=ControlRouter(broadcaster, spin_duration_ms=settings.spin_duration_ms),
    )


async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status, code = 400, "error"
    for error_type, mapping in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status, code = mapping
            break
    if isinstance(exc, PersistenceFailure):
        # Details stay in the server log for the operator.
        return JSONResponse(
            status_code=status,
            content={"error": "The operation failed. Please try again.", "code": code},
        )
    return JSONResponse(status_code=status, content={"error": str(exc), "code": code})


async def _value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": str(exc), "code": "invalid"})


def create_app(
    settings: Optional[Settings] = None,
    *,
    session_factory: Optional[sessionmaker] = None,
    chooser: Optional[Chooser] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings], default: None
        Runtime settings. Read from the environment when omitted.
    session_factory : Optional[sessionmaker], default: None
        Session factory to use instead of one built from
        ``settings.database_url``. Tests pass one bound to a temporary database.
    chooser : Optional[Chooser], default: None
        Winner selection strategy forwarded to :class:`DrawEngine`.
    """
    settings = settings or Settings.from_env()
    services = build_services(settings, session_factory=session_factory, chooser=chooser)

    app = FastAPI(title="luckydraw")
    app.state.services = services
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(LuckyDrawError, _domain_error_handler)
    app.add_exception_handler(ValueError, _value_error_handler)

    # --- campaigns ---

    @app.post("/api/campaigns")
    def create_campaign(body: CampaignCreate) -> dict[str, Any]:
        with services.session_factory.begin() as session:
            campaign = workflows.create_campaign(
                session,
                body.name,
                category=body.type,
                prizes=[p.model_dump() for p in body.prizes],
            )
            return campaign.to_json()

    @app.get("/api/campaigns")
    def list_campaigns() -> list[dict[str, Any]]:
        with services.session_factory() as session:
            return [c.to_json() for c in workflows.list_campaigns(session)]

    @app.get("/api/campaigns/{campaign_id}")
    def get_campaign(campaign_id: str) -> dict[str, Any]:
        with services.session_factory() as session:
            state = workflows.campaign_state(session, campaign_id)
        state["draw_in_progress"] = services.engine.in_progress(campaign_id)
        return state

    @app.put("/api/campaigns/{campaign_id}")
    def update_campaign(campaign_id: str, body: CampaignUpdate) -> dict[str, Any]:
        prizes = None
        if body.prizes is not None:
            prizes = [p.model_dump() for p in body.prizes]
        with services.session_factory.begin() as session:
            campaign = workflows.update_campaign(
                session, campaign_id, name=body.name, prizes=prizes
            )
            return campaign.to_json()

    @app.delete("/api/campaigns/{campaign_id}")
    def delete_campaign(campaign_id: str) -> dict[str, Any]:
        with services.session_factory.begin() as session:
            workflows.delete_campaign(session, campaign_id)
        logger.info("Campaign %s deleted", campaign_id)
        return {"id": campaign_id, "deleted": True}

    # --- draw session ---

    @app.post("/api/campaigns/{campaign_id}/draw")
    async def draw(campaign_id: str) -> dict[str, Any]:
        winner = await services.engine.draw(campaign_id)
        return winner.to_json()

    @app.post("/api/campaigns/{campaign_id}/advance")
    def advance(campaign_id: str) -> dict[str, Any]:
        prize = services.sequencer.advance(campaign_id)
        return {"campaign_id": campaign_id, "current_prize": prize.to_json()}

    @app.post("/api/campaigns/{campaign_id}/reset")
    async def reset(campaign_id: str) -> dict[str, Any]:
        cleared = await services.engine.reset(campaign_id)
        return {"campaign_id": campaign_id, "cleared": cleared, "current_prize_index": 0}

    # --- participants ---

    @app.post("/api/participants")
    async def register_participant(body: ParticipantCreate) -> dict[str, Any]:
        participant = await services.registry.register(
            body.campaign_id, body.name, body.contact
        )
        return participant.to_json()

    @app.get("/api/participants/{campaign_id}")
    def list_participants(campaign_id: str) -> list[dict[str, Any]]:
        return [p.to_json() for p in services.registry.list_participants(campaign_id)]

    @app.delete("/api/participants/{participant_id}")
    async def remove_participant(participant_id: str) -> dict[str, Any]:
        await services.registry.remove(participant_id)
        return {"id": participant_id, "deleted": True}

    # --- rooms ---

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await websocket.accept()
        connection = WebSocketConnection(websocket)
        try:
            while True:
                try:
                    message = await websocket.receive_json()
                except ValueError:
                    await websocket.send_json(
                        {"type": "error", "message": "message must be valid JSON"}
                    )
                    continue
                reply = await services.router.handle(connection, message)
                if reply is not None:
                    await websocket.send_json(reply)
        except WebSocketDisconnect:
            logger.debug("WebSocket disconnected")
        finally:
            services.router.disconnect(connection)

    return app


__all__ = ["Services", "WebSocketConnection", "build_services", "create_app"]
