from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_engine.api.middleware.request_log import VERSION_HEADER, RequestLogMiddleware
from chat_engine.api.v1.routers import conversations, health, messages, users, ws
from chat_engine.api.v1.schemas.conversation import ConversationResponse
from chat_engine.api.v1.schemas.timeline import to_timeline_response
from chat_engine.application.dto.conversation import PreviewPolicy
from chat_engine.application.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from chat_engine.application.ports.listener import EngineEvent
from chat_engine.config import settings
from chat_engine.domain.events.conversation_list_changed import ConversationListChanged
from chat_engine.engine import ChatEngine
from chat_engine.infrastructure.ws.fanout import EventEncoder, WsFanout
from chat_engine.infrastructure.ws.manager import ConnectionManager
from chat_engine.infrastructure.ws.protocol import frame

logger = logging.getLogger(__name__)


def build_engine() -> ChatEngine:
    return ChatEngine(
        settings.LOCAL_USER_ID,
        tz=settings.viewer_tz,
        policy=PreviewPolicy(
            empty_text=settings.EMPTY_PREVIEW_TEXT,
            typing_text=settings.TYPING_PREVIEW_TEXT,
            badge_cap=settings.UNREAD_BADGE_CAP,
        ),
        max_reaction_length=settings.MAX_REACTION_LENGTH,
    )


def _encoder(engine: ChatEngine) -> EventEncoder:
    def encode(event: EngineEvent) -> tuple[str | None, str]:
        """Serialize an engine event into a WS frame and pick its audience."""
        if isinstance(event, ConversationListChanged):
            items = [
                ConversationResponse.model_validate(s, from_attributes=True).model_dump(mode="json")
                for s in event.conversations
            ]
            return None, frame("conversation_list.changed", {"conversations": items})
        groups = [g.model_dump(mode="json") for g in to_timeline_response(event.groups, engine.today())]
        return event.conversation_id, frame(
            "timeline.changed",
            {"conversation_id": event.conversation_id, "groups": groups},
        )

    return encode


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    fanout = WsFanout(app.state.ws_manager, _encoder(app.state.engine))
    await fanout.start()
    unsubscribe = app.state.engine.subscribe(fanout)

    yield

    unsubscribe()
    await fanout.stop()


def create_app(engine: ChatEngine | None = None) -> FastAPI:
    app = FastAPI(
        title="Chat Engine",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.engine = engine or build_engine()
    app.state.ws_manager = ConnectionManager()

    if engine is None and settings.SEED_DEMO_DATA:
        from chat_engine.scripts.seed_dev_data import seed

        seed(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[VERSION_HEADER],
    )
    app.add_middleware(RequestLogMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(users.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
