"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from chat_engine.engine import ChatEngine


def get_engine(request: Request) -> ChatEngine:
    return request.app.state.engine


EngineDep = Annotated[ChatEngine, Depends(get_engine)]
