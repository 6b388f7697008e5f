from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from chat_engine.api.deps import EngineDep

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(engine: EngineDep) -> JSONResponse:
    if engine.user(engine.local_user_id) is None:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "errors": ["local user not loaded"]},
        )
    return JSONResponse(content={"status": "ready", "version": engine.uow.version})
