"""Request logging middleware that also exposes the engine's store version."""
from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

VERSION_HEADER = "X-Store-Version"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        # Read after the handler so clients see the version their mutation produced.
        version = request.app.state.engine.uow.version
        response.headers[VERSION_HEADER] = str(version)
        logger.info(
            "%s %s %s %.1fms v%d",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            version,
        )
        return response
