"""Cross-site request forgery guard based on the Origin header."""

from typing import Iterable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from sessionvault.logging_config import get_logger

logger = get_logger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
FORBIDDEN = "Forbidden"


class OriginCheckMiddleware(BaseHTTPMiddleware):
    """
    Reject state-changing requests sent from a foreign origin.

    Cookies travel with cross-site requests, so unsafe methods whose Origin
    header names another site are refused before reaching a handler.
    Requests without an Origin header (non-browser clients) pass.
    """

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str]):
        super().__init__(app)
        self.allowed_origins = frozenset(origin.rstrip("/") for origin in allowed_origins)

    async def dispatch(self, request: Request, call_next) -> Response:
        origin = request.headers.get("origin")
        if (
            request.method not in SAFE_METHODS
            and origin is not None
            and origin.rstrip("/") not in self.allowed_origins
        ):
            logger.warning(
                "Cross-origin request rejected",
                extra={"path": request.url.path, "method": request.method, "origin": origin},
            )
            return JSONResponse({"message": FORBIDDEN}, status_code=403)

        return await call_next(request)
