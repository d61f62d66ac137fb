"""
Token lifecycle endpoints: access token renewal and logout.

The refresh cookie is scoped to this router's path.
"""

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from sessionvault.api.cookies import REFRESH_COOKIE
from sessionvault.api.deps import (
    AppSettings,
    Codec,
    Cookies,
    DbSession,
    get_client_ip,
    get_user_agent,
)
from sessionvault.errors import ServiceError
from sessionvault.kernel.identity.ledger import RefreshTokenLedger
from sessionvault.kernel.identity.sessions import SessionRenewer, SessionRevoker
from sessionvault.logging_config import get_logger
from sessionvault.schemas.common import MessageResponse

logger = get_logger(__name__)

LOGOUT_FAILED = "Error logging out"

router = APIRouter()

_UNAUTHORIZED = {status.HTTP_401_UNAUTHORIZED: {"model": MessageResponse}}


@router.api_route(
    "/renew",
    methods=["GET", "POST"],
    response_model=MessageResponse,
    responses=_UNAUTHORIZED,
)
async def renew(
    request: Request,
    response: Response,
    db: DbSession,
    settings: AppSettings,
    codec: Codec,
    cookies: Cookies,
):
    """
    Issue a new access token from the refresh cookie.

    Only the access cookie is set; the refresh token is kept as is.
    """
    renewer = SessionRenewer(settings, codec, RefreshTokenLedger(db))
    access_token = await renewer.renew(request.cookies.get(REFRESH_COOKIE))
    cookies.set_access(response, access_token)
    return MessageResponse(message="Token renewed")


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses=_UNAUTHORIZED,
)
async def logout(
    request: Request,
    db: DbSession,
    cookies: Cookies,
):
    """
    Revoke the refresh cookie's token.

    Both cookies are cleared whatever the outcome.
    """
    try:
        await SessionRevoker(db).revoke(
            request.cookies.get(REFRESH_COOKIE),
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
        )
    except ServiceError as e:
        response = JSONResponse({"message": e.message}, status_code=e.status_code)
    except Exception:
        await db.rollback()
        logger.exception("Logout failed")
        response = JSONResponse(
            {"message": LOGOUT_FAILED},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    else:
        response = JSONResponse({"message": "Logged out"})

    cookies.clear(response)
    return response
