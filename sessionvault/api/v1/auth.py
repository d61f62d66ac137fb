"""
Authentication endpoints: login, registration and the current identity.
"""

from fastapi import APIRouter, Request, Response, status

from sessionvault.api.deps import (
    AppSettings,
    Codec,
    Cookies,
    CurrentAccess,
    DbSession,
    Hasher,
    get_client_ip,
    get_user_agent,
)
from sessionvault.errors import NotFoundError
from sessionvault.kernel.identity.identity_service import REGISTER_FAILED, IdentityService
from sessionvault.kernel.identity.sessions import SessionIssuer
from sessionvault.kernel.models.event_log import EventType
from sessionvault.schemas.auth import UserCreate, UserLogin, UserResponse
from sessionvault.schemas.common import MessageResponse

router = APIRouter()

_ERRORS = {
    status.HTTP_400_BAD_REQUEST: {"model": MessageResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": MessageResponse},
}


@router.post(
    "/login",
    response_model=UserResponse,
    responses={**_ERRORS, status.HTTP_404_NOT_FOUND: {"model": MessageResponse}},
)
async def login(
    request: Request,
    response: Response,
    data: UserLogin,
    db: DbSession,
    settings: AppSettings,
    codec: Codec,
    hasher: Hasher,
    cookies: Cookies,
):
    """
    Authenticate with email or username and password.

    Sets the access and refresh cookies on success.
    """
    user = await IdentityService(db, hasher).authenticate(data.email_or_username, data.password)

    issued = await SessionIssuer(db, settings, codec).issue(
        user,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    cookies.set_pair(response, issued.access_token, issued.refresh_token)

    return UserResponse.model_validate(issued.user)


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
)
async def register(
    request: Request,
    response: Response,
    data: UserCreate,
    db: DbSession,
    settings: AppSettings,
    codec: Codec,
    hasher: Hasher,
    cookies: Cookies,
):
    """
    Register a new player account and open a session for it.
    """
    user = await IdentityService(db, hasher).register_user(
        username=data.username,
        email=data.email,
        password=data.password,
        display_name=data.display_name,
        date_of_birth=data.date_of_birth,
    )

    issued = await SessionIssuer(db, settings, codec).issue(
        user,
        event_type=EventType.USER_REGISTERED,
        failure_message=REGISTER_FAILED,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    cookies.set_pair(response, issued.access_token, issued.refresh_token)

    return UserResponse.model_validate(issued.user)


@router.get(
    "/me",
    response_model=UserResponse,
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": MessageResponse},
        status.HTTP_404_NOT_FOUND: {"model": MessageResponse},
    },
)
async def get_current_user_profile(access: CurrentAccess, db: DbSession):
    """Get the identity behind the access token."""
    user = await IdentityService(db).get_user_by_id(access.subject_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserResponse.model_validate(user)
