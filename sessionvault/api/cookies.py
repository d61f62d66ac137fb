"""
Bearer credentials at the HTTP boundary.

Both tokens travel as HTTP-only cookies. The refresh cookie is scoped to the
token lifecycle endpoints so it is never sent on ordinary requests.
"""

from fastapi import Response

from sessionvault.config import Settings

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"


class CredentialCookies:
    """Sets and clears the access and refresh cookies on a response."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def set_access(self, response: Response, token: str) -> None:
        response.set_cookie(
            ACCESS_COOKIE,
            token,
            max_age=int(self.settings.access_token_ttl.total_seconds()),
            path="/",
            secure=self.settings.secure_cookies,
            httponly=True,
            samesite="lax",
        )

    def set_refresh(self, response: Response, token: str) -> None:
        response.set_cookie(
            REFRESH_COOKIE,
            token,
            max_age=int(self.settings.refresh_token_ttl.total_seconds()),
            path=self.settings.refresh_cookie_path,
            secure=self.settings.secure_cookies,
            httponly=True,
            samesite="lax",
        )

    def set_pair(self, response: Response, access_token: str, refresh_token: str) -> None:
        self.set_refresh(response, refresh_token)
        self.set_access(response, access_token)

    def clear(self, response: Response) -> None:
        """Expire both cookies; paths must match the ones they were set with."""
        response.delete_cookie(
            REFRESH_COOKIE,
            path=self.settings.refresh_cookie_path,
            secure=self.settings.secure_cookies,
            httponly=True,
            samesite="lax",
        )
        response.delete_cookie(
            ACCESS_COOKIE,
            path="/",
            secure=self.settings.secure_cookies,
            httponly=True,
            samesite="lax",
        )
