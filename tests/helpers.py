"""
Shared helpers for API tests.
"""

from typing import Dict, Set

from httpx import Response

TEST_PASSWORD = "Str0ng!Pass"

API = "/api/v1"


def registration_payload(**overrides) -> dict:
    """A valid registration body."""
    payload = {
        "username": "player_one",
        "email": "player@example.com",
        "password": TEST_PASSWORD,
        "password_confirmation": TEST_PASSWORD,
        "display_name": "Player One",
        "date_of_birth": "1990-05-17",
    }
    payload.update(overrides)
    return payload


def issued_cookies(response: Response) -> Dict[str, str]:
    """Cookies set by a response keyed by name; cleared cookies map to ""."""
    cookies = {}
    for header in response.headers.get_list("set-cookie"):
        name, _, value = header.split(";", 1)[0].partition("=")
        cookies[name.strip()] = value.strip().strip('"')
    return cookies


def cookie_attributes(response: Response, name: str) -> Set[str]:
    """Lower-cased attributes of the Set-Cookie header for ``name``."""
    for header in response.headers.get_list("set-cookie"):
        parts = [part.strip() for part in header.split(";")]
        if parts[0].partition("=")[0] == name:
            return {part.lower() for part in parts[1:]}
    raise AssertionError(f"{name} cookie not set")


def cookie_header(**cookies: str) -> Dict[str, str]:
    """Request headers carrying the given cookies."""
    return {"cookie": "; ".join(f"{name}={value}" for name, value in cookies.items())}
