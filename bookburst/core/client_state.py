"""Client-side state carried in cookies: the client id and the consent flag.

Anonymous visitors are told apart by the ``bookburst_client`` cookie.  The
consent flag lives in ``bookburst_consent`` for a year; anything other than
the literal ``"true"`` counts as no consent.
"""

from typing import Optional
from uuid import uuid4

from fastapi import Request, Response

from bookburst.core.config import settings

CLIENT_COOKIE = "bookburst_client"
CONSENT_COOKIE = "bookburst_consent"
CLIENT_COOKIE_MAX_AGE = 365 * 24 * 60 * 60


def get_client_id(request: Request, response: Response) -> str:
    """Return the caller's client id, issuing a new cookie on first contact."""
    client_id = request.cookies.get(CLIENT_COOKIE)
    if not client_id:
        client_id = uuid4().hex
        response.set_cookie(
            CLIENT_COOKIE,
            client_id,
            max_age=CLIENT_COOKIE_MAX_AGE,
            httponly=True,
            samesite="strict",
        )
    return client_id


class ConsentStore:
    """Reads and writes the tracking-consent cookie."""

    def __init__(self, request: Request, response: Response):
        self.request = request
        self.response = response
        self._override: Optional[bool] = None

    def has_consent(self) -> bool:
        if self._override is not None:
            return self._override
        return self.request.cookies.get(CONSENT_COOKIE) == "true"

    def set_consent(self, value: bool) -> None:
        self._override = bool(value)
        self.response.set_cookie(
            CONSENT_COOKIE,
            "true" if value else "false",
            max_age=settings.consent_max_age_days * 24 * 60 * 60,
            samesite="strict",
        )
