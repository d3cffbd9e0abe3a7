"""
Single-User Authentication

The dashboard has exactly one account, configured through AUTH_* settings.
A successful login issues a random 32-character session token; the token is
only valid inside this process.
"""

import hmac
import secrets
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from payment_tracker.audit import AuditLogger
from payment_tracker.config import AuthSettings, get_settings
from payment_tracker.models.payment import utc_now


TOKEN_LENGTH = 32


class AuthenticationError(Exception):
    """Login failed or the session token is unknown."""
    pass


class Session(BaseModel):
    """An authenticated dashboard session."""

    token: str = Field(..., min_length=TOKEN_LENGTH, max_length=TOKEN_LENGTH)
    username: str
    full_name: str
    login_time: datetime = Field(default_factory=utc_now)


def is_valid_token(token: Optional[str]) -> bool:
    """Shape check only; use Authenticator.check to verify a token is live."""
    return bool(token) and len(token) == TOKEN_LENGTH


class Authenticator:
    """Checks credentials against the configured user and tracks live sessions."""

    def __init__(
        self,
        settings: Optional[AuthSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().auth
        self._audit_logger = audit_logger
        self._sessions: dict[str, Session] = {}

    def _credentials_match(self, username: str, password: str) -> bool:
        user_ok = hmac.compare_digest(
            username.encode("utf-8"), self._settings.username.encode("utf-8")
        )
        password_ok = hmac.compare_digest(
            password.encode("utf-8"), self._settings.password.encode("utf-8")
        )
        return user_ok and password_ok

    async def login(self, username: str, password: str) -> Session:
        """
        Start a session for the configured user.

        Raises:
            AuthenticationError: If the credentials don't match
        """
        if not self._credentials_match(username, password):
            if self._audit_logger:
                await self._audit_logger.log_login_failed(username)
            raise AuthenticationError("Invalid username or password")

        session = Session(
            token=secrets.token_hex(TOKEN_LENGTH // 2),
            username=username,
            full_name=self._settings.full_name,
        )
        self._sessions[session.token] = session

        if self._audit_logger:
            await self._audit_logger.log_login_succeeded(username)
        return session

    def check(self, token: Optional[str]) -> Session:
        """
        Return the live session for a token.

        Raises:
            AuthenticationError: If the token is malformed or unknown
        """
        if not is_valid_token(token) or token not in self._sessions:
            raise AuthenticationError("Not logged in")
        return self._sessions[token]

    async def logout(self, session: Session) -> None:
        """End a session. Logging out twice is harmless."""
        if self._sessions.pop(session.token, None) and self._audit_logger:
            await self._audit_logger.log_logout(session.username)
