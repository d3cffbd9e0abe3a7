"""Authentication package."""

from payment_tracker.auth.session import (
    TOKEN_LENGTH,
    AuthenticationError,
    Authenticator,
    Session,
    is_valid_token,
)

__all__ = [
    "TOKEN_LENGTH",
    "AuthenticationError",
    "Authenticator",
    "Session",
    "is_valid_token",
]
