"""
Access token issuing and verification on top of simplejwt.

Tokens are stateless: validity is signature plus expiry, there is no
refresh token and no server-side revocation list.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from rest_framework import status
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from .errors import AppError


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    issued_at: datetime
    expires_at: datetime
    email: str | None = None
    role: str | None = None


def issue_access_token(user) -> str:
    token = AccessToken.for_user(user)
    token['email'] = user.email
    token['role'] = user.role.name
    return str(token)


def verify_access_token(raw: str) -> TokenClaims:
    """Decode ``raw`` or raise a 401 :class:`AppError`."""
    try:
        token = AccessToken(raw)
        user_id = int(token[api_settings.USER_ID_CLAIM])
    except (TokenError, KeyError, TypeError, ValueError) as exc:
        raise AppError('Invalid or expired token', status.HTTP_401_UNAUTHORIZED) from exc
    return TokenClaims(
        user_id=user_id,
        issued_at=datetime.fromtimestamp(token.get('iat', token['exp']), tz=timezone.utc),
        expires_at=datetime.fromtimestamp(token['exp'], tz=timezone.utc),
        email=token.get('email'),
        role=token.get('role'),
    )
