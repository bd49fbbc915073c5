"""
Bearer token authentication.

:func:`resolve_principal` reads the ``Authorization`` header and returns
an :class:`AuthOutcome` with one of three kinds: authenticated (with a
:class:`Principal`), anonymous (no header at all) or rejected (with the
401/403 error that explains why).  The two DRF authentication classes
consume that outcome differently: :class:`BearerAuthentication` raises
on rejection, :class:`OptionalBearerAuthentication` treats anything but
an authenticated outcome as an anonymous request.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from rest_framework import authentication, exceptions, status

from .errors import AppError
from .models import User
from .tokens import verify_access_token

logger = logging.getLogger(__name__)

KEYWORD = 'Bearer'


@dataclass(frozen=True)
class Principal:
    """The acting identity for one request.  Never persisted."""
    id: int
    email: str
    role_name: str
    role_id: int
    person_id: int

    is_authenticated = True
    is_anonymous = False

    @property
    def pk(self) -> int:
        return self.id

    @property
    def is_admin(self) -> bool:
        return self.role_name == 'admin'

    @classmethod
    def from_user(cls, user: User) -> 'Principal':
        return cls(
            id=user.id,
            email=user.email,
            role_name=user.role.name,
            role_id=user.role_id,
            person_id=user.person_id,
        )


class AuthKind(enum.Enum):
    AUTHENTICATED = 'authenticated'
    ANONYMOUS = 'anonymous'
    REJECTED = 'rejected'


@dataclass(frozen=True)
class AuthOutcome:
    kind: AuthKind
    principal: Optional[Principal] = None
    token: Optional[str] = None
    error: Optional[AppError] = None

    @classmethod
    def anonymous(cls) -> 'AuthOutcome':
        return cls(AuthKind.ANONYMOUS)

    @classmethod
    def rejected(cls, error: AppError) -> 'AuthOutcome':
        return cls(AuthKind.REJECTED, error=error)


def resolve_principal(request) -> AuthOutcome:
    header = authentication.get_authorization_header(request).decode('latin-1').strip()
    if not header:
        return AuthOutcome.anonymous()

    parts = header.split()
    if len(parts) != 2 or parts[0] != KEYWORD:
        return AuthOutcome.rejected(AppError('Malformed authorization header', status.HTTP_401_UNAUTHORIZED))

    raw = parts[1]
    try:
        claims = verify_access_token(raw)
    except AppError as err:
        return AuthOutcome.rejected(err)

    user = User.objects.select_related('role').filter(pk=claims.user_id).first()
    if user is None:
        return AuthOutcome.rejected(AppError('User no longer exists', status.HTTP_401_UNAUTHORIZED))
    if not user.is_active:
        return AuthOutcome.rejected(AppError('User account is inactive', status.HTTP_403_FORBIDDEN))
    return AuthOutcome(AuthKind.AUTHENTICATED, principal=Principal.from_user(user), token=raw)


class BearerAuthentication(authentication.BaseAuthentication):
    """Requires a valid token whenever an ``Authorization`` header is present."""

    def authenticate(self, request):
        outcome = resolve_principal(request)
        if outcome.kind is AuthKind.REJECTED:
            error = outcome.error
            if error.status_code == status.HTTP_401_UNAUTHORIZED:
                # DRF only attaches WWW-Authenticate to AuthenticationFailed.
                raise exceptions.AuthenticationFailed(error.message) from error
            raise error
        if outcome.kind is AuthKind.ANONYMOUS:
            return None
        return outcome.principal, outcome.token

    def authenticate_header(self, request):
        return f'{KEYWORD} realm="api"'


class OptionalBearerAuthentication(BearerAuthentication):
    """Personalizes the response when a usable token is sent, never rejects."""

    def authenticate(self, request):
        outcome = resolve_principal(request)
        if outcome.kind is AuthKind.REJECTED:
            logger.debug('optional auth ignored rejected token: %s', outcome.error)
            return None
        if outcome.kind is AuthKind.ANONYMOUS:
            return None
        return outcome.principal, outcome.token
