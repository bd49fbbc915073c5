import logging

from django.utils import timezone
from rest_framework import status

from records.errors import AppError
from records.models import User
from records.tokens import issue_access_token

from .users import format_user

logger = logging.getLogger(__name__)


def login(email: str, password: str) -> dict:
    """Check credentials and return ``{token, user}``.

    Unknown and inactive accounts answer 404, a wrong password 401.
    """
    user = User.objects.select_related('role', 'person').filter(email__iexact=email).first()
    if user is None or not user.is_active:
        logger.info('login refused for %s: no active account', email)
        raise AppError('User not found', status.HTTP_404_NOT_FOUND)
    if not user.check_password(password):
        logger.warning('login refused for %s: bad password', email)
        raise AppError('Invalid credentials', status.HTTP_401_UNAUTHORIZED)

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return {'token': issue_access_token(user), 'user': format_user(user)}
