"""
User accounts: registration, lookup and updates.

Registration creates the person and the user in one transaction.  When a
person with the same DNI already exists it is reused, as long as no
other account is linked to it yet.
"""
from __future__ import annotations

import logging

from django.db import transaction
from rest_framework import status

from records.errors import AppError, ErrorMessages, get_or_404, translate_errors
from records.models import Person, Role, User

from .common import iso, remap
from .persons import PERSON_FIELDS, format_person

logger = logging.getLogger(__name__)

USER = ErrorMessages(
    'User',
    conflict='A user with this email already exists',
    invalid_reference='The selected role or person does not exist',
)

ADMIN_ONLY_FIELDS = ('roleId', 'isActive', 'isVerified')


def format_user(u: User, *, with_person: bool = True) -> dict:
    data = {
        'id': u.id,
        'email': u.email,
        'roleId': u.role_id,
        'role': u.role.name,
        'personId': u.person_id,
        'isActive': u.is_active,
        'isVerified': u.is_verified,
        'lastLogin': iso(u.last_login),
        'createdAt': iso(u.created_at),
        'updatedAt': iso(u.updated_at),
    }
    if with_person:
        data['person'] = format_person(u.person)
    return data


def _base_qs():
    return User.objects.select_related('role', 'person')


def list_users() -> list[User]:
    with translate_errors(USER, 'list'):
        return list(_base_qs())


def get_user(user_id: int) -> User:
    return get_or_404(_base_qs(), USER, pk=user_id)


def register_user(actor, data: dict) -> User:
    """Create a user (and its person when the DNI is new).

    Anonymous callers and non-admins may only create patient accounts.
    """
    role = Role.objects.filter(pk=data['roleId']).first()
    if role is None:
        raise AppError('Role not found', status.HTTP_400_BAD_REQUEST)
    is_admin = actor is not None and actor.role_name == Role.ADMIN
    if not is_admin and role.name != Role.PATIENT:
        raise AppError('Only administrators can register users with this role', status.HTTP_403_FORBIDDEN)
    if User.objects.filter(email=data['email']).exists():
        raise AppError(USER.conflict, status.HTTP_409_CONFLICT)

    with translate_errors(USER, 'register'), transaction.atomic():
        person = Person.objects.filter(dni=data['dni']).first()
        if person is None:
            person = Person.objects.create(**remap(data, PERSON_FIELDS))
        elif User.objects.filter(person=person).exists():
            raise AppError('This person already has a user account', status.HTTP_409_CONFLICT)
        user = User.objects.create_user(
            email=data['email'],
            password=data['password'],
            person=person,
            role=role,
        )
    logger.info('registered user %s with role %s', user.id, role.name)
    return get_user(user.id)


def update_user(actor, user_id: int, data: dict) -> User:
    user = get_user(user_id)
    if actor.role_name != Role.ADMIN:
        forbidden = [f for f in ADMIN_ONLY_FIELDS if f in data]
        if forbidden:
            raise AppError(
                f"Only administrators can change: {', '.join(forbidden)}",
                status.HTTP_403_FORBIDDEN,
            )
    if 'roleId' in data and not Role.objects.filter(pk=data['roleId']).exists():
        raise AppError('Role not found', status.HTTP_400_BAD_REQUEST)

    fields = []
    if 'email' in data:
        user.email = data['email']
        fields.append('email')
    if 'password' in data:
        user.set_password(data['password'])
        fields.append('password')
    if 'roleId' in data:
        user.role_id = data['roleId']
        fields.append('role_id')
    if 'isActive' in data:
        user.is_active = data['isActive']
        fields.append('is_active')
    if 'isVerified' in data:
        user.is_verified = data['isVerified']
        fields.append('is_verified')
    with translate_errors(USER, 'update'), transaction.atomic():
        user.save(update_fields=fields + ['updated_at'])
    return get_user(user.id)
