"""
Small helpers for building test data and authenticated clients.
"""
from itertools import count

from rest_framework.test import APIClient

from records.models import (
    Doctor, HealthCenter, MedicalArea, MedicalReport, Patient, Person, ReportType, Role, User,
)
from records.tokens import issue_access_token

PASSWORD = 'Secret123'
_seq = count(1000000)


def ensure_roles() -> dict[str, Role]:
    return {name: Role.objects.get_or_create(name=name)[0] for name in (Role.ADMIN, Role.DOCTOR, Role.PATIENT)}


def make_person(**kwargs) -> Person:
    n = next(_seq)
    defaults = {'dni': f'{n:08d}', 'first_name': f'Name{n}', 'last_name': f'Surname{n}'}
    defaults.update(kwargs)
    return Person.objects.create(**defaults)


def make_user(role_name: str = Role.PATIENT, *, email=None, person=None, password=PASSWORD, **kwargs) -> User:
    role = ensure_roles()[role_name]
    person = person or make_person()
    email = email or f'user{person.id}@example.com'
    return User.objects.create_user(email=email, password=password, person=person, role=role, **kwargs)


def make_area(name=None) -> MedicalArea:
    return MedicalArea.objects.create(name=name or f'Area {next(_seq)}')


def make_report_type(area=None, name=None) -> ReportType:
    return ReportType.objects.create(area=area or make_area(), name=name or f'Type {next(_seq)}')


def make_doctor(person=None, area=None, **kwargs) -> Doctor:
    return Doctor.objects.create(
        person=person or make_person(),
        area=area or make_area(),
        license_number=kwargs.pop('license_number', f'LIC-{next(_seq)}'),
        **kwargs,
    )


def make_patient(person=None, **kwargs) -> Patient:
    return Patient.objects.create(person=person or make_person(), **kwargs)


def make_center(name=None) -> HealthCenter:
    return HealthCenter.objects.create(name=name or f'Center {next(_seq)}')


def make_report(patient=None, doctor=None, report_type=None, **kwargs) -> MedicalReport:
    defaults = {'title': 'Routine check', 'content': 'Nothing remarkable.'}
    defaults.update(kwargs)
    return MedicalReport.objects.create(
        patient=patient or make_patient(),
        doctor=doctor or make_doctor(),
        report_type=report_type or make_report_type(),
        **defaults,
    )


def auth_client(user: User | None = None) -> APIClient:
    """APIClient sending a real bearer token for ``user`` (anonymous when None)."""
    client = APIClient()
    if user is not None:
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_access_token(user)}')
    return client
