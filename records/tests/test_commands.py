from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from rest_framework.test import APIClient

from records.models import MedicalArea, ReportType, Role, User

from .factories import make_person, make_user

pytestmark = pytest.mark.django_db


def test_seed_catalog_is_idempotent():
    out = StringIO()
    call_command('seed_catalog', stdout=out)
    call_command('seed_catalog', stdout=out)
    assert Role.objects.count() == 3
    assert MedicalArea.objects.filter(name='Radiology').exists()
    assert ReportType.objects.get(name='Chest X-ray').area.name == 'Radiology'
    assert 'catalog ready' in out.getvalue()


def test_ensure_admin_creates_then_repairs():
    call_command('ensure_admin', email='Root@Example.com', password='Admin1234', dni='11111111',
                 stdout=StringIO())
    user = User.objects.get(email='root@example.com')
    assert user.role.name == Role.ADMIN
    assert user.check_password('Admin1234')

    user.is_active = False
    user.save()
    call_command('ensure_admin', email='root@example.com', password='Other1234', dni='11111111',
                 stdout=StringIO())
    user.refresh_from_db()
    assert user.is_active
    assert user.check_password('Other1234')


def test_ensure_admin_refuses_person_with_account():
    person = make_person(dni='22222222')
    make_user(Role.PATIENT, person=person)
    with pytest.raises(CommandError):
        call_command('ensure_admin', email='new@example.com', password='Admin1234', dni='22222222',
                     stdout=StringIO())


def test_health_endpoint():
    r = APIClient().get('/api/v1/health')
    assert r.status_code == 200
    assert r.json() == {'success': True, 'message': 'ok', 'data': {'database': True}}
