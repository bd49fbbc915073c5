import pytest
from rest_framework.test import APIClient

from records.models import Role
from records.services import auth as auth_service
from records.throttling import parse_rate

from .factories import PASSWORD, make_user

LOGIN = '/api/v1/users/login'


@pytest.mark.parametrize('rate,expected', [
    ('10/10m', (10, 600)),
    ('5/min', (5, 60)),
    ('100/h', (100, 3600)),
    ('3/2d', (3, 172800)),
    ('1/s', (1, 1)),
])
def test_parse_rate(rate, expected):
    assert parse_rate(rate) == expected


def test_parse_rate_rejects_garbage():
    with pytest.raises(ValueError):
        parse_rate('ten per minute')


@pytest.mark.django_db
def test_eleventh_attempt_is_rejected_before_auth_service(monkeypatch):
    make_user(Role.PATIENT, email='p@example.com')
    calls = []
    real_login = auth_service.login

    def counting_login(email, password):
        calls.append(email)
        return real_login(email, password)

    monkeypatch.setattr(auth_service, 'login', counting_login)
    client = APIClient()
    for _ in range(10):
        r = client.post(LOGIN, {'email': 'p@example.com', 'password': 'Wrong1234'}, format='json')
        assert r.status_code == 401

    r = client.post(LOGIN, {'email': 'p@example.com', 'password': PASSWORD}, format='json')
    assert r.status_code == 429
    assert r.json()['success'] is False
    assert 'Retry-After' in r
    assert len(calls) == 10


@pytest.mark.django_db
def test_limit_is_per_client_ip():
    make_user(Role.PATIENT, email='q@example.com')
    first = APIClient(REMOTE_ADDR='10.0.0.1')
    for _ in range(10):
        first.post(LOGIN, {'email': 'q@example.com', 'password': 'Wrong1234'}, format='json')
    assert first.post(LOGIN, {'email': 'q@example.com', 'password': PASSWORD}, format='json').status_code == 429

    second = APIClient(REMOTE_ADDR='10.0.0.2')
    assert second.post(LOGIN, {'email': 'q@example.com', 'password': PASSWORD}, format='json').status_code == 200
