import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _clear_cache():
    # the login throttle keeps its history in the default cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def roles(db):
    from .factories import ensure_roles
    return ensure_roles()
