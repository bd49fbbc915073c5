import pytest
from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, IntegrityError
from django.db.models import ProtectedError

from records.errors import (
    AppError,
    DbFailureKind,
    ErrorMessages,
    FieldIssue,
    classify_db_error,
    translate_errors,
)

AREA = ErrorMessages('Medical area', conflict='Medical area with this name already exists')


@pytest.mark.parametrize('code', [400, 401, 403, 404, 409, 422, 429, 499])
def test_client_errors_are_fail(code):
    assert AppError('bad', code).category == 'fail'


@pytest.mark.parametrize('code', [500, 502, 503, 599, 302])
def test_server_errors_are_error(code):
    assert AppError('boom', code).category == 'error'


def test_app_error_defaults_and_fields():
    err = AppError('Invalid input data', 400, [FieldIssue('email', 'Enter a valid email address.')])
    assert err.is_operational is True
    assert err.message == 'Invalid input data'
    assert err.status_code == 400
    assert err.field_errors == (FieldIssue('email', 'Enter a valid email address.'),)
    assert AppError('x').field_errors is None


def test_app_error_is_read_only():
    err = AppError('Gone', 404)
    with pytest.raises(AttributeError):
        err.status_code = 500
    with pytest.raises(AttributeError):
        err.category = 'error'


@pytest.mark.parametrize('message,code', [('', 400), ('   ', 400), ('ok', 99), ('ok', 600)])
def test_app_error_rejects_bad_arguments(message, code):
    with pytest.raises(ValueError):
        AppError(message, code)


# ---------------------------------------------------------------------
# classify_db_error
# ---------------------------------------------------------------------
class FakePgError(Exception):
    def __init__(self, pgcode):
        super().__init__('driver failure')
        self.pgcode = pgcode


def _integrity_with_cause(cause):
    exc = IntegrityError('constraint failed')
    exc.__cause__ = cause
    return exc


@pytest.mark.parametrize('exc,kind', [
    (IntegrityError('UNIQUE constraint failed: records_medicalarea.name'), DbFailureKind.UNIQUE_VIOLATION),
    (IntegrityError('FOREIGN KEY constraint failed'), DbFailureKind.FOREIGN_KEY_VIOLATION),
    (IntegrityError(1062, "Duplicate entry 'x' for key 'name'"), DbFailureKind.UNIQUE_VIOLATION),
    (IntegrityError(1452, 'Cannot add or update a child row'), DbFailureKind.FOREIGN_KEY_VIOLATION),
    (_integrity_with_cause(FakePgError('23505')), DbFailureKind.UNIQUE_VIOLATION),
    (_integrity_with_cause(FakePgError('23503')), DbFailureKind.FOREIGN_KEY_VIOLATION),
    (IntegrityError('NOT NULL constraint failed: records_person.dni'), DbFailureKind.OTHER),
    (ObjectDoesNotExist('gone'), DbFailureKind.NOT_FOUND),
    (DatabaseError('Save with update_fields did not affect any rows.'), DbFailureKind.NOT_FOUND),
    (ProtectedError('still referenced', set()), DbFailureKind.FOREIGN_KEY_VIOLATION),
    (ValueError('nope'), DbFailureKind.OTHER),
])
def test_classify_db_error(exc, kind):
    assert classify_db_error(exc).kind is kind


# ---------------------------------------------------------------------
# translate_errors
# ---------------------------------------------------------------------
def _translated(exc, **kwargs):
    with pytest.raises(AppError) as ei:
        with translate_errors(AREA, 'create', **kwargs):
            raise exc
    return ei.value


def test_app_error_passes_through_unchanged():
    original = AppError('Patient has been deleted', 400)
    assert _translated(original) is original
    assert original.message == 'Patient has been deleted'
    assert original.status_code == 400


def test_nested_translators_do_not_double_wrap():
    original = AppError('Medical area not found', 404)
    with pytest.raises(AppError) as ei:
        with translate_errors(AREA, 'outer'):
            with translate_errors(AREA, 'inner'):
                raise original
    assert ei.value is original


def test_unique_violation_becomes_409_naming_the_entity():
    err = _translated(IntegrityError('UNIQUE constraint failed: records_medicalarea.name'))
    assert err.status_code == 409
    assert 'Medical area' in err.message
    assert 'already exists' in err.message


def test_foreign_key_violation_becomes_400():
    err = _translated(IntegrityError('FOREIGN KEY constraint failed'))
    assert err.status_code == 400
    assert err.is_operational


def test_foreign_key_violation_on_delete_becomes_409():
    err = _translated(ProtectedError('referenced', set()), deleting=True)
    assert err.status_code == 409
    assert err.message == 'Medical area is still referenced by other records'


def test_missing_row_becomes_404():
    err = _translated(DatabaseError('Save with update_fields did not affect any rows.'))
    assert err.status_code == 404
    assert err.message == 'Medical area not found'


def test_unknown_failure_becomes_non_operational_500(caplog):
    boom = RuntimeError('connection reset by peer')
    err = _translated(boom)
    assert err.status_code == 500
    assert err.is_operational is False
    assert err.message == 'Failed to create the medical area'
    assert 'connection reset' not in err.message
    assert err.__cause__ is boom
    assert any('failed to create' in r.getMessage() for r in caplog.records)


def test_translator_as_decorator():
    @translate_errors(AREA, 'update')
    def explode():
        raise IntegrityError('duplicate key value violates unique constraint')

    with pytest.raises(AppError) as ei:
        explode()
    assert ei.value.status_code == 409


def test_translator_returns_block_value_untouched():
    with translate_errors(AREA, 'list'):
        value = 42
    assert value == 42
