import pytest

from rush_static.exceptions import ERROR_TABLE, Reason, ServeError, StaticError


def test_every_reason_has_status_and_message():
    assert set(ERROR_TABLE) == set(Reason)


@pytest.mark.parametrize('reason, code, description', [
    (Reason.NOT_FOUND, 404, 'File Not Found'),
    (Reason.FORBIDDEN, 403, 'Permission Denied'),
    (Reason.INTERNAL_ERROR, 502, 'Internal Server Error'),
])
def test_serve_error_mapping(reason, code, description):
    error = ServeError(reason, '/srv/www/a.txt', detail='whatever')

    assert isinstance(error, StaticError)
    assert error.code == code
    assert error.description == description
    assert error.path == '/srv/www/a.txt'
    assert error.detail == 'whatever'


def test_status_codes_are_unique():
    codes = [code for code, _ in ERROR_TABLE.values()]

    assert len(codes) == len(set(codes))
