from http import HTTPStatus

import pytest

from flashq.status import error_to_status_code


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("invalid_parameter", HTTPStatus.BAD_REQUEST),
        ("validation_error", HTTPStatus.BAD_REQUEST),
        ("topic_not_found", HTTPStatus.NOT_FOUND),
        ("group_not_found", HTTPStatus.NOT_FOUND),
        ("record_validation_error", HTTPStatus.UNPROCESSABLE_ENTITY),
        ("internal_error", HTTPStatus.INTERNAL_SERVER_ERROR),
        ("unknown_error", HTTPStatus.INTERNAL_SERVER_ERROR),
    ],
)
def test_error_to_status_code(code, expected):
    assert error_to_status_code(code) == expected


def test_conflict_maps_to_409():
    assert error_to_status_code("conflict") == 409


def test_invalid_offset_maps_to_400():
    assert error_to_status_code("invalid_offset") == 400


def test_empty_code_is_internal_error():
    assert error_to_status_code("") == 500


def test_codes_are_case_sensitive():
    assert error_to_status_code("TOPIC_NOT_FOUND") == HTTPStatus.INTERNAL_SERVER_ERROR