"""Mapping of API error codes to HTTP status codes."""

from __future__ import annotations

from http import HTTPStatus

_STATUS_BY_ERROR_CODE: dict[str, HTTPStatus] = {
    "invalid_parameter": HTTPStatus.BAD_REQUEST,
    "validation_error": HTTPStatus.BAD_REQUEST,
    "topic_not_found": HTTPStatus.NOT_FOUND,
    "group_not_found": HTTPStatus.NOT_FOUND,
    "conflict": HTTPStatus.CONFLICT,
    "invalid_offset": HTTPStatus.BAD_REQUEST,
    "record_validation_error": HTTPStatus.UNPROCESSABLE_ENTITY,
    "internal_error": HTTPStatus.INTERNAL_SERVER_ERROR,
}


def error_to_status_code(error_code: str) -> HTTPStatus:
    """Return the HTTP status for an error code; unknown codes map to 500."""
    return _STATUS_BY_ERROR_CODE.get(error_code, HTTPStatus.INTERNAL_SERVER_ERROR)