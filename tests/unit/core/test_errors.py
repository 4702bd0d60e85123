"""Unit tests for the exception handlers."""

import json
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from folio.core.errors import (
    _conflict_message,
    error_response,
    handle_integrity_error,
    handle_operational_error,
    handle_value_error,
)


def _request() -> MagicMock:
    request = MagicMock()
    request.method = "GET"
    request.url.path = "/api/portfolios"
    return request


@pytest.mark.unit
class TestErrorResponse:
    def test_body_shape(self):
        response = error_response(404, "not_found", "Resource not found")

        assert response.status_code == 404
        assert json.loads(response.body) == {
            "error": "not_found",
            "message": "Resource not found",
            "details": None,
        }

    @pytest.mark.parametrize(
        "detail,expected",
        [
            ("UNIQUE constraint failed: users.email", "Resource already exists"),
            ("duplicate key value violates unique constraint", "Resource already exists"),
            ("FOREIGN KEY constraint failed", "Referenced resource not found"),
            ("NOT NULL constraint failed: users.username", "Database constraint violation"),
        ],
    )
    def test_conflict_messages(self, detail, expected):
        assert _conflict_message(detail) == expected


@pytest.mark.unit
class TestHandlers:
    async def test_integrity_error_is_409(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.username"))

        response = await handle_integrity_error(_request(), exc)

        assert response.status_code == 409
        assert json.loads(response.body)["error"] == "conflict"

    async def test_operational_error_is_503(self):
        exc = OperationalError("SELECT", {}, Exception("database is locked"))

        response = await handle_operational_error(_request(), exc)

        assert response.status_code == 503

    async def test_value_error_is_422_with_message(self):
        response = await handle_value_error(_request(), ValueError("bad category"))

        assert response.status_code == 422
        assert json.loads(response.body)["message"] == "bad category"
