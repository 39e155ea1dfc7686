"""
Blog API Backend — Configuration, Health and Error Handler Tests
==================================================================
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError as PydanticValidationError

from blog_api.config import Settings, settings
from blog_api.database import get_engine
from blog_api.exceptions import NotFoundError, ValidationError
from blog_api.main import _validation_message
from blog_api.middleware.logging import level_for_status
from blog_api.middleware.request_id import new_request_id


class TestSettings:

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="chatty")

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="http://a.test, http://b.test,")

        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]

    def test_database_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./other.db")

        assert Settings().test_database_url == "sqlite+aiosqlite:///./other.db"


class TestExceptions:

    def test_not_found_message(self):
        exc = NotFoundError(resource="post", resource_id="abc")

        assert exc.message == "post with ID 'abc' was not found"
        assert exc.context == {"resource": "post", "resource_id": "abc"}

    def test_validation_error_records_field(self):
        exc = ValidationError(message="bad", field="title")

        assert exc.field == "title"
        assert exc.context["field"] == "title"


class TestValidationMessage:

    def test_missing_field(self):
        summary = _validation_message([{"loc": ("body", "title"), "type": "missing"}])

        assert summary == {"message": "Missing `title` in request body", "field": "title"}

    def test_missing_body(self):
        summary = _validation_message([{"loc": ("body",), "type": "missing"}])

        assert summary["message"] == "Missing request body"

    def test_value_error_uses_validator_message(self):
        summary = _validation_message([{
            "loc": ("body", "content"),
            "type": "value_error",
            "msg": "Value error, `content` must not be empty",
            "ctx": {"error": ValueError("`content` must not be empty")},
        }])

        assert summary["message"] == "Invalid `content`: `content` must not be empty"

    def test_no_errors(self):
        assert _validation_message([])["message"] == "Invalid request body"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_with_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_unreachable(self, test_client):
        broken = MagicMock()
        broken.connect.side_effect = OSError("connection refused")

        with patch("blog_api.routes.health.get_engine", return_value=broken):
            response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestTestDatabaseBinding:

    @pytest.mark.asyncio
    async def test_harness_binds_test_database_url(self, database):
        assert database == settings.test_database_url
        assert get_engine().url.render_as_string(hide_password=False) == settings.test_database_url


class TestMiddlewareHelpers:

    @pytest.mark.parametrize("status_code, level", [
        (200, logging.INFO),
        (204, logging.INFO),
        (304, logging.INFO),
        (404, logging.WARNING),
        (503, logging.ERROR),
    ])
    def test_level_for_status(self, status_code, level):
        assert level_for_status(status_code) == level

    def test_new_request_id_is_short_hex(self):
        rid = new_request_id()

        assert len(rid) == 8
        int(rid, 16)

    @pytest.mark.asyncio
    async def test_blank_request_id_header_is_replaced(self, test_client):
        response = await test_client.get("/posts", headers={"X-Request-ID": "  "})

        assert len(response.headers["X-Request-ID"]) == 8
