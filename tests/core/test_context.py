"""Tests for request context, log masking and the context middleware."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.core.context import (
    RequestContext,
    clear_context,
    get_context,
    get_request_id,
    get_user_id,
    set_request_id,
    set_user_id,
)
from src.core.logging import filter_sensitive_data
from src.core.middleware import extract_traceparent


@pytest.fixture(autouse=True)
def reset_context():
    clear_context()
    yield
    clear_context()


class TestContextVars:
    """Tests for the contextvar helpers."""

    def test_generated_request_id(self) -> None:
        rid = set_request_id()
        assert rid
        assert get_request_id() == rid

    def test_uuid_user_id_is_stored_as_str(self) -> None:
        user_id = uuid4()
        set_user_id(user_id)
        assert get_user_id() == str(user_id)

    def test_get_context_skips_empty_values(self) -> None:
        set_request_id("req-1")
        assert get_context() == {"request_id": "req-1"}

    def test_request_context_restores_previous_values(self) -> None:
        set_request_id("outer")
        with RequestContext(request_id="inner", user_id="u-1") as ctx:
            assert get_request_id() == "inner"
            assert get_user_id() == "u-1"
            assert ctx.values["request_id"] == "inner"
        assert get_request_id() == "outer"
        assert get_user_id() is None


class TestSensitiveDataFilter:
    """Tests for log masking."""

    def test_masks_long_values(self) -> None:
        event = filter_sensitive_data(None, "info", {"invitation_token": "abcdefgh"})
        assert event["invitation_token"] == "ab****gh"

    def test_masks_short_values(self) -> None:
        event = filter_sensitive_data(None, "info", {"password": "abc"})
        assert event["password"] == "***"

    def test_masks_nested_values(self) -> None:
        event = filter_sensitive_data(
            None, "info", {"settings": {"password": "hunter22", "allow_chat": True}}
        )
        assert event["settings"] == {"password": "hu****22", "allow_chat": True}

    def test_leaves_other_values(self) -> None:
        event = filter_sensitive_data(None, "info", {"event": "session_join_denied"})
        assert event == {"event": "session_join_denied"}


class TestMiddleware:
    """Tests for RequestContextMiddleware."""

    def test_echoes_request_id(self, client: TestClient) -> None:
        response = client.get("/health/live", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_generates_request_id(self, client: TestClient) -> None:
        response = client.get("/health/live")
        assert response.headers["X-Request-ID"]

    def test_error_body_carries_request_id(self, client: TestClient) -> None:
        response = client.post(
            "/v1/progress/validate/course", json={}, headers={"X-Request-ID": "req-7"}
        )
        assert response.status_code == 404
        assert response.json()["request_id"] == "req-7"

    @pytest.mark.parametrize(
        "header,expected",
        [
            (
                "00-0af7651916cd43dd8448eb211c80319c-b7ad6b7169203331-01",
                "0af7651916cd43dd8448eb211c80319c",
            ),
            ("garbage", None),
            (None, None),
        ],
    )
    def test_extract_traceparent(self, header: str | None, expected: str | None) -> None:
        assert extract_traceparent(header) == expected
