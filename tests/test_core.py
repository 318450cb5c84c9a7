"""Tests for request context and logging processors."""

import pytest

from src.core.context import (
    clear_context,
    get_context,
    get_request_id,
    get_user_id,
    set_request_id,
    set_user_id,
)
from src.core.logging import add_context_processor, filter_sensitive_data
from src.core.middleware import extract_traceparent


@pytest.fixture(autouse=True)
def _clean_context():
    clear_context()
    yield
    clear_context()


class TestContext:
    """Tests for context variables."""

    def test_set_request_id_generates_one(self) -> None:
        rid = set_request_id()
        assert rid
        assert get_request_id() == rid

    def test_get_context_skips_empty_values(self) -> None:
        set_request_id("req-1")
        assert get_context() == {"request_id": "req-1"}

        set_user_id("alice")
        assert get_context() == {"request_id": "req-1", "user_id": "alice"}
        assert get_user_id() == "alice"

    def test_clear_context(self) -> None:
        set_request_id("req-1")
        set_user_id("alice")

        clear_context()

        assert get_context() == {}


class TestProcessors:
    """Tests for structlog processors."""

    def test_context_is_merged(self) -> None:
        set_request_id("req-9")
        event = add_context_processor(None, "info", {"event": "comment_created"})
        assert event == {"event": "comment_created", "request_id": "req-9"}

    def test_sensitive_values_are_masked(self) -> None:
        event = filter_sensitive_data(
            None,
            "info",
            {
                "event": "login",
                "access_token": "abcdefghij",
                "password": "abc",
                "headers": {"Authorization": "Bearer xyz123"},
                "parent_id": "blog-42",
            },
        )

        assert event["access_token"] == "ab******ij"
        assert event["password"] == "***"
        assert event["headers"]["Authorization"].startswith("Be")
        assert "xyz" not in event["headers"]["Authorization"]
        assert event["parent_id"] == "blog-42"


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        (
            "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01",
            "4bf92f3577b34da6a3ce929d0e0e4736",
        ),
        ("garbage", None),
        (None, None),
    ],
)
def test_extract_traceparent(header, expected) -> None:
    assert extract_traceparent(header) == expected
