"""
Unit tests for logging processors and correlation context.
"""

import pytest

from shared import logging as blog_logging
from shared.logging import (
    REDACTED,
    add_correlation_context,
    clear_context,
    redact_sensitive_fields,
    set_request_id,
    set_user_context,
)


@pytest.fixture(autouse=True)
def reset_context():
    clear_context()
    yield
    clear_context()


def test_request_id_is_adopted():
    assert set_request_id("req-123") == "req-123"


@pytest.mark.parametrize("header", [None, "", "   "])
def test_request_id_is_generated(header):
    request_id = set_request_id(header)
    assert len(request_id) == 36


def test_request_id_is_capped():
    assert len(set_request_id("x" * 500)) == blog_logging.MAX_REQUEST_ID_LENGTH


def test_correlation_context():
    set_request_id("req-1")
    set_user_context(7)

    event = add_correlation_context(None, "info", {"event": "Post created"})

    assert event["request_id"] == "req-1"
    assert event["user_id"] == "7"


def test_cleared_context_adds_nothing():
    event = add_correlation_context(None, "info", {"event": "x"})
    assert event == {"event": "x"}


def test_credentials_are_redacted():
    event = redact_sensitive_fields(
        None,
        "info",
        {"event": "Login rejected", "email": "john@example.com", "password": "secret", "token": "abc"},
    )

    assert event["password"] == REDACTED
    assert event["token"] == REDACTED
    assert event["email"] == "john@example.com"
