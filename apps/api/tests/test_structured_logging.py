"""Tests for structured logging helpers."""

from app.core.structured_logging import build_log_context


def test_build_log_context_includes_only_provided_fields():
    context = build_log_context(
        location_id="loc-1",
        user_id="user-1",
        action="SUBMIT_ONBOARDING",
        payload_valid=False,
    )

    assert context == {
        "location_id": "loc-1",
        "user_id": "user-1",
        "action": "SUBMIT_ONBOARDING",
        "payload_valid": False,
    }


def test_build_log_context_ignores_empty_fields():
    context = build_log_context(
        location_id="",
        account_id=None,
        user_id=None,
        action="RESET_SESSION",
        reason=None,
    )

    assert context == {"action": "RESET_SESSION"}
