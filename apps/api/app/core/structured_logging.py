"""Structured logging helpers."""

from typing import Any


def build_log_context(
    *,
    location_id: str | None = None,
    account_id: str | None = None,
    user_id: str | None = None,
    action: str | None = None,
    **metadata: Any,
) -> dict[str, Any]:
    """Return a log context dict for ``extra=``; empty values are dropped."""
    context: dict[str, Any] = {}
    if location_id:
        context["location_id"] = location_id
    if account_id:
        context["account_id"] = account_id
    if user_id:
        context["user_id"] = user_id
    if action:
        context["action"] = action
    for key, value in metadata.items():
        if value is not None:
            context[key] = value
    return context
