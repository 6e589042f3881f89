from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from src.error_handler import FALLBACK_SUBMISSION_MESSAGE, MalformedNotification
from src.integrations.contracts.payments import StkCallback


def gateway_error_message(response: Optional[httpx.Response], *, fallback: str = FALLBACK_SUBMISSION_MESSAGE) -> str:
    """Best-effort human readable message from a gateway error body."""
    if response is None:
        return fallback
    try:
        body = response.json()
    except ValueError:
        return fallback
    if not isinstance(body, dict):
        return fallback
    message = _first_non_empty(body, "errorMessage", "error_description", "ResponseDescription", default="")
    return str(message) or fallback


def correlation_id_from_ack(ack: Any) -> Optional[str]:
    if not isinstance(ack, dict):
        return None
    value = _first_non_empty(ack, "CheckoutRequestID", default="")
    return str(value) or None


def parse_stk_callback(raw: Any) -> StkCallback:
    """
    Extract Body.stkCallback from an inbound notification.

    Raises MalformedNotification when the nested result object is missing or
    does not carry a usable CheckoutRequestID / ResultCode.
    """
    body = raw.get("Body") if isinstance(raw, dict) else None
    callback = body.get("stkCallback") if isinstance(body, dict) else None
    if not isinstance(callback, dict):
        raise MalformedNotification("Notification has no Body.stkCallback object.", payload=_as_payload(raw))

    try:
        parsed = StkCallback(**callback)
    except ValidationError as exc:
        raise MalformedNotification(f"stkCallback validation failed: {exc}", payload=_as_payload(raw)) from exc

    if not parsed.CheckoutRequestID.strip():
        raise MalformedNotification("stkCallback has an empty CheckoutRequestID.", payload=_as_payload(raw))
    return parsed


def _first_non_empty(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default


def _as_payload(raw: Any) -> Dict[str, Any]:
    return raw if isinstance(raw, dict) else {"raw": raw}
