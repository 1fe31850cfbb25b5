"""Response error extraction for load test observability.

Parses Storefront API error responses into human-readable messages.
Every error body is ``{"error": ...}`` where the payload is one of:

- a string (403/404/409): ``"Order is already cancelled"``
- a field map (400 domain validation): ``{"quantity": ["Not enough stock ..."]}``
- a list (400 request validation): ``[{"loc": [...], "msg": "..."}]``
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def _format_validation_list(errors: list) -> str:
    parts = []
    for err in errors:
        if not isinstance(err, dict):
            parts.append(str(err))
            continue
        loc = ".".join(str(p) for p in err.get("loc", []))
        msg = err.get("msg", str(err))
        parts.append(f"{loc}: {msg}" if loc else msg)
    return " | ".join(parts)


def extract_error_detail(response: Response) -> str:
    """Extract a compact error message for Locust failure messages and log lines."""
    try:
        body = response.json()
    except Exception:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict) or "error" not in body:
        return str(body)[:300]

    error = body["error"]
    if isinstance(error, list):
        return _format_validation_list(error)
    if isinstance(error, dict):
        return " | ".join(
            f"{field}: {'; '.join(messages) if isinstance(messages, list) else messages}"
            for field, messages in error.items()
        )
    return str(error)


def is_insufficient_stock(response: Response) -> bool:
    """True for the expected 400 when a product sells out mid-test."""
    if response.status_code != 400:
        return False
    return "Not enough stock" in extract_error_detail(response)
