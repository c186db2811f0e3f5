"""Error extraction for cart service responses.

Handles the response shapes a storefront API sends back on failure:

- Express-style errors: {"message": "Product not found in cart"}
- Domain errors: {"error": "msg"} or {"error": {"field": "msg"}}
- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response

MAX_MESSAGE_LENGTH = 300


def extract_error_message(response: Response) -> str | None:
    """Extract a human-readable error message from an error response.

    Returns None when the body carries no usable message, so callers can fall
    back to their own generic text.
    """
    try:
        body = response.json()
    except ValueError:
        return None

    if not isinstance(body, dict):
        return None

    message = body.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()[:MAX_MESSAGE_LENGTH]

    if isinstance(body.get("detail"), list):
        parts = []
        for err in body["detail"]:
            if not isinstance(err, dict):
                continue
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)[:MAX_MESSAGE_LENGTH] or None

    if isinstance(body.get("detail"), str):
        return body["detail"][:MAX_MESSAGE_LENGTH]

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())[:MAX_MESSAGE_LENGTH]
        return str(error)[:MAX_MESSAGE_LENGTH]

    return None
