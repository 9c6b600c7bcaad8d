"""
Helpers that wrap route results in the standard response envelope.
"""

from typing import Any

from shared.utils.schemas import Envelope, PaginationMeta


def ok(
    data: Any = None,
    message: str = "OK",
    pagination: PaginationMeta | None = None,
) -> Envelope:
    """Successful response envelope."""
    return Envelope(success=True, message=message, data=data, pagination=pagination)


def error_body(message: str, errors: list[dict[str, Any]] | None = None, **extra: Any) -> dict[str, Any]:
    """Failed response body as a plain dict (for exception handlers and middlewares)."""
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    body.update(extra)
    return body
