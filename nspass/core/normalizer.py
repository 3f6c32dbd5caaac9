"""
nspass.core.normalizer - Response Normalizer

Converts any backend response body into a StandardResult.

Recognized shapes:
- status-wrapped: ``{"status": {"success", "message", "errorCode"}, "data", "pagination"}``
  (older endpoints use ``"base"`` instead of ``"status"``); nested pagination
  uses ``page`` where the canonical shape uses ``current``
- flat: ``{"success", "data", "message", "errorCode", "total", "pagination"}``
- anything else is synthesized into an ``HTTP_<status>`` failure

``normalize`` is total: it never raises.
"""

import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from pydantic import ValidationError

from nspass.core.results import ErrorCode, Pagination, StandardResult

logger = logging.getLogger(__name__)

_WRAPPER_KEYS = ("status", "base")


def normalize(
    raw: Any,
    status_code: int | None = None,
    reason: str = "",
) -> StandardResult[Any]:
    """
    Normalize a backend response body.

    Args:
        raw: Decoded JSON body, or None when the body was absent/unparseable.
        status_code: HTTP status of the response, when known.
        reason: HTTP reason phrase, when known.

    Returns:
        StandardResult satisfying the pagination/total invariants.

    Example:
        >>> normalize({"status": {"success": True}, "data": [1, 2]}).data
        [1, 2]
        >>> normalize(None, 502, "Bad Gateway").error_code
        'HTTP_502'
    """
    try:
        if isinstance(raw, StandardResult):
            return raw
        if isinstance(raw, Mapping):
            wrapper = _status_wrapper(raw)
            if wrapper is not None:
                return _from_wrapped(raw, wrapper)
            if "success" in raw:
                return _from_flat(raw)
        return _synthesize_failure(status_code, reason)
    except Exception:
        logger.error(
            "Response normalization failed",
            exc_info=True,
            extra={"status_code": status_code},
        )
        return StandardResult.fail("Malformed response", ErrorCode.INVALID_RESPONSE)


def is_recognized_shape(raw: Any) -> bool:
    """True if ``raw`` is a status-wrapped or flat response body."""
    if isinstance(raw, StandardResult):
        return True
    if not isinstance(raw, Mapping):
        return False
    return _status_wrapper(raw) is not None or "success" in raw


def coerce_result(raw: Any) -> StandardResult[Any]:
    """Return ``raw`` unchanged if it is already a StandardResult, else normalize it."""
    if isinstance(raw, StandardResult):
        return raw
    return normalize(raw)


def http_failure(status_code: int, reason: str = "") -> StandardResult[Any]:
    """Failure for a non-2xx response with no usable body."""
    if not reason:
        try:
            reason = HTTPStatus(status_code).phrase
        except ValueError:
            reason = "Unknown Status"
    return StandardResult.fail(f"HTTP {status_code}: {reason}", ErrorCode.http(status_code))


def _status_wrapper(raw: Mapping[str, Any]) -> Mapping[str, Any] | None:
    for key in _WRAPPER_KEYS:
        wrapper = raw.get(key)
        if isinstance(wrapper, Mapping) and "success" in wrapper:
            return wrapper
    return None


def _from_wrapped(raw: Mapping[str, Any], status: Mapping[str, Any]) -> StandardResult[Any]:
    pagination = parse_pagination(raw.get("pagination"), fallback_total=raw.get("total"))
    return _build(
        success=bool(status.get("success")),
        data=raw.get("data"),
        message=_as_text(status.get("message")),
        error_code=_as_text(status.get("errorCode", status.get("error_code"))),
        total=_as_count(raw.get("total")),
        pagination=pagination,
    )


def _from_flat(raw: Mapping[str, Any]) -> StandardResult[Any]:
    total = _as_count(raw.get("total"))
    pagination_raw = raw.get("pagination")
    if not isinstance(pagination_raw, Mapping) and total is not None:
        # Flat responses may carry page metadata at the top level
        pagination_raw = {
            key: raw[key] for key in ("current", "page", "pageSize", "page_size") if key in raw
        }
    pagination = parse_pagination(pagination_raw, fallback_total=total)
    return _build(
        success=bool(raw.get("success")),
        data=raw.get("data"),
        message=_as_text(raw.get("message")),
        error_code=_as_text(raw.get("errorCode", raw.get("error_code"))),
        total=total,
        pagination=pagination,
    )


def _build(**fields: Any) -> StandardResult[Any]:
    try:
        return StandardResult(**fields)
    except ValidationError as exc:
        logger.warning(
            "Response did not satisfy result invariants: %s",
            exc.errors()[0].get("msg") if exc.errors() else exc,
        )
        return StandardResult.fail("Malformed response", ErrorCode.INVALID_RESPONSE)


def parse_pagination(value: Any, fallback_total: Any = None) -> Pagination | None:
    """Build Pagination from a ``{current|page, pageSize, total}`` block, or None."""
    if not isinstance(value, Mapping):
        return None
    page_size = value.get("pageSize", value.get("page_size"))
    if page_size is None:
        return None
    current = value.get("current", value.get("page", 1))
    total = value.get("total", fallback_total)
    try:
        return Pagination(
            current=int(current or 1),
            page_size=int(page_size),
            total=int(total or 0),
        )
    except (TypeError, ValueError, ValidationError):
        logger.warning("Ignoring malformed pagination block", extra={"pagination": dict(value)})
        return None


def _synthesize_failure(status_code: int | None, reason: str) -> StandardResult[Any]:
    if status_code is None:
        return StandardResult.fail("Unrecognized response shape", ErrorCode.INVALID_RESPONSE)
    return http_failure(status_code, reason)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _as_count(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        count = int(value)
    except (TypeError, ValueError):
        return None
    return count if count >= 0 else None
