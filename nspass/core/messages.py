"""
nspass.core.messages - User-facing result messages

Maps error codes and HTTP statuses to notification text, and decides which
operations announce success. Fetch-like operations stay silent on success
so list reloads never spam the notification surface.
"""

from enum import StrEnum
from typing import Any

from nspass.core.results import ErrorCode, StandardResult


class OperationType(StrEnum):
    """Kinds of operations a result can belong to."""

    # Data retrieval (silent on success)
    FETCH = "fetch"
    LOAD = "load"
    GET = "get"
    QUERY = "query"

    # User actions (announce success)
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    BATCH_DELETE = "batch_delete"
    SAVE = "save"
    SUBMIT = "submit"

    # State changes
    ENABLE = "enable"
    DISABLE = "disable"
    RESET = "reset"


SILENT_OPERATIONS = frozenset(
    {OperationType.FETCH, OperationType.LOAD, OperationType.GET, OperationType.QUERY}
)

ERROR_MESSAGES: dict[str, str] = {
    # Authentication
    ErrorCode.UNAUTHORIZED: "You are not signed in or your session has expired",
    "FORBIDDEN": "You do not have permission to access this resource",
    "INVALID_TOKEN": "Invalid access token",
    "TOKEN_EXPIRED": "Access token expired, please sign in again",
    # Request
    "BAD_REQUEST": "Invalid request parameters",
    "NOT_FOUND": "The requested resource does not exist",
    "METHOD_NOT_ALLOWED": "Request method not supported",
    "CONFLICT": "Resource conflict",
    "VALIDATION_ERROR": "Data validation failed",
    ErrorCode.REQUEST_ERROR: "The request could not be built",
    ErrorCode.INVALID_RESPONSE: "The server returned an unexpected response",
    ErrorCode.BATCH_NOT_SUPPORTED: "Batch delete is not supported",
    # Server
    "INTERNAL_ERROR": "Internal server error",
    "SERVICE_UNAVAILABLE": "Service temporarily unavailable",
    ErrorCode.NETWORK_ERROR: "Network connection failed",
    ErrorCode.UNKNOWN_ERROR: "Unknown error",
    "TIMEOUT": "Request timed out",
    # Business
    "USER_NOT_FOUND": "User does not exist",
    "USER_ALREADY_EXISTS": "User already exists",
    "INVALID_CREDENTIALS": "Incorrect username or password",
    "RESOURCE_NOT_FOUND": "Resource does not exist",
    "INSUFFICIENT_PERMISSIONS": "Insufficient permissions",
    "OPERATION_FAILED": "Operation failed",
    "DATA_NOT_FOUND": "Data does not exist",
    "INVALID_OPERATION": "Invalid operation",
}

HTTP_STATUS_MESSAGES: dict[int, str] = {
    400: "Invalid request parameters",
    401: "You are not signed in or your session has expired",
    403: "You do not have permission to access this resource",
    404: "The requested resource does not exist",
    405: "Request method not supported",
    409: "Resource conflict",
    422: "Data validation failed",
    429: "Too many requests, please try again later",
    500: "Internal server error",
    502: "Bad gateway",
    503: "Service temporarily unavailable",
    504: "Gateway timeout",
}

_SUCCESS_MESSAGES: dict[OperationType, str] = {
    OperationType.CREATE: "Created successfully",
    OperationType.UPDATE: "Updated successfully",
    OperationType.DELETE: "Deleted successfully",
    OperationType.BATCH_DELETE: "Batch delete completed",
    OperationType.SAVE: "Saved successfully",
    OperationType.SUBMIT: "Submitted successfully",
    OperationType.ENABLE: "Enabled successfully",
    OperationType.DISABLE: "Disabled successfully",
    OperationType.RESET: "Reset successfully",
    OperationType.FETCH: "Fetched successfully",
    OperationType.LOAD: "Loaded successfully",
    OperationType.GET: "Fetched successfully",
    OperationType.QUERY: "Query completed",
}


def should_notify_success(operation_type: OperationType) -> bool:
    """Return True if a successful operation of this type is announced."""
    return operation_type not in SILENT_OPERATIONS


def default_success_message(
    operation_type: OperationType, operation: str, count: int | None = None
) -> str:
    """Return the default success text for an operation.

    A batch delete with a known ``count`` reports how many items went.
    """
    if operation_type == OperationType.BATCH_DELETE and count is not None:
        return f"Batch delete completed, {count} item(s) deleted"
    return _SUCCESS_MESSAGES.get(operation_type, f"{operation} succeeded")


def http_status_message(status_code: int) -> str:
    return HTTP_STATUS_MESSAGES.get(status_code, f"HTTP {status_code} error")


def resolve_error_message(
    result: StandardResult[Any] | None,
    operation: str,
    custom: str | None = None,
) -> str:
    """
    Pick the text shown to the user for a failed result.

    Priority: custom message, server message, known error code,
    known HTTP status (from an ``HTTP_<status>`` code), generic fallback.

    Args:
        result: Failed result, or None when the call raised.
        operation: Human-readable operation name, e.g. "Create route".
        custom: Caller-supplied override.

    Returns:
        Message suitable for the notification surface.
    """
    if custom:
        return custom
    if result is not None:
        if result.message:
            return result.message
        code = result.error_code
        if code:
            if code in ERROR_MESSAGES:
                return ERROR_MESSAGES[code]
            if code.startswith("HTTP_") and code[5:].isdigit():
                return http_status_message(int(code[5:]))
    return f"{operation} failed, please try again later"
