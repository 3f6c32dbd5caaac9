"""
nspass.core - Canonical result types and response normalization.
"""

from nspass.core.messages import (
    OperationType,
    default_success_message,
    resolve_error_message,
    should_notify_success,
)
from nspass.core.normalizer import coerce_result, http_failure, normalize
from nspass.core.results import (
    BatchFailure,
    BatchOperationResult,
    ErrorCode,
    OperationResult,
    Pagination,
    QueryParams,
    StandardResult,
)

__all__ = [
    "BatchFailure",
    "BatchOperationResult",
    "ErrorCode",
    "OperationResult",
    "OperationType",
    "Pagination",
    "QueryParams",
    "StandardResult",
    "coerce_result",
    "default_success_message",
    "http_failure",
    "normalize",
    "resolve_error_message",
    "should_notify_success",
]
