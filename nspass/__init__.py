"""
nspass - Adaptive CRUD data layer for the nspass proxy console

Everything between the console's table pages and the backend API:

1. Response normalization into one canonical StandardResult
2. HTTP execution with credential injection, timeouts and 401 teardown
3. Adapters mapping resource services onto the standard verbs
4. Collection state orchestration (loading, pagination, errors, reloads)

Example:
    >>> from nspass import ApiConfig, HttpClient, CollectionOrchestrator
    >>> from nspass.services import AdapterPresets, RouteService

    >>> client = HttpClient(ApiConfig.from_settings())
    >>> routes = AdapterPresets.routes(RouteService(client))
    >>> async with CollectionOrchestrator(routes) as table:
    ...     await table.handle_page_change(2)
    ...     print(table.pagination.total_pages)
"""

__version__ = "0.1.0"
__author__ = "nspass contributors"
__license__ = "Apache-2.0"

from nspass.client import ApiConfig, HttpClient, SessionGuard
from nspass.collection import CollectionOrchestrator, NotificationCenter
from nspass.core import (
    BatchOperationResult,
    ErrorCode,
    OperationResult,
    Pagination,
    StandardResult,
    normalize,
)
from nspass.services import create_adapter

__all__ = [
    "ApiConfig",
    "BatchOperationResult",
    "CollectionOrchestrator",
    "ErrorCode",
    "HttpClient",
    "NotificationCenter",
    "OperationResult",
    "Pagination",
    "SessionGuard",
    "StandardResult",
    "__version__",
    "create_adapter",
    "normalize",
]
