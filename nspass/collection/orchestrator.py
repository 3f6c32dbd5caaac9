"""
nspass.collection.orchestrator - Collection State Orchestrator

CollectionOrchestrator owns the list state of one collection (data,
loading, error, pagination, params) on top of a StandardService. View code
calls its verbs and re-renders from ``state``; nothing it does raises
into the caller.

Behavior:
- list loads go Idle -> Loading -> Success | Error; a failed load keeps the
  previous data visible and records ``error``
- overlapping loads are sequenced by request id; only the latest issued
  load may write state
- create/update/delete/batch_delete notify success or error and, on
  success, await one full reload
- after ``close()`` no callback writes state, notifies or reloads

Example:
    >>> routes = AdapterPresets.routes(RouteService(client))
    >>> async with CollectionOrchestrator(routes, notifier=center) as table:
    ...     await table.handle_page_change(2)
    ...     result = await table.create({"routeName": "hk-01"})
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from nspass.collection.notifications import NotificationCenter
from nspass.collection.state import (
    CancelToken,
    CollectionState,
    Event,
    LoadFailed,
    LoadRequested,
    LoadSucceeded,
    MutationFailed,
    MutationRequested,
    MutationSucceeded,
    PageChangeRequested,
    ParamsChanged,
    SearchRequested,
    reduce,
)
from nspass.core.messages import (
    ERROR_MESSAGES,
    OperationType,
    default_success_message,
    resolve_error_message,
    should_notify_success,
)
from nspass.core.normalizer import coerce_result, parse_pagination
from nspass.core.results import (
    BatchOperationResult,
    ErrorCode,
    OperationResult,
    Pagination,
    QueryParams,
    StandardResult,
)
from nspass.exceptions import CollectionError
from nspass.services.base import supports_batch_delete
from nspass.settings import get_settings

logger = logging.getLogger(__name__)

StateListener = Callable[[CollectionState], None]

_LABELS = {
    OperationType.LOAD: "Load",
    OperationType.CREATE: "Create",
    OperationType.UPDATE: "Update",
    OperationType.DELETE: "Delete",
    OperationType.BATCH_DELETE: "Batch delete",
}


class CollectionOrchestrator:
    """
    Reactive state container for one paginated collection.

    Args:
        service: StandardService (or adapter) backing the collection.
        notifier: Notification channel; a private one is created if omitted.
        page_size: Initial page size (defaults to settings.default_page_size).
        params: Initial filter params.
        immediate: Load the first page on ``start()``.
        name: Collection name used in log records.
    """

    def __init__(
        self,
        service: Any,
        *,
        notifier: NotificationCenter | None = None,
        page_size: int | None = None,
        params: QueryParams | None = None,
        immediate: bool = True,
        name: str | None = None,
    ) -> None:
        self._service = service
        self._notifier = notifier or NotificationCenter()
        self._immediate = immediate
        self._name = name or type(service).__name__
        self._token = CancelToken()
        self._issued = 0
        self._listeners: list[StateListener] = []
        self._state = CollectionState(
            pagination=Pagination(page_size=page_size or get_settings().default_page_size),
            params=dict(params or {}),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Mount: load the first page when ``immediate`` is set."""
        if self._immediate:
            await self.reload()

    def close(self) -> None:
        """Tear down; in-flight calls still settle but no longer touch state."""
        if not self._token.cancelled:
            self._token.cancel()
            logger.debug("Collection closed", extra={"collection": self._name})

    @property
    def closed(self) -> bool:
        return self._token.cancelled

    async def __aenter__(self) -> "CollectionOrchestrator":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> CollectionState:
        return self._state

    @property
    def data(self) -> list[Any]:
        return self._state.data

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> CollectionError | None:
        return self._state.error

    @property
    def pagination(self) -> Pagination:
        return self._state.pagination

    @property
    def params(self) -> QueryParams:
        return dict(self._state.params)

    @property
    def notifier(self) -> NotificationCenter:
        return self._notifier

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new state. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, event: Event, token: CancelToken | None = None) -> bool:
        """Apply ``event`` unless the collection was torn down. Returns True if applied."""
        if (token or self._token).cancelled:
            logger.debug(
                "Dropping %s after teardown",
                type(event).__name__,
                extra={"collection": self._name},
            )
            return False
        new_state = reduce(self._state, event)
        if new_state is self._state:
            return False
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.error(
                    "State listener failed",
                    exc_info=True,
                    extra={"collection": self._name},
                )
        return True

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def reload(
        self,
        page: int | None = None,
        page_size: int | None = None,
        params: QueryParams | None = None,
    ) -> StandardResult[Any]:
        """
        Fetch one page with the current or overridden pagination and params.

        On success data and pagination are replaced; on failure ``error`` is
        set and the previous data is kept.
        """
        token = self._token
        self._issued += 1
        request_id = self._issued
        current = self._state
        target_page = _positive(page) or current.pagination.current
        target_size = _positive(page_size) or current.pagination.page_size
        query = {
            **(params if params is not None else current.params),
            "page": target_page,
            "pageSize": target_size,
        }
        self._dispatch(LoadRequested(request_id, target_page, target_size, params), token)

        result = await self._call(OperationType.LOAD, lambda: self._service.get_list(query))

        if token.cancelled:
            return result
        if result.success:
            items, total, pagination = _unwrap_list(result)
            applied = self._dispatch(LoadSucceeded(request_id, items, total, pagination), token)
            if applied and should_notify_success(OperationType.LOAD):
                await self._notifier.success(
                    default_success_message(OperationType.LOAD, _LABELS[OperationType.LOAD]),
                    operation=OperationType.LOAD,
                )
            return result

        message = resolve_error_message(result, _LABELS[OperationType.LOAD])
        applied = self._dispatch(
            LoadFailed(request_id, CollectionError(message, result.error_code)), token
        )
        if applied:
            await self._notifier.error(
                message, operation=OperationType.LOAD, error_code=result.error_code
            )
        else:
            logger.debug(
                "Discarding stale load failure",
                extra={"collection": self._name, "request_id": request_id},
            )
        return result

    async def handle_page_change(
        self, page: int, page_size: int | None = None
    ) -> StandardResult[Any]:
        """Move to ``page``; values below 1 keep the current page and size."""
        page = _positive(page) or self._state.pagination.current
        page_size = _positive(page_size)
        self._dispatch(PageChangeRequested(page, page_size))
        return await self.reload(page, page_size)

    async def handle_search(self, params: QueryParams) -> StandardResult[Any]:
        """Replace the filter params and reload from page 1."""
        params = dict(params or {})
        self._dispatch(SearchRequested(params))
        return await self.reload(1, None, params)

    def set_params(self, params: QueryParams) -> None:
        """Merge filter params without reloading."""
        self._dispatch(ParamsChanged(dict(params)))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(self, data: Any) -> OperationResult:
        return await self._mutate(OperationType.CREATE, lambda: self._service.create(data))

    async def update(self, id: Any, data: Any) -> OperationResult:
        return await self._mutate(OperationType.UPDATE, lambda: self._service.update(id, data))

    async def delete(self, id: Any) -> OperationResult:
        return await self._mutate(OperationType.DELETE, lambda: self._service.delete(id))

    async def batch_delete(self, ids: list[Any]) -> BatchOperationResult:
        """
        Delete several items in one call.

        A service without ``batch_delete`` yields a failure covering every
        id, without any network call.
        """
        ids = list(ids)
        operation = OperationType.BATCH_DELETE
        token = self._token
        if not supports_batch_delete(self._service):
            message = ERROR_MESSAGES[ErrorCode.BATCH_NOT_SUPPORTED]
            logger.warning(
                "Batch delete requested on a service without batch support",
                extra={"collection": self._name, "count": len(ids)},
            )
            if not token.cancelled:
                await self._notifier.error(
                    message, operation=operation, error_code=ErrorCode.BATCH_NOT_SUPPORTED
                )
            return BatchOperationResult.failed(ids, message)

        outcome = await self._mutate(
            operation, lambda: self._service.batch_delete(ids), count=len(ids)
        )
        if outcome.success:
            return BatchOperationResult.succeeded(ids)
        return BatchOperationResult.failed(ids, outcome.message or "")

    async def _mutate(
        self,
        operation: OperationType,
        call: Callable[[], Awaitable[Any]],
        count: int | None = None,
    ) -> OperationResult:
        token = self._token
        label = _LABELS[operation]
        self._dispatch(MutationRequested(operation), token)

        result = await self._call(operation, call)

        if result.success:
            message = default_success_message(operation, label, count)
            if self._dispatch(MutationSucceeded(operation), token):
                if should_notify_success(operation):
                    await self._notifier.success(message, operation=operation)
                await self.reload()
            return OperationResult(success=True, message=message, data=result.data)

        message = resolve_error_message(result, label)
        if self._dispatch(MutationFailed(operation, CollectionError(message, result.error_code)), token):
            await self._notifier.error(message, operation=operation, error_code=result.error_code)
        return OperationResult(success=False, message=message)

    async def _call(
        self,
        operation: OperationType,
        call: Callable[[], Awaitable[Any]],
    ) -> StandardResult[Any]:
        """Await a service call and normalize its return value; never raises."""
        try:
            return coerce_result(await call())
        except Exception as exc:
            logger.error(
                "Service call raised during %s",
                operation,
                exc_info=True,
                extra={"collection": self._name, "operation": str(operation)},
            )
            return StandardResult.fail(str(exc) or type(exc).__name__, ErrorCode.UNKNOWN_ERROR)


def _positive(value: int | None) -> int | None:
    """Return ``value`` when it is a usable page or size, else None."""
    if value is None or value < 1:
        return None
    return value


def _unwrap_list(result: StandardResult[Any]) -> tuple[list[Any], int | None, Pagination | None]:
    """
    Extract (items, total, pagination) from a successful list result.

    Payloads nested as ``{items, pagination}`` or ``{data: [...], total}``
    are unwrapped; any other value is treated as the row list itself.
    """
    data = result.data
    total = result.total
    pagination = result.pagination
    if isinstance(data, Mapping):
        key = "items" if "items" in data else "data" if isinstance(data.get("data"), list) else None
        if key is not None:
            if pagination is None and data.get("pagination") is not None:
                pagination = parse_pagination(data["pagination"], fallback_total=data.get("total"))
            if total is None and data.get("total") is not None:
                total = int(data["total"])
            data = data.get(key)
    if data is None:
        items: list[Any] = []
    elif isinstance(data, list | tuple):
        items = list(data)
    else:
        items = [data]
    if pagination is not None:
        total = pagination.total
    return items, total, pagination
