"""
nspass.services.base - Standard service contract and base resource service

StandardService is the contract the collection orchestrator depends on.
Services that already use the standard verb names (everything built on
BaseService) satisfy it directly; the rest are wrapped with
``nspass.services.adapter.create_adapter``.
"""

from abc import ABC
from typing import Any, Protocol, runtime_checkable

from nspass.client.http import HttpClient
from nspass.core.results import QueryParams, StandardResult

# The five standard verbs, in canonical order
VERBS: tuple[str, ...] = ("get_list", "create", "update", "delete", "batch_delete")

# Query keys handled by build_query_params itself
_PAGINATION_KEYS = frozenset({"page", "pageSize", "current"})


@runtime_checkable
class StandardService(Protocol):
    """Four-verb collection contract."""

    async def get_list(self, params: QueryParams | None = None) -> StandardResult[Any]: ...

    async def create(self, data: Any) -> StandardResult[Any]: ...

    async def update(self, id: Any, data: Any) -> StandardResult[Any]: ...

    async def delete(self, id: Any) -> StandardResult[Any]: ...


@runtime_checkable
class BatchDeleteService(StandardService, Protocol):
    """StandardService that also supports batch deletion."""

    async def batch_delete(self, ids: list[Any]) -> StandardResult[Any]: ...


def supports_batch_delete(service: Any) -> bool:
    """True if ``service`` exposes a callable ``batch_delete``."""
    return callable(getattr(service, "batch_delete", None))


class BaseService(ABC):
    """
    CRUD template for one REST resource under ``/v1/<resource>``.

    Subclasses set ``endpoint``; every method returns the HttpClient's
    normalized result.

    Example:
        >>> class ServerService(BaseService):
        ...     endpoint = "/v1/servers"
        >>> servers = ServerService(client)
        >>> await servers.get_list({"page": 1, "pageSize": 20})
    """

    endpoint: str = ""

    def __init__(self, client: HttpClient) -> None:
        if not self.endpoint:
            raise TypeError(f"{type(self).__name__} must define an endpoint")
        self._client = client

    @property
    def client(self) -> HttpClient:
        return self._client

    def build_query_params(self, params: QueryParams | None = None) -> QueryParams:
        """
        Normalize list query parameters.

        ``page`` is taken from ``page`` or its alias ``current``; None and
        empty-string values are dropped; other keys pass through untouched.
        """
        params = params or {}
        query: QueryParams = {}
        page = params.get("page") or params.get("current")
        if page:
            query["page"] = page
        if params.get("pageSize"):
            query["pageSize"] = params["pageSize"]
        for key, value in params.items():
            if key in _PAGINATION_KEYS or value is None or value == "":
                continue
            query[key] = value
        return query

    def item_endpoint(self, id: Any) -> str:
        return f"{self.endpoint}/{id}"

    async def get_list(self, params: QueryParams | None = None) -> StandardResult[Any]:
        return await self._client.get(self.endpoint, self.build_query_params(params))

    async def get_by_id(self, id: Any) -> StandardResult[Any]:
        return await self._client.get(self.item_endpoint(id))

    async def create(self, data: Any) -> StandardResult[Any]:
        return await self._client.post(self.endpoint, data)

    async def update(self, id: Any, data: Any) -> StandardResult[Any]:
        return await self._client.put(self.item_endpoint(id), data)

    async def delete(self, id: Any) -> StandardResult[Any]:
        return await self._client.delete(self.item_endpoint(id))

    async def batch_delete(self, ids: list[Any]) -> StandardResult[Any]:
        return await self._client.post(f"{self.endpoint}/batch-delete", {"ids": list(ids)})

    async def search(self, query: str, params: QueryParams | None = None) -> StandardResult[Any]:
        merged = {**(params or {}), "query": query}
        return await self._client.get(f"{self.endpoint}/search", self.build_query_params(merged))

    async def batch_update_status(self, ids: list[Any], status: str) -> StandardResult[Any]:
        return await self._client.post(
            f"{self.endpoint}/batch/status", {"ids": list(ids), "status": status}
        )
