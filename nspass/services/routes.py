"""
nspass.services.routes - Route (line) management service

Endpoints under ``/v1/routes``. List queries use the nested
``pagination.page`` / ``pagination.pageSize`` keys; batch endpoints live
under ``/v1/routes/batch/...``.
"""

from typing import Any

from nspass.core.results import QueryParams, StandardResult
from nspass.services.base import BaseService

# Enum values the backend treats as "no filter"
_UNSPECIFIED = ("ROUTE_TYPE_UNSPECIFIED", "ROUTE_STATUS_UNSPECIFIED", "PROTOCOL_UNSPECIFIED")


class RouteService(BaseService):
    endpoint = "/v1/routes"

    async def get_route_list(self, params: QueryParams | None = None) -> StandardResult[Any]:
        params = params or {}
        query: QueryParams = {}
        for key in ("pagination.page", "pagination.pageSize", "query"):
            if params.get(key):
                query[key] = params[key]
        for key in ("type", "status", "protocol"):
            value = params.get(key)
            if value and value not in _UNSPECIFIED:
                query[key] = value
        return await self.client.get(self.endpoint, query)

    async def create_route(self, data: Any) -> StandardResult[Any]:
        return await self.client.post(self.endpoint, data)

    async def get_route_by_id(self, id: Any) -> StandardResult[Any]:
        return await self.client.get(self.item_endpoint(id))

    async def update_route(self, id: Any, data: Any) -> StandardResult[Any]:
        return await self.client.put(self.item_endpoint(id), data)

    async def delete_route(self, id: Any) -> StandardResult[Any]:
        return await self.client.delete(self.item_endpoint(id))

    async def batch_delete_routes(self, ids: list[Any]) -> StandardResult[Any]:
        return await self.client.post(f"{self.endpoint}/batch/delete", {"ids": list(ids)})

    async def batch_update_route_status(self, ids: list[Any], status: str) -> StandardResult[Any]:
        return await self.batch_update_status(ids, status)
