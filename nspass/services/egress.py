"""
nspass.services.egress - Egress configuration service

Endpoints under ``/v1/egress``. The backend offers no batch delete, so the
egress adapter preset leaves that verb out.
"""

from typing import Any

from nspass.core.results import QueryParams, StandardResult
from nspass.services.base import BaseService


class EgressService(BaseService):
    endpoint = "/v1/egress"

    async def get_egress_list(self, params: QueryParams | None = None) -> StandardResult[Any]:
        params = dict(params or {})
        if params.get("egressMode") == "EGRESS_MODE_UNSPECIFIED":
            params.pop("egressMode")
        # Free-text search filters by egress name
        if params.get("search") and not params.get("egressName"):
            params["egressName"] = params["search"]
        params.pop("search", None)
        return await self.client.get(self.endpoint, self.build_query_params(params))

    async def create_egress(self, data: Any) -> StandardResult[Any]:
        return await self.client.post(self.endpoint, data)

    async def get_egress_by_id(self, id: Any) -> StandardResult[Any]:
        return await self.client.get(self.item_endpoint(id))

    async def update_egress(self, id: Any, data: Any) -> StandardResult[Any]:
        return await self.client.put(self.item_endpoint(id), data)

    async def delete_egress(self, id: Any) -> StandardResult[Any]:
        return await self.client.delete(self.item_endpoint(id))

    async def get_egress_stats(self, id: Any, days: int | None = None) -> StandardResult[Any]:
        return await self.client.get(f"{self.item_endpoint(id)}/stats", {"days": days})

    async def test_egress_connection(self, id: Any, data: Any = None) -> StandardResult[Any]:
        return await self.client.post(f"{self.item_endpoint(id)}/test", data or {})
