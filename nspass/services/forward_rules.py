"""
nspass.services.forward_rules - Forward path rule service

Endpoints under ``/v1/forward-path-rules``. Methods take a single request
mapping (``{"id": ...}``, ``{"ids": [...]}``) rather than positional ids,
and the list endpoint nests ``{data, total, page, pageSize}`` inside
``data``.
"""

from collections.abc import Mapping
from typing import Any

from nspass.core.results import QueryParams, StandardResult
from nspass.services.base import BaseService


class ForwardRuleService(BaseService):
    endpoint = "/v1/forward-path-rules"

    async def get_rules(self, request: QueryParams | None = None) -> StandardResult[Any]:
        request = request or {}
        query = {key: request.get(key) for key in ("page", "pageSize", "name", "status")}
        return await self.client.get(self.endpoint, self.build_query_params(query))

    async def create_rule(self, request: Any) -> StandardResult[Any]:
        return await self.client.post(self.endpoint, request)

    async def get_rule(self, request: Mapping[str, Any]) -> StandardResult[Any]:
        return await self.client.get(self.item_endpoint(request["id"]))

    async def update_rule(self, request: Mapping[str, Any]) -> StandardResult[Any]:
        body = {key: value for key, value in request.items() if key != "id"}
        return await self.client.put(self.item_endpoint(request["id"]), body)

    async def delete_rule(self, request: Mapping[str, Any]) -> StandardResult[Any]:
        return await self.client.delete(self.item_endpoint(request["id"]))

    async def batch_delete_rules(self, request: Mapping[str, Any]) -> StandardResult[Any]:
        return await self.client.post(
            f"{self.endpoint}/batch-delete", {"ids": list(request["ids"])}
        )

    async def toggle_rule(self, request: Mapping[str, Any]) -> StandardResult[Any]:
        return await self.client.post(
            f"{self.item_endpoint(request['id'])}/toggle",
            {"enabled": bool(request.get("enabled"))},
        )
