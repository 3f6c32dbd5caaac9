"""
nspass.services.users - User administration service (``/v1/users``)
"""

from typing import Any

from nspass.core.results import QueryParams, StandardResult
from nspass.services.base import BaseService


class UserService(BaseService):
    endpoint = "/v1/users"

    async def get_user_list(self, params: QueryParams | None = None) -> StandardResult[Any]:
        return await self.get_list(params)

    async def create_user(self, data: Any) -> StandardResult[Any]:
        return await self.create(data)

    async def update_user(self, id: Any, data: Any) -> StandardResult[Any]:
        return await self.update(id, data)

    async def delete_user(self, id: Any) -> StandardResult[Any]:
        return await self.delete(id)

    async def batch_delete_users(self, ids: list[Any]) -> StandardResult[Any]:
        return await self.batch_delete(ids)
