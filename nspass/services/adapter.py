"""
nspass.services.adapter - Service Adapter

Wraps a resource service with idiosyncratic method names and parameter or
response shapes into the standard collection contract (get_list, create,
update, delete and optionally batch_delete).

The verb -> callable table is resolved once, when the adapter is built.
A malformed mapping raises AdapterConfigError right there; after that,
each adapted verb is a plain forwarding call:

    transform params -> call the underlying method once -> transform response

Example:
    >>> adapter = create_adapter(
    ...     egress_service,
    ...     {"get_list": "get_egress_list", "create": "create_egress",
    ...      "update": "update_egress", "delete": "delete_egress"},
    ... )
    >>> hasattr(adapter, "batch_delete")
    False
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from nspass.core.normalizer import is_recognized_shape, normalize
from nspass.core.results import Pagination, QueryParams, StandardResult
from nspass.exceptions import AdapterConfigError
from nspass.services.base import VERBS

logger = logging.getLogger(__name__)

MethodMapping = Mapping[str, str]
ParamTransformer = Callable[..., Any]
ResponseTransformer = Callable[[Any], StandardResult[Any]]

_REQUIRED_VERBS = ("get_list", "create", "update", "delete")


class ServiceAdapter:
    """
    StandardService view over an arbitrary service object.

    ``batch_delete`` exists on an instance only when the mapping names it,
    so ``hasattr(adapter, "batch_delete")`` reports the capability.
    """

    def __init__(
        self,
        service: Any,
        method_mapping: MethodMapping | None = None,
        param_transformers: Mapping[str, ParamTransformer] | None = None,
        response_transformers: Mapping[str, ResponseTransformer] | None = None,
    ) -> None:
        method_mapping = dict(method_mapping or {})
        param_transformers = dict(param_transformers or {})
        response_transformers = dict(response_transformers or {})
        for label, table in (
            ("method_mapping", method_mapping),
            ("param_transformers", param_transformers),
            ("response_transformers", response_transformers),
        ):
            unknown = sorted(set(table) - set(VERBS))
            if unknown:
                raise AdapterConfigError(f"Unknown verb(s) in {label}: {', '.join(unknown)}")

        self._service = service
        self._method_names: dict[str, str] = {}
        self._table: dict[str, Callable[..., Awaitable[Any]]] = {}

        verbs = list(_REQUIRED_VERBS)
        if method_mapping.get("batch_delete"):
            verbs.append("batch_delete")

        for verb in verbs:
            name = method_mapping.get(verb) or verb
            method = getattr(service, name, None)
            if method is None:
                raise AdapterConfigError(
                    f"{type(service).__name__} has no method {name!r} for verb {verb!r}"
                )
            if not callable(method):
                raise AdapterConfigError(
                    f"{type(service).__name__}.{name} mapped for verb {verb!r} is not callable"
                )
            for label, table in (
                ("param transformer", param_transformers),
                ("response transformer", response_transformers),
            ):
                if verb in table and not callable(table[verb]):
                    raise AdapterConfigError(f"{label} for verb {verb!r} is not callable")
            self._method_names[verb] = name
            self._table[verb] = _forwarder(
                method,
                param_transformers.get(verb),
                response_transformers.get(verb),
                spread=(verb == "update"),
            )

        if "batch_delete" in self._table:
            self.batch_delete = self._table["batch_delete"]

        logger.debug(
            "Built service adapter",
            extra={"service": type(service).__name__, "methods": dict(self._method_names)},
        )

    @property
    def service(self) -> Any:
        return self._service

    @property
    def method_names(self) -> dict[str, str]:
        """Resolved verb -> underlying method name."""
        return dict(self._method_names)

    def supports(self, verb: str) -> bool:
        return verb in self._table

    async def get_list(self, params: QueryParams | None = None) -> StandardResult[Any]:
        return await self._table["get_list"](params or {})

    async def create(self, data: Any) -> StandardResult[Any]:
        return await self._table["create"](data)

    async def update(self, id: Any, data: Any) -> StandardResult[Any]:
        return await self._table["update"](id, data)

    async def delete(self, id: Any) -> StandardResult[Any]:
        return await self._table["delete"](id)

    def __repr__(self) -> str:
        return f"ServiceAdapter({type(self._service).__name__}, {self._method_names!r})"


def _forwarder(
    method: Callable[..., Awaitable[Any]],
    param_transformer: ParamTransformer | None,
    response_transformer: ResponseTransformer | None,
    *,
    spread: bool = False,
) -> Callable[..., Awaitable[Any]]:
    """
    Build one adapted verb.

    ``update`` takes ``(id, data)`` and its transformer returns the positional
    argument tuple for the underlying method; every other verb takes and
    passes a single argument.
    """

    async def call(*args: Any) -> Any:
        if spread:
            call_args = tuple(param_transformer(*args)) if param_transformer else args
        else:
            call_args = (param_transformer(*args),) if param_transformer else args
        response = await method(*call_args)
        return response_transformer(response) if response_transformer else response

    return call


def create_adapter(
    service: Any,
    method_mapping: MethodMapping | None = None,
    param_transformers: Mapping[str, ParamTransformer] | None = None,
    response_transformers: Mapping[str, ResponseTransformer] | None = None,
) -> ServiceAdapter:
    """
    Adapt ``service`` to the standard collection contract.

    Args:
        service: Object exposing the underlying async methods.
        method_mapping: verb -> method name. Unmapped verbs fall back to the
            method of the same name; ``batch_delete`` is left out unless mapped.
        param_transformers: verb -> callable rewriting the standard arguments.
        response_transformers: verb -> callable turning the raw return value
            into a StandardResult. Without one the raw value is passed through.

    Raises:
        AdapterConfigError: On unknown verbs or missing/non-callable methods.
    """
    return ServiceAdapter(service, method_mapping, param_transformers, response_transformers)


# ---------------------------------------------------------------------------
# Transformers used by the presets
# ---------------------------------------------------------------------------

# Route filter fields forwarded as top-level query keys
ROUTE_FILTER_FIELDS = ("protocol", "type", "status")


def route_list_params(params: QueryParams) -> QueryParams:
    """Standard list params -> RouteService query keys."""
    transformed: QueryParams = {}
    if params.get("page"):
        transformed["pagination.page"] = params["page"]
    if params.get("pageSize"):
        transformed["pagination.pageSize"] = params["pageSize"]
    if params.get("search"):
        transformed["query"] = params["search"]
    for item in params.get("filters") or []:
        if isinstance(item, Mapping) and item.get("field") in ROUTE_FILTER_FIELDS:
            transformed[item["field"]] = item.get("value")
    for key in ROUTE_FILTER_FIELDS:
        if params.get(key) not in (None, ""):
            transformed[key] = params[key]
    return transformed


def route_list_response(response: Any) -> StandardResult[Any]:
    """Accept either a standard result or a bare ``{data, total, pagination}`` payload."""
    if isinstance(response, StandardResult) or is_recognized_shape(response):
        return normalize(response)
    if isinstance(response, Mapping):
        return normalize(
            {
                "success": True,
                "data": response.get("data", response),
                "message": response.get("message"),
                "total": response.get("total"),
                "pagination": response.get("pagination"),
            }
        )
    return StandardResult.ok(response)


def forward_rule_list_params(params: QueryParams) -> QueryParams:
    transformed: QueryParams = {}
    if params.get("page"):
        transformed["page"] = params["page"]
    if params.get("pageSize"):
        transformed["pageSize"] = params["pageSize"]
    if params.get("search"):
        transformed["name"] = params["search"]
    return transformed


def forward_rule_list_response(response: Any) -> StandardResult[Any]:
    """
    Flatten ``data: {data, total, page, pageSize}`` into a paginated result.

    Anything else is passed through.
    """
    result = normalize(response)
    payload = result.data
    if not result.success or not isinstance(payload, Mapping) or "data" not in payload:
        return result
    total = payload.get("total")
    pagination = None
    if payload.get("pageSize") and total is not None:
        pagination = Pagination(
            current=int(payload.get("page") or 1),
            page_size=int(payload["pageSize"]),
            total=int(total),
        )
    return StandardResult.ok(
        payload.get("data") or [],
        message=result.message,
        total=int(total) if total is not None else None,
        pagination=pagination,
    )


class AdapterPresets:
    """Ready-made adapters for the console's resource services."""

    @staticmethod
    def routes(service: Any) -> ServiceAdapter:
        return create_adapter(
            service,
            {
                "get_list": "get_route_list",
                "create": "create_route",
                "update": "update_route",
                "delete": "delete_route",
                "batch_delete": "batch_delete_routes",
            },
            param_transformers={"get_list": route_list_params},
            response_transformers={"get_list": route_list_response},
        )

    @staticmethod
    def egress(service: Any) -> ServiceAdapter:
        # The egress backend has no batch endpoint
        return create_adapter(
            service,
            {
                "get_list": "get_egress_list",
                "create": "create_egress",
                "update": "update_egress",
                "delete": "delete_egress",
            },
        )

    @staticmethod
    def forward_rules(service: Any) -> ServiceAdapter:
        return create_adapter(
            service,
            {
                "get_list": "get_rules",
                "create": "create_rule",
                "update": "update_rule",
                "delete": "delete_rule",
                "batch_delete": "batch_delete_rules",
            },
            param_transformers={
                "get_list": forward_rule_list_params,
                "update": lambda id, data: ({**(data or {}), "id": id},),
                "delete": lambda id: {"id": id},
                "batch_delete": lambda ids: {"ids": list(ids)},
            },
            response_transformers={"get_list": forward_rule_list_response},
        )

    @staticmethod
    def users(service: Any) -> ServiceAdapter:
        return create_adapter(
            service,
            {
                "get_list": "get_user_list",
                "create": "create_user",
                "update": "update_user",
                "delete": "delete_user",
                "batch_delete": "batch_delete_users",
            },
        )

    @staticmethod
    def standard(service: Any) -> Any:
        """Services that already speak the standard verbs are used as-is."""
        return service
