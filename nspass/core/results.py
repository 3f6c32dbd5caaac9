"""
nspass.core.results - Canonical result types

Every backend response is normalized into ``StandardResult`` before any
other layer sees it. ``OperationResult`` and ``BatchOperationResult`` are
what the collection orchestrator hands back to view code for mutations.
"""

from dataclasses import dataclass, field
from math import ceil
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Open key/value bag; reserved keys are page, pageSize and search.
QueryParams = dict[str, Any]


class ErrorCode:
    """Error taxonomy shared by the network core, normalizer and orchestrator.

    Server-reported business failures carry arbitrary codes from the backend;
    the constants below are the ones the client produces itself.
    """

    NETWORK_ERROR = "NETWORK_ERROR"
    REQUEST_ERROR = "REQUEST_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    BATCH_NOT_SUPPORTED = "BATCH_NOT_SUPPORTED"

    @staticmethod
    def http(status_code: int) -> str:
        """Code for a non-2xx response without a usable body."""
        return f"HTTP_{status_code}"


class Pagination(BaseModel):
    """
    Pagination metadata for one page of a collection.

    ``total_pages`` is computed from ``total`` and ``page_size`` and cannot be
    set independently; any ``totalPages`` sent by the backend is ignored.

    Example:
        >>> p = Pagination(current=2, page_size=20, total=35)
        >>> p.total_pages
        2
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    current: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1)
    total: int = Field(default=0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.page_size)

    def with_total(self, total: int) -> "Pagination":
        """Return a copy with a new total; total_pages follows."""
        return Pagination(current=self.current, page_size=self.page_size, total=total)

    def with_page(self, current: int, page_size: int | None = None) -> "Pagination":
        """Return a copy pointing at another page."""
        return Pagination(
            current=current,
            page_size=page_size or self.page_size,
            total=self.total,
        )


class StandardResult(BaseModel, Generic[T]):
    """
    Canonical result of one backend call.

    Invariants enforced on construction:
    - ``success=False`` drops ``data``
    - when ``pagination`` is present, ``total == pagination.total``

    Instances are immutable value objects.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    success: bool
    data: T | None = None
    message: str | None = None
    error_code: str | None = None
    total: int | None = Field(default=None, ge=0)
    pagination: Pagination | None = None

    @model_validator(mode="before")
    @classmethod
    def _enforce_invariants(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        values = dict(values)
        if not values.get("success"):
            values.pop("data", None)
        pagination = values.get("pagination")
        if isinstance(pagination, Pagination):
            values["total"] = pagination.total
        elif isinstance(pagination, dict):
            values["total"] = pagination.get("total", 0)
        return values

    @classmethod
    def ok(
        cls,
        data: Any = None,
        *,
        message: str | None = None,
        total: int | None = None,
        pagination: Pagination | None = None,
    ) -> "StandardResult[Any]":
        """Build a successful result."""
        return cls(success=True, data=data, message=message, total=total, pagination=pagination)

    @classmethod
    def fail(cls, message: str, error_code: str | None = None) -> "StandardResult[Any]":
        """Build a failed result."""
        return cls(success=False, message=message, error_code=error_code)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class OperationResult:
    """Result of a single create/update/delete call.

    Plain dataclass: it never crosses the HTTP boundary, it is only handed
    from the orchestrator to view code.
    """

    success: bool
    message: str | None = None
    data: Any = None


@dataclass(frozen=True)
class BatchFailure:
    """One id that could not be processed in a batch operation."""

    id: Any
    message: str


@dataclass(frozen=True)
class BatchOperationResult:
    """Result of a batch operation; success_count + failure_count == len(ids)."""

    success: bool
    success_count: int
    failure_count: int
    failures: list[BatchFailure] = field(default_factory=list)

    @classmethod
    def succeeded(cls, ids: list[Any]) -> "BatchOperationResult":
        return cls(success=True, success_count=len(ids), failure_count=0)

    @classmethod
    def failed(cls, ids: list[Any], message: str) -> "BatchOperationResult":
        return cls(
            success=False,
            success_count=0,
            failure_count=len(ids),
            failures=[BatchFailure(id=item_id, message=message) for item_id in ids],
        )
