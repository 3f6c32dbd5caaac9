"""
nspass.collection.state - Collection state and its transition function

CollectionState is an immutable snapshot; ``reduce(state, event)`` returns
the next snapshot and never touches the network. The orchestrator is the
only producer of events.

Every list load carries a monotonically increasing request id. Load
outcomes whose id is not the latest issued one are stale and leave the
state unchanged, so a slow earlier response can never overwrite a newer
one.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from nspass.core.results import Pagination, QueryParams
from nspass.exceptions import CollectionError


@dataclass(frozen=True)
class CollectionState:
    data: list[Any] = field(default_factory=list)
    loading: bool = False
    error: CollectionError | None = None
    pagination: Pagination = field(default_factory=Pagination)
    params: QueryParams = field(default_factory=dict)
    # Number of create/update/delete/batch-delete calls in flight
    mutating: int = 0
    latest_request_id: int = 0


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadRequested:
    request_id: int
    page: int
    page_size: int
    params: QueryParams | None = None


@dataclass(frozen=True)
class LoadSucceeded:
    request_id: int
    data: list[Any]
    total: int | None = None
    pagination: Pagination | None = None


@dataclass(frozen=True)
class LoadFailed:
    request_id: int
    error: CollectionError


@dataclass(frozen=True)
class PageChangeRequested:
    page: int
    page_size: int | None = None


@dataclass(frozen=True)
class SearchRequested:
    params: QueryParams


@dataclass(frozen=True)
class ParamsChanged:
    params: QueryParams


@dataclass(frozen=True)
class MutationRequested:
    operation: str


@dataclass(frozen=True)
class MutationSucceeded:
    operation: str


@dataclass(frozen=True)
class MutationFailed:
    operation: str
    error: CollectionError


Event = (
    LoadRequested
    | LoadSucceeded
    | LoadFailed
    | PageChangeRequested
    | SearchRequested
    | ParamsChanged
    | MutationRequested
    | MutationSucceeded
    | MutationFailed
)


def reduce(state: CollectionState, event: Event) -> CollectionState:
    """Return the state that follows ``event``."""
    if isinstance(event, LoadRequested):
        return replace(
            state,
            loading=True,
            latest_request_id=event.request_id,
            pagination=state.pagination.with_page(event.page, event.page_size),
            params=dict(event.params) if event.params is not None else state.params,
        )

    if isinstance(event, LoadSucceeded):
        if event.request_id != state.latest_request_id:
            return state
        if event.pagination is not None:
            pagination = event.pagination
        else:
            total = event.total if event.total is not None else len(event.data)
            pagination = state.pagination.with_total(total)
        return replace(
            state,
            data=list(event.data),
            loading=False,
            error=None,
            pagination=pagination,
        )

    if isinstance(event, LoadFailed):
        if event.request_id != state.latest_request_id:
            return state
        # Previous data stays visible
        return replace(state, loading=False, error=event.error)

    if isinstance(event, PageChangeRequested):
        return replace(state, pagination=state.pagination.with_page(event.page, event.page_size))

    if isinstance(event, SearchRequested):
        return replace(state, params=dict(event.params), pagination=state.pagination.with_page(1))

    if isinstance(event, ParamsChanged):
        return replace(state, params={**state.params, **event.params})

    if isinstance(event, MutationRequested):
        return replace(state, mutating=state.mutating + 1)

    if isinstance(event, MutationSucceeded | MutationFailed):
        return replace(state, mutating=max(state.mutating - 1, 0))

    raise TypeError(f"Unknown collection event: {event!r}")


class CancelToken:
    """Liveness flag shared by every async call of one orchestrator."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
