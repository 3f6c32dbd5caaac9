"""
Unit tests for nspass.collection.orchestrator - Collection State Orchestrator.

The service is a stand-in built from AsyncMocks; HTTP is covered by the
integration tests.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from nspass.collection.notifications import NotificationCenter, NotificationLevel
import nspass.collection.orchestrator as orchestrator_module
from nspass.collection.orchestrator import CollectionOrchestrator
from nspass.core.results import ErrorCode, Pagination, StandardResult


def make_service(batch: bool = True, items: list | None = None) -> SimpleNamespace:
    service = SimpleNamespace(
        get_list=AsyncMock(return_value=StandardResult.ok(items or [], total=len(items or []))),
        create=AsyncMock(return_value=StandardResult.ok({"id": 1})),
        update=AsyncMock(return_value=StandardResult.ok({"id": 1})),
        delete=AsyncMock(return_value=StandardResult.ok()),
    )
    if batch:
        service.batch_delete = AsyncMock(return_value=StandardResult.ok())
    return service


def make_notifier() -> tuple[NotificationCenter, AsyncMock]:
    center = NotificationCenter()
    handler = AsyncMock()
    center.register(handler)
    return center, handler


def levels(handler: AsyncMock) -> list[str]:
    return [call.args[0].level for call in handler.await_args_list]


# ============================================================================
# Lifecycle
# ============================================================================


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_immediate_load_on_start(self):
        service = make_service(items=["a"])
        async with CollectionOrchestrator(service, page_size=20) as table:
            assert table.data == ["a"]
        service.get_list.assert_awaited_once_with({"page": 1, "pageSize": 20})

    @pytest.mark.asyncio
    async def test_no_load_when_not_immediate(self):
        service = make_service()
        async with CollectionOrchestrator(service, immediate=False):
            pass
        service.get_list.assert_not_awaited()

    def test_default_page_size_from_settings(self):
        table = CollectionOrchestrator(make_service(), immediate=False)
        assert table.pagination.page_size == 10

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        table = CollectionOrchestrator(make_service(), immediate=False)
        table.close()
        table.close()
        assert table.closed is True


# ============================================================================
# Loading
# ============================================================================


class TestLoading:
    @pytest.mark.asyncio
    async def test_reload_with_overrides(self):
        service = make_service()
        table = CollectionOrchestrator(service, immediate=False, params={"status": "on"})
        await table.reload(3, 50)
        await table.reload(params={"type": "x"})

        first, second = (c.args[0] for c in service.get_list.await_args_list)
        assert first == {"status": "on", "page": 3, "pageSize": 50}
        assert second == {"type": "x", "page": 3, "pageSize": 50}
        assert table.params == {"type": "x"}

    @pytest.mark.asyncio
    async def test_success_updates_pagination(self):
        service = make_service()
        service.get_list.return_value = StandardResult.ok(
            list(range(15)), pagination=Pagination(current=2, page_size=20, total=35)
        )
        table = CollectionOrchestrator(service, immediate=False)
        await table.handle_page_change(2, 20)
        assert len(table.data) == 15
        assert table.pagination.current == 2
        assert table.pagination.total_pages == 2
        assert table.loading is False

    @pytest.mark.asyncio
    async def test_items_payload_unwrapped(self):
        service = make_service()
        service.get_list.return_value = StandardResult.ok(
            {"items": [1, 2], "pagination": {"page": 1, "pageSize": 2, "total": 9}}
        )
        table = CollectionOrchestrator(service, immediate=False)
        await table.reload()
        assert table.data == [1, 2]
        assert table.pagination.total_pages == 5

    @pytest.mark.asyncio
    async def test_nested_data_payload_unwrapped(self):
        service = make_service()
        service.get_list.return_value = StandardResult.ok(
            {"data": [{"id": 1}, {"id": 2}], "total": 5}
        )
        table = CollectionOrchestrator(service, page_size=2, immediate=False)
        await table.reload()
        assert table.data == [{"id": 1}, {"id": 2}]
        assert table.pagination.total == 5

    @pytest.mark.asyncio
    async def test_raw_dict_results_are_normalized(self):
        service = make_service()
        service.get_list.return_value = {"status": {"success": True}, "data": ["x"]}
        table = CollectionOrchestrator(service, immediate=False)
        await table.reload()
        assert table.data == ["x"]

    @pytest.mark.asyncio
    async def test_failure_keeps_data_and_notifies(self):
        service = make_service(items=["a"])
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(service, notifier=notifier)
        await table.start()

        service.get_list.return_value = StandardResult.fail("Service down", "HTTP_503")
        result = await table.reload()

        assert result.success is False
        assert table.data == ["a"]
        assert table.error.message == "Service down"
        assert table.error.error_code == "HTTP_503"
        assert levels(handler) == [NotificationLevel.ERROR]

    @pytest.mark.asyncio
    async def test_successful_load_is_silent(self):
        notifier, handler = make_notifier()
        async with CollectionOrchestrator(make_service(), notifier=notifier):
            pass
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page", [0, -1])
    async def test_page_change_below_one_keeps_current_page(self, page):
        service = make_service()
        table = CollectionOrchestrator(service, page_size=20, immediate=False)
        await table.handle_page_change(3)

        result = await table.handle_page_change(page)

        assert result.success is True
        assert table.pagination.current == 3
        assert service.get_list.await_args.args[0] == {"page": 3, "pageSize": 20}

    @pytest.mark.asyncio
    async def test_page_size_below_one_keeps_current_size(self):
        service = make_service()
        table = CollectionOrchestrator(service, page_size=20, immediate=False)

        await table.handle_page_change(2, -5)

        assert table.pagination.page_size == 20
        assert service.get_list.await_args.args[0] == {"page": 2, "pageSize": 20}

    @pytest.mark.asyncio
    async def test_reload_with_negative_overrides_uses_current(self):
        service = make_service()
        table = CollectionOrchestrator(service, page_size=20, immediate=False)
        await table.handle_page_change(2)

        result = await table.reload(-1, -1)

        assert result.success is True
        assert table.error is None
        assert service.get_list.await_args.args[0] == {"page": 2, "pageSize": 20}

    @pytest.mark.asyncio
    async def test_service_exception_becomes_failure(self):
        service = make_service()
        service.get_list.side_effect = RuntimeError("adapter bug")
        table = CollectionOrchestrator(service, immediate=False)

        result = await table.reload()

        assert result.error_code == ErrorCode.UNKNOWN_ERROR
        assert table.error.message == "adapter bug"

    @pytest.mark.asyncio
    async def test_search_resets_page_and_replaces_params(self):
        service = make_service()
        table = CollectionOrchestrator(service, immediate=False, params={"old": 1})
        await table.handle_page_change(4)
        await table.handle_search({"search": "hk"})

        assert service.get_list.await_args.args[0] == {"search": "hk", "page": 1, "pageSize": 10}
        assert table.pagination.current == 1
        assert table.params == {"search": "hk"}

    @pytest.mark.asyncio
    async def test_set_params_merges_without_loading(self):
        service = make_service()
        table = CollectionOrchestrator(service, immediate=False, params={"a": 1})
        table.set_params({"b": 2})
        assert table.params == {"a": 1, "b": 2}
        service.get_list.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_out_of_order_responses(self):
        gate = asyncio.Event()

        async def get_list(params):
            if params["page"] == 1:
                await gate.wait()
                return StandardResult.ok(["stale"])
            return StandardResult.ok(["fresh"])

        service = make_service()
        service.get_list = AsyncMock(side_effect=get_list)
        table = CollectionOrchestrator(service, immediate=False)

        slow = asyncio.create_task(table.reload(1))
        await asyncio.sleep(0)
        await table.reload(2)
        assert table.data == ["fresh"]
        assert table.loading is False

        gate.set()
        await slow
        assert table.data == ["fresh"]
        assert table.pagination.current == 2

    @pytest.mark.asyncio
    async def test_loading_until_latest_settles(self):
        gate = asyncio.Event()

        async def get_list(params):
            if params["page"] == 2:
                await gate.wait()
            return StandardResult.ok([params["page"]])

        service = make_service()
        service.get_list = AsyncMock(side_effect=get_list)
        table = CollectionOrchestrator(service, immediate=False)

        await table.reload(1)
        latest = asyncio.create_task(table.reload(2))
        await asyncio.sleep(0)
        assert table.loading is True

        gate.set()
        await latest
        assert table.loading is False
        assert table.data == [2]


# ============================================================================
# Subscriptions
# ============================================================================


class TestSubscriptions:
    @pytest.mark.asyncio
    async def test_listener_sees_loading_then_result(self):
        table = CollectionOrchestrator(make_service(items=["a"]), immediate=False)
        seen = []
        table.subscribe(lambda state: seen.append((state.loading, list(state.data))))

        await table.reload()

        assert seen == [(True, []), (False, ["a"])]

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        table = CollectionOrchestrator(make_service(), immediate=False)
        listener = MagicMock()
        unsubscribe = table.subscribe(listener)
        unsubscribe()
        unsubscribe()
        await table.reload()
        listener.assert_not_called()

    @pytest.mark.asyncio
    async def test_listener_failure_is_contained(self):
        table = CollectionOrchestrator(make_service(items=["a"]), immediate=False)
        table.subscribe(MagicMock(side_effect=RuntimeError("render failed")))
        await table.reload()
        assert table.data == ["a"]


# ============================================================================
# Mutations
# ============================================================================


class TestMutations:
    @pytest.mark.asyncio
    async def test_create_success_notifies_and_reloads(self):
        service = make_service()
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(service, notifier=notifier, immediate=False)

        result = await table.create({"name": "x"})

        assert result.success is True
        assert result.message == "Created successfully"
        assert result.data == {"id": 1}
        service.create.assert_awaited_once_with({"name": "x"})
        service.get_list.assert_awaited_once()
        assert levels(handler) == [NotificationLevel.SUCCESS]

    @pytest.mark.asyncio
    async def test_success_announcement_follows_operation_policy(self, monkeypatch):
        monkeypatch.setattr(orchestrator_module, "should_notify_success", lambda op: False)
        service = make_service()
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(service, notifier=notifier, immediate=False)

        result = await table.create({"name": "x"})

        assert result.success is True
        handler.assert_not_awaited()
        service.get_list.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_and_delete_forward_arguments(self):
        service = make_service()
        table = CollectionOrchestrator(service, immediate=False)

        assert (await table.update(7, {"name": "y"})).success is True
        assert (await table.delete(7)).success is True

        service.update.assert_awaited_once_with(7, {"name": "y"})
        service.delete.assert_awaited_once_with(7)
        assert service.get_list.await_count == 2

    @pytest.mark.asyncio
    async def test_failure_notifies_without_reload(self):
        service = make_service(items=["a"])
        service.delete.return_value = StandardResult.fail("In use", "CONFLICT")
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(service, notifier=notifier)
        await table.start()

        result = await table.delete(1)

        assert result.success is False
        assert result.message == "In use"
        assert table.data == ["a"]
        assert service.get_list.await_count == 1
        assert levels(handler) == [NotificationLevel.ERROR]
        assert handler.await_args.args[0].error_code == "CONFLICT"

    @pytest.mark.asyncio
    async def test_failure_without_message_uses_error_code_text(self):
        service = make_service()
        service.create.return_value = StandardResult(success=False, error_code="HTTP_404")
        table = CollectionOrchestrator(service, immediate=False)
        result = await table.create({})
        assert result.message == "The requested resource does not exist"

    @pytest.mark.asyncio
    async def test_raising_service_is_reported(self):
        service = make_service()
        service.update.side_effect = ValueError("bad args")
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(service, notifier=notifier, immediate=False)

        result = await table.update(1, {})

        assert result.success is False
        assert result.message == "bad args"
        assert levels(handler) == [NotificationLevel.ERROR]

    @pytest.mark.asyncio
    async def test_mutating_counter(self):
        gate = asyncio.Event()

        async def create(data):
            await gate.wait()
            return StandardResult.ok()

        service = make_service()
        service.create = AsyncMock(side_effect=create)
        table = CollectionOrchestrator(service, immediate=False)

        task = asyncio.create_task(table.create({}))
        await asyncio.sleep(0)
        assert table.state.mutating == 1
        gate.set()
        await task
        assert table.state.mutating == 0


class TestBatchDelete:
    @pytest.mark.asyncio
    async def test_success(self):
        service = make_service()
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(service, notifier=notifier, immediate=False)

        result = await table.batch_delete([1, 2, 3])

        assert (result.success, result.success_count, result.failure_count) == (True, 3, 0)
        service.batch_delete.assert_awaited_once_with([1, 2, 3])
        service.get_list.assert_awaited_once()
        assert levels(handler) == [NotificationLevel.SUCCESS]
        assert handler.await_args.args[0].message == "Batch delete completed, 3 item(s) deleted"

    @pytest.mark.asyncio
    async def test_failure_counts_every_id(self):
        service = make_service()
        service.batch_delete.return_value = StandardResult.fail("Denied", "FORBIDDEN")
        table = CollectionOrchestrator(service, immediate=False)

        result = await table.batch_delete([1, 2])

        assert (result.success, result.success_count, result.failure_count) == (False, 0, 2)
        assert [f.message for f in result.failures] == ["Denied", "Denied"]
        service.get_list.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported(self):
        service = make_service(batch=False)
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(service, notifier=notifier, immediate=False)

        result = await table.batch_delete([1, 2, 3])

        assert (result.success, result.success_count, result.failure_count) == (False, 0, 3)
        assert [f.id for f in result.failures] == [1, 2, 3]
        service.get_list.assert_not_awaited()
        assert handler.await_args.args[0].error_code == ErrorCode.BATCH_NOT_SUPPORTED


# ============================================================================
# Teardown guard
# ============================================================================


class TestTeardown:
    @pytest.mark.asyncio
    async def test_load_after_close_does_not_write(self):
        gate = asyncio.Event()

        async def get_list(params):
            await gate.wait()
            return StandardResult.fail("late", "HTTP_500")

        service = make_service()
        service.get_list = AsyncMock(side_effect=get_list)
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(service, notifier=notifier, immediate=False)

        task = asyncio.create_task(table.reload())
        await asyncio.sleep(0)
        before = table.state
        table.close()
        gate.set()
        result = await task

        assert result.success is False
        assert table.state is before
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mutation_after_close_returns_result_only(self):
        gate = asyncio.Event()

        async def create(data):
            await gate.wait()
            return StandardResult.ok({"id": 9})

        service = make_service()
        service.create = AsyncMock(side_effect=create)
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(service, notifier=notifier, immediate=False)

        task = asyncio.create_task(table.create({"name": "x"}))
        await asyncio.sleep(0)
        table.close()
        gate.set()
        result = await task

        assert result.success is True
        assert result.data == {"id": 9}
        handler.assert_not_awaited()
        service.get_list.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unsupported_batch_after_close_is_silent(self):
        notifier, handler = make_notifier()
        table = CollectionOrchestrator(make_service(batch=False), notifier=notifier, immediate=False)
        table.close()
        result = await table.batch_delete([1])
        assert result.failure_count == 1
        handler.assert_not_awaited()
