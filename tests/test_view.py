"""
Tests for OptimisticListView.

The view is driven by a real ReorderCoordinator over the in-memory store so
reconciliation sees the same outcomes it would in production.
"""

import asyncio
from datetime import datetime, timedelta

import httpx
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock

from app.sequencing.coordinator import ReorderCoordinator
from app.sequencing.errors import BackendUnavailableError
from app.sequencing.models import SequencedItem
from app.sequencing.view import Notice, OptimisticListView
from tests.fakes import sequences


class GatedCoordinator(ReorderCoordinator):
    """Holds every reorder until `gate` is set."""

    def __init__(self, store):
        super().__init__(store)
        self.gate = asyncio.Event()

    async def reorder(self, parent_scope_id, moved_item_id, new_index):
        await self.gate.wait()
        return await super().reorder(parent_scope_id, moved_item_id, new_index)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def notices():
    return []


@pytest.fixture
def coordinator(store):
    return ReorderCoordinator(store)


@pytest_asyncio.fixture
async def view(coordinator, notices):
    """View loaded with T1..T4."""
    view = OptimisticListView(coordinator, "proj_1", notify=notices.append)
    await view.load()
    return view


# =============================================================================
# Unit Tests - optimistic updates
# =============================================================================

class TestOptimisticUpdates:
    """Local-only changes."""

    def test_apply_move_renumbers_locally(self, coordinator, items):
        view = OptimisticListView(coordinator, "proj_1", items)

        assert view.apply_optimistic_move("T4", 1)
        assert view.ids == ["T1", "T4", "T2", "T3"]
        assert sequences(view.items) == {"T1": 1, "T4": 2, "T2": 3, "T3": 4}

    def test_apply_move_unknown_item(self, coordinator, items):
        view = OptimisticListView(coordinator, "proj_1", items)

        assert not view.apply_optimistic_move("T9", 0)
        assert view.ids == ["T1", "T2", "T3", "T4"]

    def test_apply_removal_closes_gap(self, coordinator, items):
        view = OptimisticListView(coordinator, "proj_1", items)

        assert view.apply_optimistic_removal("T2")
        assert sequences(view.items) == {"T1": 1, "T3": 2, "T4": 3}


# =============================================================================
# Integration Tests - gestures
# =============================================================================

class TestMove:
    """Full move gestures through the coordinator."""

    @pytest.mark.asyncio
    async def test_optimistic_order_visible_while_in_flight(self, store, notices):
        coordinator = GatedCoordinator(store)
        view = OptimisticListView(coordinator, "proj_1", notify=notices.append)
        await view.load()

        task = asyncio.create_task(view.move("T4", 1))
        await asyncio.sleep(0)

        assert view.reordering
        assert view.ids == ["T1", "T4", "T2", "T3"]
        assert sequences(await store.list_ordered("proj_1")) == {"T1": 1, "T2": 2, "T3": 3, "T4": 4}

        coordinator.gate.set()
        assert await task
        assert not view.reordering
        assert view.ids == ["T1", "T4", "T2", "T3"]
        assert notices == []

    @pytest.mark.asyncio
    async def test_gesture_rejected_while_in_flight(self, store):
        coordinator = GatedCoordinator(store)
        view = OptimisticListView(coordinator, "proj_1", notify=lambda notice: None)
        await view.load()

        task = asyncio.create_task(view.move("T4", 0))
        await asyncio.sleep(0)

        assert not await view.move("T1", 3)
        assert view.ids == ["T4", "T1", "T2", "T3"]

        coordinator.gate.set()
        assert await task
        assert await view.move("T1", 3)
        assert view.ids == ["T4", "T2", "T3", "T1"]

    @pytest.mark.asyncio
    async def test_success_matches_persisted_order(self, view, store):
        assert await view.move("T1", 2)

        assert view.items == await store.list_ordered("proj_1")

    @pytest.mark.asyncio
    async def test_partial_failure_shows_truth_and_info_notice(self, view, store, notices):
        store.fail_ids.add("T3")

        await view.move("T4", 1)

        assert view.items == await store.list_ordered("proj_1")
        assert len(notices) == 1
        assert notices[0].level == "info"
        assert not view.reordering

    @pytest.mark.asyncio
    async def test_removed_elsewhere_refetches(self, view, store, notices):
        store.remove("T4")

        await view.move("T4", 0)

        assert view.ids == ["T1", "T2", "T3"]
        assert notices[0].level == "info"

    @pytest.mark.asyncio
    async def test_backend_error_refetches_truth(self, view, coordinator, notices):
        coordinator.reorder = AsyncMock(side_effect=BackendUnavailableError("timeout"))

        await view.move("T4", 0)

        assert view.ids == ["T1", "T2", "T3", "T4"]
        assert notices == [Notice("error", "Could not save order", "timeout", retryable=True)]

    @pytest.mark.asyncio
    async def test_backend_down_restores_last_known_good(self, view, store, notices):
        store.unavailable = True

        await view.move("T4", 0)

        assert view.ids == ["T1", "T2", "T3", "T4"]
        assert notices[-1].level == "error"
        assert notices[-1].retryable
        assert not view.reordering


class TestRemove:
    """Delete gestures."""

    @pytest.mark.asyncio
    async def test_remove_runs_callback_and_renumbers(self, view, store):
        async def remove():
            store.remove("T2")

        assert await view.remove("T2", remove)

        assert sequences(view.items) == {"T1": 1, "T3": 2, "T4": 3}
        assert view.items == await store.list_ordered("proj_1")

    @pytest.mark.asyncio
    async def test_remove_that_deleted_nothing_restores_item(self, view, store, notices):
        """The entity delete succeeded without removing the row."""
        assert await view.remove("T2", AsyncMock())

        assert view.ids == ["T1", "T2", "T3", "T4"]
        assert sequences(await store.list_ordered("proj_1")) == {"T1": 1, "T2": 2, "T3": 3, "T4": 4}
        assert notices[-1].level == "error"

    @pytest.mark.asyncio
    async def test_unexpected_callback_error_is_reconciled(self, view, store, notices):
        request = httpx.Request("DELETE", "http://test/api/data/glossaries/T2")
        response = httpx.Response(503, request=request)
        remove = AsyncMock(side_effect=httpx.HTTPStatusError("503 Service Unavailable", request=request, response=response))

        assert await view.remove("T2", remove)

        assert view.ids == ["T1", "T2", "T3", "T4"]
        assert notices[-1].level == "error"
        assert notices[-1].retryable
        assert not view.reordering

    @pytest.mark.asyncio
    async def test_unexpected_error_with_backend_down_restores_snapshot(self, view, store, notices):
        async def remove():
            store.unavailable = True
            raise RuntimeError("socket closed")

        await view.remove("T2", remove)

        assert view.ids == ["T1", "T2", "T3", "T4"]
        assert notices[-1] == Notice("error", "Could not save order", "socket closed", retryable=True)


# =============================================================================
# Unit Tests - presentation
# =============================================================================

class TestSortedBy:
    """Alternate presentation orders."""

    @pytest.fixture
    def dated_view(self, coordinator):
        now = datetime(2026, 10, 1, 12, 0)
        return OptimisticListView(coordinator, "proj_1", [
            SequencedItem("A", "proj_1", 1, updated_at=now - timedelta(days=2), name="zeta"),
            SequencedItem("B", "proj_1", 2, updated_at=None, name="Alpha"),
            SequencedItem("C", "proj_1", 3, updated_at=now, name="mu"),
        ])

    def test_sequence(self, dated_view):
        assert [item.id for item in dated_view.sorted_by()] == ["A", "B", "C"]

    def test_name_is_case_insensitive(self, dated_view):
        assert [item.id for item in dated_view.sorted_by("name")] == ["B", "C", "A"]

    def test_updated_at_newest_first(self, dated_view):
        assert [item.id for item in dated_view.sorted_by("updated_at")] == ["C", "A", "B"]

    def test_updated_at_oldest_first(self, dated_view):
        assert [item.id for item in dated_view.sorted_by("updated_at_old")] == ["A", "C", "B"]

    def test_sorting_never_changes_sequences(self, dated_view):
        dated_view.sorted_by("name")
        assert sequences(dated_view.items) == {"A": 1, "B": 2, "C": 3}

    def test_unknown_key(self, dated_view):
        with pytest.raises(ValueError):
            dated_view.sorted_by("colour")
