"""
Tests for SequencingClient.

Error mapping is checked against canned responses; the round trip runs an
OptimisticListView through the client into the app.
"""

import httpx
import pytest
from unittest.mock import AsyncMock

from app.main import app
from app.sequencing.client import SequencingClient
from app.sequencing.errors import (
    BackendUnavailableError,
    ItemNotFoundError,
    PartialReorderError,
    ReorderError,
)
from app.sequencing.models import ReorderState
from app.sequencing.view import OptimisticListView
from tests.fakes import sequences

BASE_URL = "http://test/api"


def _canned(status_code, json=None):
    """Client whose every request gets the same response."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=json)

    client = SequencingClient(BASE_URL, "glossaries", "token-abc", transport=httpx.MockTransport(handler))
    return client, requests


# =============================================================================
# Unit Tests - status mapping
# =============================================================================

class TestErrorMapping:
    """HTTP responses map back onto sequencing errors."""

    @pytest.mark.asyncio
    async def test_success_builds_result(self):
        client, requests = _canned(200, {
            "parent_scope_id": "proj_1",
            "state": "committed",
            "writes": 1,
            "items": [
                {"id": "T2", "parent_scope_id": "proj_1", "sequence": 1},
                {"id": "T1", "parent_scope_id": "proj_1", "sequence": 2},
            ],
        })
        async with client:
            result = await client.reorder("proj_1", "T2", 0)

        assert result.state == ReorderState.COMMITTED
        assert [item.id for item in result.items] == ["T2", "T1"]
        assert requests[0].url.path == "/api/sequencing/glossaries/proj_1/reorder"
        assert requests[0].headers["Authorization"] == "Bearer token-abc"

    @pytest.mark.asyncio
    async def test_409_is_partial_failure(self):
        client, _ = _canned(409, {
            "detail": "1 sequence write(s) failed: T3",
            "failed_ids": ["T3"],
            "items": [{"id": "T1", "parent_scope_id": "proj_1", "sequence": 1}],
        })
        async with client:
            with pytest.raises(PartialReorderError) as exc_info:
                await client.reorder("proj_1", "T4", 1)

        assert exc_info.value.failed_ids == ["T3"]
        assert [item.id for item in exc_info.value.items] == ["T1"]

    @pytest.mark.asyncio
    async def test_404_on_reorder_is_item_not_found(self):
        client, _ = _canned(404, {"detail": "gone"})
        async with client:
            with pytest.raises(ItemNotFoundError) as exc_info:
                await client.reorder("proj_1", "T4", 1)

        assert exc_info.value.item_id == "T4"

    @pytest.mark.asyncio
    async def test_5xx_is_backend_unavailable(self):
        client, _ = _canned(503, {"detail": "Storage backend unavailable"})
        async with client:
            with pytest.raises(BackendUnavailableError):
                await client.list_ordered("proj_1")

    @pytest.mark.asyncio
    async def test_other_status_is_reorder_error(self):
        client, _ = _canned(403, {"detail": "Not a member of this project"})
        async with client:
            with pytest.raises(ReorderError) as exc_info:
                await client.compact("proj_1")

        assert not isinstance(exc_info.value, BackendUnavailableError)

    @pytest.mark.asyncio
    async def test_transport_error_is_backend_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with SequencingClient(BASE_URL, "glossaries", "t", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(BackendUnavailableError):
                await client.list_ordered("proj_1")


# =============================================================================
# Integration Tests - view over HTTP
# =============================================================================

class TestViewOverHttp:
    """OptimisticListView -> SequencingClient -> app -> store."""

    @pytest.fixture
    def remote(self, api_app):
        return SequencingClient(BASE_URL, "glossaries", "token-abc", transport=httpx.ASGITransport(app=app))

    @pytest.mark.asyncio
    async def test_move_round_trip(self, remote, store):
        async with remote:
            view = OptimisticListView(remote, "proj_1")
            await view.load()
            await view.move("T4", 1)

        assert view.ids == ["T1", "T4", "T2", "T3"]
        assert sequences(view.items) == sequences(await store.list_ordered("proj_1"))

    @pytest.mark.asyncio
    async def test_partial_failure_round_trip(self, remote, store):
        store.fail_ids.add("T3")
        notices = []

        async with remote:
            view = OptimisticListView(remote, "proj_1", notify=notices.append)
            await view.load()
            await view.move("T4", 1)

        assert view.ids == [item.id for item in await store.list_ordered("proj_1")]
        assert notices[0].level == "info"

    @pytest.mark.asyncio
    async def test_delete_reads_back_renumbered_scope(self, remote, store):
        async def remove():
            store.remove("T1")
            await store.batch_set_sequence(
                [(item.id, item.sequence - 1) for item in await store.list_ordered("proj_1")]
            )

        async with remote:
            result = await remote.delete("proj_1", "T1", remove)

        assert sequences(result.items) == {"T2": 1, "T3": 2, "T4": 3}


def _entity_delete_failure(status_code, json=None):
    """`remove` callback failing the way `raise_for_status()` does."""
    request = httpx.Request("DELETE", f"{BASE_URL}/data/glossaries/T2")
    response = httpx.Response(status_code, json=json, request=request)
    return AsyncMock(side_effect=httpx.HTTPStatusError(f"{status_code}", request=request, response=response))


class TestEntityDeleteFailures:
    """Status errors from the entity delete map onto sequencing errors."""

    @pytest.mark.asyncio
    async def test_409_from_entity_delete_is_partial_failure(self):
        client, requests = _canned(200, [])
        remove = _entity_delete_failure(409, {
            "detail": "1 sequence write(s) failed: T4",
            "failed_ids": ["T4"],
            "items": [
                {"id": "T1", "parent_scope_id": "proj_1", "sequence": 1},
                {"id": "T3", "parent_scope_id": "proj_1", "sequence": 2},
                {"id": "T4", "parent_scope_id": "proj_1", "sequence": 4},
            ],
        })
        async with client:
            with pytest.raises(PartialReorderError) as exc_info:
                await client.delete("proj_1", "T2", remove)

        assert exc_info.value.failed_ids == ["T4"]
        assert requests == []

    @pytest.mark.asyncio
    async def test_503_from_entity_delete_is_backend_unavailable(self):
        client, _ = _canned(200, [])
        async with client:
            with pytest.raises(BackendUnavailableError):
                await client.delete("proj_1", "T2", _entity_delete_failure(503))

    @pytest.mark.asyncio
    async def test_404_from_entity_delete_is_item_not_found(self):
        client, _ = _canned(200, [])
        async with client:
            with pytest.raises(ItemNotFoundError):
                await client.delete("proj_1", "T2", _entity_delete_failure(404, {"detail": "Glossary term not found"}))

    @pytest.mark.asyncio
    async def test_view_restores_item_after_failed_entity_delete(self, api_app, store):
        notices = []
        remote = SequencingClient(BASE_URL, "glossaries", "token-abc", transport=httpx.ASGITransport(app=app))

        async with remote:
            view = OptimisticListView(remote, "proj_1", notify=notices.append)
            await view.load()
            await view.remove("T2", _entity_delete_failure(503))

        assert view.ids == ["T1", "T2", "T3", "T4"]
        assert notices[-1].level == "error"
        assert notices[-1].retryable
