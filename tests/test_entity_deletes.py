"""
Tests for entity deletes that renumber their scope.

The ORM session is mocked; committing it removes the deleted rows from the
in-memory store so the coordinator sees the delete the way it would in
Postgres. A renumber that ran before the commit would find the row still
present and fail.
"""

from datetime import datetime
from types import SimpleNamespace

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.database import get_db
from app.main import app
from app.sequencing.coordinator import ReorderCoordinator
from app.sequencing.errors import BackendUnavailableError
from tests.fakes import InMemorySequenceStore, make_items, sequences


# =============================================================================
# Helpers
# =============================================================================

def _commit_removes(store, *item_ids):
    """Commit side effect: the rows are gone once the transaction lands."""
    def commit():
        for item_id in item_ids:
            store.remove(item_id)
    return commit


def _coordinators(store, kinds):
    """get_coordinator stand-in that records which scope kind was asked for."""
    def get_coordinator(db, kind):
        kinds.append(kind)
        return ReorderCoordinator(store)
    return get_coordinator


def _client():
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def session(api_app):
    """Mock session served by get_db for the duration of a test."""
    db = MagicMock()
    db.execute = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()

    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    return db


@pytest.fixture
def kinds():
    return []


@pytest.fixture
def binding_store():
    """feat_1 holds fp_1..fp_3, feat_2 holds fx_1..fx_2."""
    return InMemorySequenceStore(make_items("feat_1", 3, "fp_") + make_items("feat_2", 2, "fx_"))


# =============================================================================
# Integration Tests - glossary
# =============================================================================

class TestDeleteGlossary:
    """DELETE /api/data/glossaries/{glossary_id}"""

    @pytest.mark.asyncio
    async def test_delete_renumbers_project_terms(self, session, store, kinds):
        session.commit.side_effect = _commit_removes(store, "T2")

        with patch.multiple(
            "app.data.glossary.routes",
            _get_glossary=AsyncMock(return_value=MagicMock(project_id="proj_1")),
            require_project_member=AsyncMock(),
            get_coordinator=_coordinators(store, kinds),
        ):
            async with _client() as client:
                response = await client.delete("/api/data/glossaries/T2")

        assert response.status_code == 200
        body = response.json()
        assert [item["id"] for item in body["items"]] == ["T1", "T3", "T4"]
        assert sequences(await store.list_ordered("proj_1")) == {"T1": 1, "T3": 2, "T4": 3}
        assert kinds == ["glossaries"]
        # links, policy terms, the term itself
        assert session.execute.await_count == 3
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_partial_renumber_is_409(self, session, store, kinds):
        session.commit.side_effect = _commit_removes(store, "T2")
        store.fail_ids.add("T4")

        with patch.multiple(
            "app.data.glossary.routes",
            _get_glossary=AsyncMock(return_value=MagicMock(project_id="proj_1")),
            require_project_member=AsyncMock(),
            get_coordinator=_coordinators(store, kinds),
        ):
            async with _client() as client:
                response = await client.delete("/api/data/glossaries/T2")

        assert response.status_code == 409
        assert response.json()["failed_ids"] == ["T4"]


# =============================================================================
# Integration Tests - actor / usecase / feature trees
# =============================================================================

class TestDeleteActor:
    """DELETE /api/data/actors/{actor_id}"""

    @pytest.mark.asyncio
    async def test_cascade_then_renumber_project_actors(self, session, kinds):
        store = InMemorySequenceStore(make_items("proj_1", 3, "act_"))
        session.commit.side_effect = _commit_removes(store, "act_1")
        cascade = AsyncMock()

        with patch.multiple(
            "app.data.actors.routes",
            _get_actor=AsyncMock(return_value=MagicMock(project_id="proj_1")),
            require_project_member=AsyncMock(),
            get_coordinator=_coordinators(store, kinds),
            cascade_delete_actor=cascade,
        ):
            async with _client() as client:
                response = await client.delete("/api/data/actors/act_1")

        assert response.status_code == 200
        assert [item["id"] for item in response.json()["items"]] == ["act_2", "act_3"]
        cascade.assert_awaited_once_with(session, "act_1")
        assert kinds == ["actors"]
        assert sequences(await store.list_ordered("proj_1")) == {"act_2": 1, "act_3": 2}


class TestDeleteUsecase:
    """DELETE /api/data/usecases/{usecase_id}"""

    @pytest.mark.asyncio
    async def test_cascade_then_renumber_actor_usecases(self, session, kinds):
        store = InMemorySequenceStore(make_items("act_1", 4, "uc_"))
        session.commit.side_effect = _commit_removes(store, "uc_2")
        cascade = AsyncMock()

        with patch.multiple(
            "app.data.usecases.routes",
            _get_usecase=AsyncMock(return_value=(MagicMock(actor_id="act_1"), "proj_1")),
            require_project_member=AsyncMock(),
            get_coordinator=_coordinators(store, kinds),
            delete_usecases=cascade,
        ):
            async with _client() as client:
                response = await client.delete("/api/data/usecases/uc_2")

        assert response.status_code == 200
        assert response.json()["parent_scope_id"] == "act_1"
        cascade.assert_awaited_once_with(session, ["uc_2"])
        assert kinds == ["usecases"]
        assert sequences(await store.list_ordered("act_1")) == {"uc_1": 1, "uc_3": 2, "uc_4": 3}


class TestDeleteFeature:
    """DELETE /api/data/features/{feature_id}"""

    @pytest.mark.asyncio
    async def test_cascade_then_renumber_usecase_features(self, session, kinds):
        store = InMemorySequenceStore(make_items("uc_1", 3, "feat_"))
        session.commit.side_effect = _commit_removes(store, "feat_2")
        cascade = AsyncMock()

        with patch.multiple(
            "app.data.features.routes",
            get_feature_with_project=AsyncMock(return_value=(MagicMock(usecase_id="uc_1"), "proj_1")),
            require_project_member=AsyncMock(),
            get_coordinator=_coordinators(store, kinds),
            delete_features=cascade,
        ):
            async with _client() as client:
                response = await client.delete("/api/data/features/feat_2")

        assert response.status_code == 200
        cascade.assert_awaited_once_with(session, ["feat_2"])
        assert kinds == ["features"]
        assert sequences(await store.list_ordered("uc_1")) == {"feat_1": 1, "feat_3": 2}

    @pytest.mark.asyncio
    async def test_delete_that_left_row_in_place_writes_nothing(self, session, kinds):
        """A cascade that did not remove the row must not renumber around it."""
        store = InMemorySequenceStore(make_items("uc_1", 3, "feat_"))

        with patch.multiple(
            "app.data.features.routes",
            get_feature_with_project=AsyncMock(return_value=(MagicMock(usecase_id="uc_1"), "proj_1")),
            require_project_member=AsyncMock(),
            get_coordinator=_coordinators(store, kinds),
            delete_features=AsyncMock(),
        ):
            async with _client() as client:
                response = await client.delete("/api/data/features/feat_2")

        assert response.status_code == 400
        assert store.writes == []
        assert sequences(await store.list_ordered("uc_1")) == {"feat_1": 1, "feat_2": 2, "feat_3": 3}


# =============================================================================
# Integration Tests - policies
# =============================================================================

def _policy(*bindings):
    return MagicMock(
        project_id="proj_1",
        links=[],
        feature_bindings=[SimpleNamespace(feature_id=feature_id, id=binding_id) for feature_id, binding_id in bindings],
    )


class TestDeletePolicy:
    """DELETE /api/data/policies/{policy_id}"""

    @pytest.mark.asyncio
    async def test_rows_deleted_before_each_feature_is_renumbered(self, session, binding_store, kinds):
        session.commit.side_effect = _commit_removes(binding_store, "fp_2", "fx_1")

        with patch.multiple(
            "app.data.policies.routes",
            _get_policy=AsyncMock(return_value=_policy(("feat_1", "fp_2"), ("feat_2", "fx_1"))),
            require_project_member=AsyncMock(),
            get_coordinator=_coordinators(binding_store, kinds),
        ):
            async with _client() as client:
                response = await client.delete("/api/data/policies/pol_1")

        assert response.status_code == 200
        body = response.json()
        assert body["failed_feature_ids"] == []
        assert {entry["parent_scope_id"]: [item["id"] for item in entry["items"]] for entry in body["renumbered"]} == {
            "feat_1": ["fp_1", "fp_3"],
            "feat_2": ["fx_2"],
        }
        # links, terms, bindings, the policy itself; one commit
        assert session.execute.await_count == 4
        session.commit.assert_awaited_once()
        assert sequences(await binding_store.list_ordered("feat_1")) == {"fp_1": 1, "fp_3": 2}
        assert sequences(await binding_store.list_ordered("feat_2")) == {"fx_2": 1}

    @pytest.mark.asyncio
    async def test_backend_failure_in_one_feature_still_deletes_policy(self, session, binding_store):
        session.commit.side_effect = _commit_removes(binding_store, "fp_2", "fx_1")
        coordinator = ReorderCoordinator(binding_store)
        real_delete = coordinator.delete

        async def flaky_delete(parent_scope_id, item_id, remove=None):
            if parent_scope_id == "feat_1":
                raise BackendUnavailableError("timeout")
            return await real_delete(parent_scope_id, item_id, remove)

        coordinator.delete = flaky_delete

        with patch.multiple(
            "app.data.policies.routes",
            _get_policy=AsyncMock(return_value=_policy(("feat_1", "fp_2"), ("feat_2", "fx_1"))),
            require_project_member=AsyncMock(),
            get_coordinator=lambda db, kind: coordinator,
        ):
            async with _client() as client:
                response = await client.delete("/api/data/policies/pol_1")

        assert response.status_code == 200
        body = response.json()
        assert body["failed_feature_ids"] == ["feat_1"]
        assert [entry["parent_scope_id"] for entry in body["renumbered"]] == ["feat_2"]
        assert session.execute.await_count == 4
        session.commit.assert_awaited_once()
        assert sequences(await binding_store.list_ordered("feat_2")) == {"fx_2": 1}


class TestRebindPolicy:
    """PUT /api/data/policies/{policy_id} with feature_ids."""

    @pytest.mark.asyncio
    async def test_dropped_feature_renumbered_kept_feature_untouched(self, session, binding_store, kinds):
        session.commit.side_effect = _commit_removes(binding_store, "fp_2")
        updated = {
            "id": "pol_1",
            "project_id": "proj_1",
            "contents": "Retain audit logs for a year",
            "author_id": "user-123",
            "feature_bindings": [{"feature_id": "feat_2", "sequence": 1}],
            "created_at": datetime(2026, 10, 1).isoformat(),
        }

        with patch.multiple(
            "app.data.policies.routes",
            _get_policy=AsyncMock(side_effect=[_policy(("feat_1", "fp_2"), ("feat_2", "fx_1")), updated]),
            _validate_features=AsyncMock(),
            require_project_member=AsyncMock(),
            get_coordinator=_coordinators(binding_store, kinds),
        ):
            async with _client() as client:
                response = await client.put("/api/data/policies/pol_1", json={"feature_ids": ["feat_2"]})

        assert response.status_code == 200
        assert sequences(await binding_store.list_ordered("feat_1")) == {"fp_1": 1, "fp_3": 2}
        # still first in feat_2
        assert sequences(await binding_store.list_ordered("feat_2")) == {"fx_1": 1, "fx_2": 2}
        assert set(kinds) == {"feature_policies"}
        assert binding_store.batch_calls == 1
