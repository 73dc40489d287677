"""
ReorderCoordinator - runs a reorder or delete end-to-end.

Each call is independent:

    Idle -> Planning -> Persisting -> Committed | PartiallyFailed

Plans are always computed from a fresh `list_ordered` read. The new ordering
is recomputed locally from the plan; only a partial failure triggers a second
read, whose result is returned as the truth.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from app.sequencing import renumber
from app.sequencing.errors import (
    BackendUnavailableError,
    InvalidPositionError,
    ItemNotFoundError,
    ItemStillPresentError,
    PartialReorderError,
    ReorderError,
)
from app.sequencing.models import (
    BatchResult,
    ReorderResult,
    ReorderState,
    SequencedItem,
    SequenceUpdate,
)

logger = logging.getLogger(__name__)

# Errors a backend call may raise that mean "the backend is not reachable/usable"
BACKEND_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)


class ReorderCoordinator:
    """Applies renumbering plans to a SequenceStore."""

    def __init__(self, store):
        self.store = store

    async def _guard(self, awaitable: Awaitable):
        try:
            return await awaitable
        except ReorderError:
            raise
        except BACKEND_ERRORS as e:
            logger.error(f"Sequencing backend call failed: {e}")
            raise BackendUnavailableError(str(e)) from e

    def _transition(self, parent_scope_id: str, state: ReorderState) -> None:
        logger.debug(f"Scope {parent_scope_id}: {state.value}")

    async def list_ordered(self, parent_scope_id: str) -> List[SequencedItem]:
        """Persisted ordering of a scope."""
        return await self._guard(self.store.list_ordered(parent_scope_id))

    async def next_sequence(self, parent_scope_id: str) -> int:
        """Append position for a new sibling."""
        return await self._guard(self.store.get_max_sequence(parent_scope_id)) + 1

    async def reorder(self, parent_scope_id: str, moved_item_id: str, new_index: int) -> ReorderResult:
        """Move an item to a 0-based position within its scope.

        Raises:
            ItemNotFoundError: the item is no longer in the scope.
            PartialReorderError: some writes failed; carries the persisted order.
            BackendUnavailableError: the backend could not be reached.
        """
        self._transition(parent_scope_id, ReorderState.PLANNING)
        items = await self.list_ordered(parent_scope_id)

        old_index = next((i for i, item in enumerate(items) if item.id == moved_item_id), None)
        if old_index is None:
            raise ItemNotFoundError(moved_item_id, parent_scope_id)

        target_index = renumber.clamp_index(new_index, len(items))
        if target_index != new_index:
            logger.debug(f"Clamped index {new_index} -> {target_index} for scope {parent_scope_id}")

        plan = self._plan_move(items, old_index, target_index)
        return await self._persist(parent_scope_id, items, plan)

    def _plan_move(self, items: Sequence[SequencedItem], old_index: int, new_index: int) -> List[SequenceUpdate]:
        if old_index == new_index:
            if renumber.is_dense(items):
                return []
            return renumber.plan_compaction(items)

        if renumber.is_dense(items):
            try:
                return renumber.plan_move(old_index + 1, new_index + 1, items)
            except InvalidPositionError as e:
                logger.warning(f"Falling back to splice renumbering: {e}")

        # Listing is not 1..N (e.g. interleaved writers): splice and renumber everything that drifted
        return renumber.plan_compaction(renumber.move_index(items, old_index, new_index))

    async def delete(
        self,
        parent_scope_id: str,
        item_id: str,
        remove: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> ReorderResult:
        """Restore density after `item_id` leaves the scope.

        `remove` performs the owning entity's own delete first. An item that a
        concurrent actor already removed (and possibly renumbered around) is
        tolerated: the plan comes from a fresh read.

        Raises:
            ItemStillPresentError: the fresh read still lists `item_id`; nothing
                is written.
        """
        if remove is not None:
            await self._guard(remove())

        self._transition(parent_scope_id, ReorderState.PLANNING)
        fresh = await self.list_ordered(parent_scope_id)
        if any(item.id == item_id for item in fresh):
            logger.warning(f"Item {item_id} still present in scope {parent_scope_id} after delete")
            raise ItemStillPresentError(item_id, parent_scope_id)

        return await self._persist(parent_scope_id, fresh, self._plan_deletion(fresh))

    def _plan_deletion(self, remaining: Sequence[SequencedItem]) -> List[SequenceUpdate]:
        if renumber.is_dense(remaining):
            return []
        present = {item.sequence for item in remaining}
        missing = [seq for seq in range(1, len(remaining) + 2) if seq not in present]
        if len(missing) == 1 and len(present) == len(remaining):
            return renumber.plan_deletion(missing[0], remaining)
        return renumber.plan_compaction(remaining)

    async def compact(self, parent_scope_id: str) -> ReorderResult:
        """Renumber a scope to 1..N in its current order."""
        self._transition(parent_scope_id, ReorderState.PLANNING)
        items = await self.list_ordered(parent_scope_id)
        return await self._persist(parent_scope_id, items, renumber.plan_compaction(items))

    async def _persist(
        self,
        parent_scope_id: str,
        items: Sequence[SequencedItem],
        plan: List[SequenceUpdate],
    ) -> ReorderResult:
        if plan:
            self._transition(parent_scope_id, ReorderState.PERSISTING)
            batch: BatchResult = await self._guard(self.store.batch_set_sequence(plan))
            if not batch.ok:
                self._transition(parent_scope_id, ReorderState.PARTIALLY_FAILED)
                failed_ids = list(batch.failed)
                logger.warning(
                    f"Partial renumber in scope {parent_scope_id}: "
                    f"{len(failed_ids)}/{len(plan)} writes failed"
                )
                truth = await self.list_ordered(parent_scope_id)
                raise PartialReorderError(truth, failed_ids)

        self._transition(parent_scope_id, ReorderState.COMMITTED)
        return ReorderResult(
            parent_scope_id=parent_scope_id,
            items=renumber.apply_plan(items, plan),
            updates=plan,
            state=ReorderState.COMMITTED,
        )
