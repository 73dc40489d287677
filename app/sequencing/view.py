"""
OptimisticListView - an ordered list that updates before the backend answers.

A view owns its list exclusively. Gestures are applied locally first, then
reconciled with whatever the coordinator (in-process or remote) reports. While
one request is in flight, further gestures on the same view are rejected.
"""
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from app.sequencing import renumber
from app.sequencing.errors import (
    BackendUnavailableError,
    ItemNotFoundError,
    PartialReorderError,
    ReorderError,
)
from app.sequencing.models import ReorderResult, SequencedItem

logger = logging.getLogger(__name__)

Outcome = Union[ReorderResult, ReorderError]

SORT_KEYS = ("sequence", "name", "updated_at", "updated_at_old")


@dataclass(frozen=True)
class Notice:
    """A non-blocking message for the user."""
    level: str  # "info" | "error"
    title: str
    message: str
    retryable: bool = False


def _log_notice(notice: Notice) -> None:
    log = logger.error if notice.level == "error" else logger.info
    log(f"{notice.title}: {notice.message}")


class OptimisticListView:
    """Client-side ordered collection for one scope."""

    def __init__(
        self,
        coordinator,
        parent_scope_id: str,
        items: Optional[Sequence[SequencedItem]] = None,
        notify: Optional[Callable[[Notice], None]] = None,
    ):
        self.coordinator = coordinator
        self.parent_scope_id = parent_scope_id
        self._items: List[SequencedItem] = list(items or [])
        self._last_known_good: List[SequencedItem] = list(self._items)
        self.notify = notify or _log_notice
        self.reordering = False

    @property
    def items(self) -> List[SequencedItem]:
        return list(self._items)

    @property
    def ids(self) -> List[str]:
        return [item.id for item in self._items]

    async def load(self) -> List[SequencedItem]:
        """Replace local state with the persisted ordering."""
        self._set_truth(await self.coordinator.list_ordered(self.parent_scope_id))
        return self.items

    def _set_truth(self, items: Sequence[SequencedItem]) -> None:
        self._items = list(items)
        self._last_known_good = list(items)

    # -------------------------------------------------------------------------
    # Optimistic updates
    # -------------------------------------------------------------------------

    def apply_optimistic_move(self, moved_item_id: str, new_index: int) -> bool:
        """Splice the item to `new_index` locally. False if it is not shown."""
        old_index = next((i for i, item in enumerate(self._items) if item.id == moved_item_id), None)
        if old_index is None:
            return False
        new_index = renumber.clamp_index(new_index, len(self._items))
        moved = renumber.move_index(self._items, old_index, new_index)
        self._items = [item.with_sequence(position) for position, item in enumerate(moved, start=1)]
        return True

    def apply_optimistic_removal(self, item_id: str) -> bool:
        """Drop the item locally and close the gap. False if it is not shown."""
        remaining = [item for item in self._items if item.id != item_id]
        if len(remaining) == len(self._items):
            return False
        self._items = [item.with_sequence(position) for position, item in enumerate(remaining, start=1)]
        return True

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    async def reconcile(self, outcome: Outcome) -> None:
        """Replace the optimistic guess with the best available truth."""
        if isinstance(outcome, ReorderResult):
            self._set_truth(outcome.items)
            return

        if isinstance(outcome, PartialReorderError):
            self._set_truth(outcome.items)
            self.notify(Notice("info", "Order corrected", "Some changes could not be saved; showing the saved order."))
            return

        if isinstance(outcome, ItemNotFoundError):
            if await self._refetch():
                self.notify(Notice("info", "Order corrected", "That item was removed elsewhere; the list was refreshed."))
                return
        elif await self._refetch():
            self.notify(Notice("error", "Could not save order", str(outcome), retryable=True))
            return

        # Truth is unreachable: fall back to the order shown before the gesture
        self._items = list(self._last_known_good)
        self.notify(Notice("error", "Could not save order", str(outcome), retryable=True))

    async def _refetch(self) -> bool:
        try:
            self._set_truth(await self.coordinator.list_ordered(self.parent_scope_id))
        except ReorderError as e:
            logger.warning(f"Could not refetch scope {self.parent_scope_id}: {e}")
            return False
        return True

    # -------------------------------------------------------------------------
    # Gestures
    # -------------------------------------------------------------------------

    async def move(self, moved_item_id: str, new_index: int) -> bool:
        """Handle a drop. Returns False if the gesture was rejected."""
        return await self._run(
            lambda: self.apply_optimistic_move(moved_item_id, new_index),
            lambda: self.coordinator.reorder(self.parent_scope_id, moved_item_id, new_index),
        )

    async def remove(self, item_id: str, remove: Callable[[], Awaitable[None]]) -> bool:
        """Handle a delete. `remove` deletes the entity itself."""
        return await self._run(
            lambda: self.apply_optimistic_removal(item_id),
            lambda: self.coordinator.delete(self.parent_scope_id, item_id, remove),
        )

    async def _run(self, optimistic: Callable[[], bool], request: Callable[[], Awaitable[ReorderResult]]) -> bool:
        if self.reordering:
            logger.debug(f"Gesture rejected, scope {self.parent_scope_id} is busy")
            return False

        self.reordering = True
        try:
            optimistic()
            try:
                outcome: Outcome = await request()
            except ReorderError as e:
                outcome = e
            except Exception as e:
                logger.error(f"Unexpected failure in scope {self.parent_scope_id}: {e!r}")
                outcome = BackendUnavailableError(str(e) or type(e).__name__)
            await self.reconcile(outcome)
        finally:
            self.reordering = False
        return True

    # -------------------------------------------------------------------------
    # Presentation
    # -------------------------------------------------------------------------

    def sorted_by(self, sort_by: str = "sequence") -> List[SequencedItem]:
        """Alternate presentation orders. Never changes sequences."""
        if sort_by not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_by}")
        items = list(self._items)
        if sort_by == "name":
            return sorted(items, key=lambda item: (item.name or "").lower())
        if sort_by in ("updated_at", "updated_at_old"):
            dated = [item for item in items if item.updated_at is not None]
            undated = [item for item in items if item.updated_at is None]
            dated.sort(key=lambda item: item.updated_at, reverse=sort_by == "updated_at")
            return dated + undated
        return sorted(items, key=lambda item: item.sequence)
