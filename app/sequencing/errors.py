"""Sequencing error taxonomy.

Everything below `ReorderError` is what callers of `ReorderCoordinator` can
see; raw backend errors never cross that boundary.
"""
from typing import List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from app.sequencing.models import SequencedItem


class SequencingError(Exception):
    """Base class for all sequencing failures."""


class NotFoundError(SequencingError):
    """A single-row sequence update matched no row."""

    def __init__(self, item_id: str):
        super().__init__(f"Sequenced item {item_id} not found")
        self.item_id = item_id


class ReorderError(SequencingError):
    """Base class for errors surfaced by the coordinator."""


class ItemNotFoundError(ReorderError):
    """The item targeted by a reorder is no longer in its scope."""

    def __init__(self, item_id: str, parent_scope_id: Optional[str] = None):
        super().__init__(f"Item {item_id} not found in scope {parent_scope_id}")
        self.item_id = item_id
        self.parent_scope_id = parent_scope_id


class ItemStillPresentError(ReorderError):
    """A delete was requested but the item is still persisted in its scope."""

    def __init__(self, item_id: str, parent_scope_id: Optional[str] = None):
        super().__init__(f"Item {item_id} is still present in scope {parent_scope_id}")
        self.item_id = item_id
        self.parent_scope_id = parent_scope_id


class PartialReorderError(ReorderError):
    """Some planned writes failed; `items` is the persisted truth."""

    def __init__(self, items: Sequence["SequencedItem"], failed_ids: Sequence[str]):
        super().__init__(f"{len(failed_ids)} sequence write(s) failed: {', '.join(failed_ids)}")
        self.items: List["SequencedItem"] = list(items)
        self.failed_ids: List[str] = list(failed_ids)


class BackendUnavailableError(ReorderError):
    """The persistence backend call failed outright."""


class InvalidPositionError(ReorderError):
    """A position could not be mapped onto the scope."""
