"""Data types for the sequencing subsystem."""
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, NamedTuple, Optional


@dataclass(frozen=True)
class SequencedItem:
    """One sibling within a scope, as seen by the sequencing subsystem."""
    id: str
    parent_scope_id: str
    sequence: int
    updated_at: Optional[datetime] = None
    name: Optional[str] = None  # presentation only

    def with_sequence(self, sequence: int) -> "SequencedItem":
        return replace(self, sequence=sequence)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "parent_scope_id": self.parent_scope_id,
            "sequence": self.sequence,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "name": self.name,
        }


class SequenceUpdate(NamedTuple):
    """A planned write: set `item_id`'s sequence to `sequence`."""
    item_id: str
    sequence: int


@dataclass
class BatchResult:
    """Outcome of a best-effort batch of sequence writes."""
    applied: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)  # item_id -> reason

    @property
    def ok(self) -> bool:
        return not self.failed


class ReorderState(str, Enum):
    """Lifecycle of a single reorder/delete operation."""
    IDLE = "idle"
    PLANNING = "planning"
    PERSISTING = "persisting"
    COMMITTED = "committed"
    PARTIALLY_FAILED = "partially_failed"


@dataclass
class ReorderResult:
    """Committed ordering returned by the coordinator."""
    parent_scope_id: str
    items: List[SequencedItem]
    updates: List[SequenceUpdate] = field(default_factory=list)
    state: ReorderState = ReorderState.COMMITTED

    @property
    def writes(self) -> int:
        return len(self.updates)

    def to_dict(self) -> Dict:
        return {
            "parent_scope_id": self.parent_scope_id,
            "state": self.state.value,
            "items": [item.to_dict() for item in self.items],
            "writes": self.writes,
        }
