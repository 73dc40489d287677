"""
Sequencing - dense per-scope ordering of sibling records.

Glossary terms (per project), actors (per project), usecases (per actor),
features (per usecase) and feature-policy bindings (per feature) each carry an
integer `sequence` that must stay exactly 1..N within their scope.

    SequenceStore -> renumber -> ReorderCoordinator -> OptimisticListView
"""
from app.sequencing.models import (
    SequencedItem,
    SequenceUpdate,
    BatchResult,
    ReorderResult,
    ReorderState,
)
from app.sequencing.errors import (
    SequencingError,
    NotFoundError,
    ReorderError,
    ItemNotFoundError,
    ItemStillPresentError,
    PartialReorderError,
    BackendUnavailableError,
    InvalidPositionError,
)
from app.sequencing.coordinator import ReorderCoordinator
from app.sequencing.view import OptimisticListView, Notice

__all__ = [
    "SequencedItem",
    "SequenceUpdate",
    "BatchResult",
    "ReorderResult",
    "ReorderState",
    "SequencingError",
    "NotFoundError",
    "ReorderError",
    "ItemNotFoundError",
    "ItemStillPresentError",
    "PartialReorderError",
    "BackendUnavailableError",
    "InvalidPositionError",
    "ReorderCoordinator",
    "OptimisticListView",
    "Notice",
]
