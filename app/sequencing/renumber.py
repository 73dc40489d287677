"""
Renumbering plans.

Pure functions: given the current siblings of a scope (ascending by sequence)
and a structural change, compute the minimal list of (item_id, new_sequence)
writes that restores a dense 1..N ordering. No I/O happens here.
"""
from typing import Iterable, List, Sequence, TypeVar

from app.sequencing.errors import InvalidPositionError
from app.sequencing.models import SequencedItem, SequenceUpdate

T = TypeVar("T")


def is_dense(siblings: Iterable[SequencedItem]) -> bool:
    """True when the sequences are exactly {1..N} with no duplicates."""
    sequences = sorted(item.sequence for item in siblings)
    return sequences == list(range(1, len(sequences) + 1))


def plan_insertion(siblings: Sequence[SequencedItem]) -> int:
    """Sequence for a new sibling: always appended at the end."""
    return len(siblings) + 1


def plan_deletion(removed_sequence: int, siblings: Iterable[SequencedItem]) -> List[SequenceUpdate]:
    """Close the gap left by the sibling that held `removed_sequence`.

    Every sibling after the gap moves down by one. Siblings before it are left
    out of the plan entirely.
    """
    return [
        SequenceUpdate(item.id, item.sequence - 1)
        for item in siblings
        if item.sequence > removed_sequence
    ]


def plan_move(from_sequence: int, to_sequence: int, siblings: Sequence[SequencedItem]) -> List[SequenceUpdate]:
    """Move the sibling at `from_sequence` to `to_sequence`.

    Equivalent to removing it and reinserting it at the destination; only the
    siblings between the two positions are renumbered.

    Raises:
        InvalidPositionError: if either position is outside 1..N or
            `from_sequence` does not identify exactly one sibling.
    """
    count = len(siblings)
    if not (1 <= from_sequence <= count and 1 <= to_sequence <= count):
        raise InvalidPositionError(
            f"Cannot move {from_sequence} -> {to_sequence} in a scope of {count}"
        )
    if from_sequence == to_sequence:
        return []

    moved = [item for item in siblings if item.sequence == from_sequence]
    if len(moved) != 1:
        raise InvalidPositionError(f"{len(moved)} siblings hold sequence {from_sequence}")
    moved_item = moved[0]

    plan: List[SequenceUpdate] = []
    for item in siblings:
        if item.id == moved_item.id:
            continue
        if from_sequence < to_sequence and from_sequence < item.sequence <= to_sequence:
            plan.append(SequenceUpdate(item.id, item.sequence - 1))
        elif to_sequence < from_sequence and to_sequence <= item.sequence < from_sequence:
            plan.append(SequenceUpdate(item.id, item.sequence + 1))
    plan.append(SequenceUpdate(moved_item.id, to_sequence))
    return plan


def plan_compaction(siblings: Iterable[SequencedItem]) -> List[SequenceUpdate]:
    """Renumber an arbitrary listing to 1..N in the order given.

    Only rows whose sequence actually changes are emitted. On a dense scope
    with one sibling removed this yields the same plan as `plan_deletion`.
    """
    return [
        SequenceUpdate(item.id, position)
        for position, item in enumerate(siblings, start=1)
        if item.sequence != position
    ]


def apply_plan(siblings: Iterable[SequencedItem], plan: Iterable[SequenceUpdate]) -> List[SequencedItem]:
    """Ordering that results from applying `plan` to `siblings`."""
    new_sequences = {update.item_id: update.sequence for update in plan}
    items = [
        item.with_sequence(new_sequences[item.id]) if item.id in new_sequences else item
        for item in siblings
    ]
    # sorted() is stable, so ties keep their listed order
    return sorted(items, key=lambda item: item.sequence)


def move_index(items: Sequence[T], old_index: int, new_index: int) -> List[T]:
    """Array splice: remove at `old_index`, insert at `new_index`."""
    result = list(items)
    result.insert(new_index, result.pop(old_index))
    return result


def clamp_index(index: int, count: int) -> int:
    """Clamp a 0-based index into [0, count - 1]."""
    if count <= 0:
        return 0
    return max(0, min(index, count - 1))
