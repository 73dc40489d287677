"""
SequenceStore - scoped read/write access to the `sequence` column.

Writes are issued one row at a time. A batch is best effort: each row runs in
its own SAVEPOINT so a failing row is reported by id without undoing the rows
that succeeded.
"""
import logging
from typing import Iterable, List

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from app.sequencing.errors import NotFoundError
from app.sequencing.models import BatchResult, SequencedItem, SequenceUpdate
from app.sequencing.scopes import SequenceScope

logger = logging.getLogger(__name__)


class SequenceStore:
    """Sequence access for one kind of sequenced entity."""

    def __init__(self, db: AsyncSession, scope: SequenceScope):
        self.db = db
        self.scope = scope

    async def get_max_sequence(self, parent_scope_id: str) -> int:
        """Highest sequence in use for the scope, or 0 when it is empty."""
        model = self.scope.model
        result = await self.db.execute(
            select(model.sequence)
            .where(self.scope.parent_column == parent_scope_id)
            .order_by(model.sequence.desc())
            .limit(1)
        )
        return result.scalar_one_or_none() or 0

    async def list_ordered(self, parent_scope_id: str) -> List[SequencedItem]:
        """All siblings, ascending by sequence."""
        model = self.scope.model
        label = self.scope.label_column
        columns = [model.id, model.sequence, model.updated_at]
        if label is not None:
            columns.append(label)

        result = await self.db.execute(
            select(*columns)
            .where(self.scope.parent_column == parent_scope_id)
            .order_by(model.sequence.asc(), model.created_at.asc())
        )
        return [
            SequencedItem(
                id=row[0],
                parent_scope_id=parent_scope_id,
                sequence=row[1],
                updated_at=row[2],
                name=row[3] if label is not None else None,
            )
            for row in result.all()
        ]

    def _update_statement(self, item_id: str, sequence: int):
        model = self.scope.model
        return (
            update(model)
            .where(model.id == item_id)
            .values(sequence=sequence, updated_at=func.now())
        )

    async def set_sequence(self, item_id: str, new_sequence: int) -> None:
        """Update a single row. Raises NotFoundError if it does not exist.

        A miss only unwinds its own SAVEPOINT; other pending work in the session
        is kept.
        """
        async with self.db.begin_nested():
            result = await self.db.execute(self._update_statement(item_id, new_sequence))
            if result.rowcount == 0:
                raise NotFoundError(item_id)
        await self.db.commit()

    async def batch_set_sequence(self, updates: Iterable[SequenceUpdate]) -> BatchResult:
        """Apply many updates, reporting failures per id instead of rolling back."""
        batch = BatchResult()
        for item_id, sequence in updates:
            try:
                async with self.db.begin_nested():
                    result = await self.db.execute(self._update_statement(item_id, sequence))
                    if result.rowcount == 0:
                        raise NotFoundError(item_id)
            except NotFoundError:
                batch.failed[item_id] = "not_found"
            except SQLAlchemyError as e:
                logger.warning(f"Sequence write failed for {self.scope.kind} {item_id}: {e}")
                batch.failed[item_id] = str(e)
            else:
                batch.applied.append(item_id)

        await self.db.commit()
        return batch
