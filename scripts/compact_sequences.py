#!/usr/bin/env python3
"""
Compact Sequences Script.

Finds every sequencing scope whose `sequence` values are not exactly 1..N
(left behind by interleaved writers) and renumbers it in its current order.

Run with --dry-run first to see which scopes would change.

Usage:
    # Dry run (shows what would be done)
    python -m scripts.compact_sequences --dry-run

    # Actually compact every kind
    python -m scripts.compact_sequences

    # Only one kind
    python -m scripts.compact_sequences --kind glossaries
"""
import asyncio
import argparse
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import AsyncSessionLocal
from app.sequencing import renumber
from app.sequencing.coordinator import ReorderCoordinator
from app.sequencing.errors import ReorderError
from app.sequencing.scopes import SCOPES, SequenceScope
from app.sequencing.store import SequenceStore


async def get_scope_ids(db: AsyncSession, scope: SequenceScope) -> List[str]:
    """Distinct parent ids that have at least one sequenced row."""
    result = await db.execute(select(scope.parent_column).distinct())
    return [row[0] for row in result.fetchall()]


async def compact_kind(db: AsyncSession, scope: SequenceScope, dry_run: bool = True) -> Dict[str, int]:
    """
    Compact every drifted scope of one kind.

    Args:
        db: Database session
        scope: Which sequenced entity to process
        dry_run: If True, only report

    Returns:
        Counts of scopes checked, drifted and fixed, and rows written.
    """
    coordinator = ReorderCoordinator(SequenceStore(db, scope))
    stats = {"checked": 0, "drifted": 0, "fixed": 0, "writes": 0}

    for parent_id in await get_scope_ids(db, scope):
        stats["checked"] += 1
        items = await coordinator.list_ordered(parent_id)
        if renumber.is_dense(items):
            continue

        stats["drifted"] += 1
        plan = renumber.plan_compaction(items)
        print(f"  {scope.kind} {parent_id}: {len(plan)} row(s) out of place")
        if dry_run:
            continue

        try:
            result = await coordinator.compact(parent_id)
        except ReorderError as e:
            print(f"    ❌ {e}")
            continue
        stats["fixed"] += 1
        stats["writes"] += result.writes

    return stats


async def compact_sequences(db: AsyncSession, kind: Optional[str] = None, dry_run: bool = True):
    """Compact all kinds, or only `kind`."""
    print("\n" + "=" * 60)
    print("COMPACT SEQUENCES SCRIPT")
    print("=" * 60)

    if dry_run:
        print("\n[DRY RUN MODE - No changes will be made]\n")
    else:
        print("\n[LIVE MODE - Changes will be committed]\n")

    scopes = [SCOPES[kind]] if kind else list(SCOPES.values())
    for scope in scopes:
        print("-" * 40)
        print(f"Kind: {scope.kind}")
        print("-" * 40)
        stats = await compact_kind(db, scope, dry_run=dry_run)
        print(
            f"  Checked: {stats['checked']}  Drifted: {stats['drifted']}  "
            f"Fixed: {stats['fixed']}  Writes: {stats['writes']}"
        )

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60 + "\n")


async def main():
    parser = argparse.ArgumentParser(
        description="Renumber sequenced lists back to 1..N"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without making changes"
    )
    parser.add_argument(
        "--kind",
        type=str,
        choices=sorted(SCOPES),
        default=None,
        help="Only compact one sequenced kind"
    )

    args = parser.parse_args()

    async with AsyncSessionLocal() as db:
        await compact_sequences(db, kind=args.kind, dry_run=args.dry_run)


if __name__ == "__main__":
    asyncio.run(main())
