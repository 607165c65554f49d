#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from hangtime.db.session import AsyncSessionLocal
from hangtime.models.availability_interval import AvailabilityInterval
from hangtime.models.user import User
from hangtime.services.availability import DEFAULT_WEEKLY_AVAILABILITY

logger = logging.getLogger("backfill_default_availability")


@dataclass
class BackfillStats:
    scanned: int = 0
    would_seed: int = 0
    seeded: int = 0
    rows_inserted: int = 0


def _default_rows(
    user_id: UUID,
    *,
    weekdays_only: bool,
) -> list[AvailabilityInterval]:
    rows: list[AvailabilityInterval] = []
    for day_of_week, start_minute, end_minute in DEFAULT_WEEKLY_AVAILABILITY:
        if weekdays_only and day_of_week in (0, 6):
            continue
        rows.append(
            AvailabilityInterval(
                user_id=user_id,
                day_of_week=day_of_week,
                start_minute=start_minute,
                end_minute=end_minute,
            )
        )
    return rows


def _missing_availability_clause():
    has_rows = (
        select(sa.literal(1))
        .select_from(AvailabilityInterval)
        .where(AvailabilityInterval.user_id == User.id)
        .exists()
    )
    return sa.not_(has_rows)


async def _load_batch(
    db: AsyncSession,
    *,
    after_id: UUID | None,
    batch_size: int,
) -> list[UUID]:
    q = (
        select(User.id)
        .where(_missing_availability_clause())
        .order_by(User.id.asc())
        .limit(batch_size)
    )
    if after_id is not None:
        q = q.where(User.id > after_id)
    return list((await db.execute(q)).scalars())


async def run_backfill(
    db: AsyncSession,
    *,
    apply: bool,
    batch_size: int,
    max_users: int | None,
    weekdays_only: bool,
    verbose: bool,
) -> BackfillStats:
    if batch_size <= 0:
        raise ValueError("--batch-size must be greater than 0")
    if max_users is not None and max_users <= 0:
        raise ValueError("--max-users must be greater than 0 when provided")

    stats = BackfillStats()
    after_id: UUID | None = None

    done = False
    while not done:
        batch = await _load_batch(db, after_id=after_id, batch_size=batch_size)
        if not batch:
            break

        for user_id in batch:
            if max_users is not None and stats.scanned >= max_users:
                done = True
                break

            stats.scanned += 1
            stats.would_seed += 1
            rows = _default_rows(user_id, weekdays_only=weekdays_only)
            if verbose:
                logger.info("candidate user_id=%s rows=%d", user_id, len(rows))
            if apply:
                db.add_all(rows)
                stats.seeded += 1
                stats.rows_inserted += len(rows)

        after_id = batch[-1]
        if apply:
            try:
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        else:
            # End the read transaction and release any snapshot state.
            await db.rollback()

    return stats


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Seed the default weekly availability for users who have none."
    )
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--apply",
        action="store_true",
        help="Persist changes. Without this flag, the script runs in dry-run mode.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Explicitly run in dry-run mode (default behavior).",
    )
    parser.add_argument("--batch-size", type=int, default=200, help="Number of users processed per batch.")
    parser.add_argument(
        "--max-users",
        type=int,
        default=None,
        help="Optional cap for number of users scanned.",
    )
    parser.add_argument(
        "--weekdays-only",
        action="store_true",
        help="Only seed Monday to Friday evenings.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log user-level actions.")
    return parser.parse_args()


def _print_summary(*, apply: bool, stats: BackfillStats) -> None:
    mode = "apply" if apply else "dry-run"
    print("Default availability backfill complete")
    print(f"mode: {mode}")
    print(f"scanned: {stats.scanned}")
    print(f"would_seed: {stats.would_seed}")
    print(f"seeded: {stats.seeded}")
    print(f"rows_inserted: {stats.rows_inserted}")


async def _main_async(args: argparse.Namespace) -> BackfillStats:
    async with AsyncSessionLocal() as db:
        return await run_backfill(
            db,
            apply=args.apply,
            batch_size=args.batch_size,
            max_users=args.max_users,
            weekdays_only=args.weekdays_only,
            verbose=args.verbose,
        )


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    stats = asyncio.run(_main_async(args))
    _print_summary(apply=args.apply, stats=stats)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
