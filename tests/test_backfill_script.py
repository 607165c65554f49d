import uuid

import pytest

from hangtime.services import availability as store
from scripts.backfill_default_availability import _default_rows, run_backfill


def test_default_rows_cover_the_whole_week():
    user_id = uuid.uuid4()
    rows = _default_rows(user_id, weekdays_only=False)

    assert [r.day_of_week for r in rows] == [0, 1, 2, 3, 4, 5, 6]
    assert all(r.user_id == user_id for r in rows)
    assert (rows[0].start_minute, rows[0].end_minute) == (9 * 60, 22 * 60)
    assert (rows[1].start_minute, rows[1].end_minute) == (17 * 60, 20 * 60)


def test_default_rows_weekdays_only_skips_weekend():
    rows = _default_rows(uuid.uuid4(), weekdays_only=True)
    assert [r.day_of_week for r in rows] == [1, 2, 3, 4, 5]


@pytest.mark.anyio
async def test_dry_run_does_not_insert(db_session, make_user):
    user_id = (await make_user()).id

    stats = await run_backfill(
        db_session,
        apply=False,
        batch_size=2,
        max_users=None,
        weekdays_only=False,
        verbose=False,
    )

    assert stats.scanned >= 1
    assert stats.would_seed == stats.scanned
    assert stats.seeded == 0
    assert stats.rows_inserted == 0
    assert await store.list_intervals(db_session, user_id) == []


@pytest.mark.anyio
async def test_apply_seeds_users_without_availability(db_session, make_user):
    seeded_id = (await make_user()).id
    existing_id = (await make_user()).id
    await store.insert_interval(db_session, existing_id, 3, 60, 120)
    await db_session.commit()

    stats = await run_backfill(
        db_session,
        apply=True,
        batch_size=50,
        max_users=None,
        weekdays_only=True,
        verbose=True,
    )

    assert stats.seeded == stats.scanned
    assert stats.rows_inserted == 5 * stats.seeded
    assert [r.day_of_week for r in await store.list_intervals(db_session, seeded_id)] == [1, 2, 3, 4, 5]
    assert [(r.start_minute, r.end_minute) for r in await store.list_intervals(db_session, existing_id)] == [(60, 120)]


@pytest.mark.anyio
async def test_run_backfill_rejects_bad_limits(db_session):
    with pytest.raises(ValueError):
        await run_backfill(
            db_session,
            apply=False,
            batch_size=0,
            max_users=None,
            weekdays_only=False,
            verbose=False,
        )
