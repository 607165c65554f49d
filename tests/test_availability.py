import uuid

import pytest

from hangtime.core.errors import Conflict, ValidationError
from hangtime.services import availability as store
from hangtime.services.toggle_planner import (
    Cell,
    PlanStep,
    PlannedInsert,
    Selection,
    ToggleAction,
    TogglePlan,
)

pytestmark = pytest.mark.anyio

WED = 3


def _spans(rows, day=WED):
    return sorted((r.start_minute, r.end_minute) for r in rows if r.day_of_week == day)


async def test_add_toggle_marks_every_hour_free(db_session, make_user):
    user = await make_user()

    result = await store.toggle_cells(db_session, user.id, Cell(WED, 17), Cell(WED, 19))
    await db_session.commit()

    assert result.action is ToggleAction.add
    assert result.ok
    for hour in (17, 18, 19):
        assert await store.is_hour_free(db_session, user.id, WED, hour) is not None
    assert await store.is_hour_free(db_session, user.id, WED, 20) is None


async def test_add_then_remove_round_trip_leaves_no_rows(db_session, make_user):
    user = await make_user()

    await store.toggle_cells(db_session, user.id, Cell(WED, 10), Cell(WED, 12))
    await db_session.commit()
    assert len(await store.list_intervals(db_session, user.id)) == 3

    result = await store.toggle_cells(db_session, user.id, Cell(WED, 12), Cell(WED, 10))
    await db_session.commit()

    assert result.action is ToggleAction.remove
    assert await store.list_intervals(db_session, user.id) == []


async def test_remove_interior_hour_splits_stored_interval(db_session, make_user):
    user = await make_user()
    await store.insert_interval(db_session, user.id, WED, 17 * 60, 20 * 60)
    await db_session.commit()

    result = await store.toggle_cells(db_session, user.id, Cell(WED, 18))
    await db_session.commit()

    assert result.action is ToggleAction.remove
    rows = await store.list_intervals(db_session, user.id)
    assert _spans(rows) == [(17 * 60, 18 * 60), (19 * 60, 20 * 60)]
    assert await store.is_hour_free(db_session, user.id, WED, 18) is None
    assert await store.is_hour_free(db_session, user.id, WED, 17) is not None


async def test_boundary_selection_only_adds_hour_twenty(db_session, make_user):
    user = await make_user()
    original = await store.insert_interval(db_session, user.id, WED, 17 * 60, 20 * 60)
    await db_session.commit()

    result = await store.toggle_cells(db_session, user.id, Cell(WED, 17), Cell(WED, 20))
    await db_session.commit()

    assert result.action is ToggleAction.add
    rows = await store.list_intervals(db_session, user.id)
    assert _spans(rows) == [(17 * 60, 20 * 60), (20 * 60, 21 * 60)]
    assert original.id in {r.id for r in rows}


async def test_delete_interval_is_idempotent(db_session, make_user):
    user = await make_user()
    interval = await store.insert_interval(db_session, user.id, 1, 9 * 60, 10 * 60)
    await db_session.commit()

    assert await store.delete_interval(db_session, user.id, interval.id) is True
    assert await store.delete_interval(db_session, user.id, interval.id) is False
    assert await store.delete_interval(db_session, user.id, uuid.uuid4()) is False
    await db_session.commit()
    assert await store.list_intervals(db_session, user.id) == []


async def test_insert_interval_validates_bounds(db_session, make_user):
    user = await make_user()
    with pytest.raises(ValidationError):
        await store.insert_interval(db_session, user.id, 7, 0, 60)
    with pytest.raises(ValidationError):
        await store.insert_interval(db_session, user.id, 0, 600, 600)
    with pytest.raises(ValidationError):
        await store.insert_interval(db_session, user.id, 0, 0, 1500)


async def test_best_effort_apply_reports_failed_step_and_keeps_others(db_session, make_user):
    user = await make_user()
    plan = TogglePlan(
        action=ToggleAction.add,
        selection=Selection(day=WED, hours=(8, 9)),
        steps=(
            PlanStep(delete_id=None, inserts=(PlannedInsert(WED, 8 * 60, 9 * 60),)),
            PlanStep(delete_id=None, inserts=(PlannedInsert(WED, 9 * 60, 9 * 60),)),
        ),
    )

    result = await store.apply_toggle_plan(db_session, user.id, plan)
    await db_session.commit()

    assert not result.ok
    assert len(result.applied) == 1
    assert [f.error for f in result.failed] == ["start_not_before_end"]
    assert _spans(await store.list_intervals(db_session, user.id)) == [(8 * 60, 9 * 60)]


async def test_atomic_apply_raises_on_failure(db_session, make_user):
    user = await make_user()
    plan = TogglePlan(
        action=ToggleAction.add,
        selection=Selection(day=WED, hours=(8,)),
        steps=(PlanStep(delete_id=None, inserts=(PlannedInsert(WED, 9 * 60, 8 * 60),)),),
    )
    with pytest.raises(ValidationError):
        await store.apply_toggle_plan(db_session, user.id, plan, atomic=True)
    await db_session.rollback()


async def test_seed_defaults_once(db_session, make_user):
    user = await make_user()

    rows = await store.seed_default_availability(db_session, user.id)
    await db_session.commit()

    assert len(rows) == 7
    assert _spans(rows, day=0) == [(9 * 60, 22 * 60)]
    assert _spans(rows, day=WED) == [(17 * 60, 20 * 60)]

    with pytest.raises(Conflict):
        await store.seed_default_availability(db_session, user.id)


async def test_replace_weekly_availability_skips_disabled_days(db_session, make_user):
    user = await make_user()
    await store.seed_default_availability(db_session, user.id)
    await db_session.commit()

    rows = await store.replace_weekly_availability(
        db_session,
        user.id,
        [
            store.DayWindow(day_of_week=1, start_minute=18 * 60, end_minute=21 * 60),
            store.DayWindow(day_of_week=2, start_minute=0, end_minute=0, enabled=False),
        ],
    )
    await db_session.commit()

    assert [(r.day_of_week, r.start_minute, r.end_minute) for r in rows] == [(1, 18 * 60, 21 * 60)]


async def test_replace_weekly_availability_rejects_duplicate_days(db_session, make_user):
    user = await make_user()
    with pytest.raises(ValidationError):
        await store.replace_weekly_availability(
            db_session,
            user.id,
            [
                store.DayWindow(day_of_week=1, start_minute=60, end_minute=120),
                store.DayWindow(day_of_week=1, start_minute=180, end_minute=240),
            ],
        )


# --- HTTP ---


async def test_toggle_endpoint_boundary_case(client, onboarded_user):
    user = await onboarded_user(client)
    h = user["headers"]

    r = await client.put(
        "/availability/weekly",
        json={"days": [{"day_of_week": WED, "start_time": "17:00", "end_time": "20:00"}]},
        headers=h,
    )
    assert r.status_code == 200, r.text

    r = await client.post(
        "/availability/toggle",
        json={"start": {"day": WED, "hour": 17}, "end": {"day": WED, "hour": 20}},
        headers=h,
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["action"] == "add"
    assert data["ok"] is True
    assert data["hours"] == [17, 18, 19, 20]
    assert [step["inserts"] for step in data["applied"]] == [[[WED, "20:00", "21:00"]]]
    spans = sorted((i["start_time"], i["end_time"]) for i in data["intervals"])
    assert spans == [("17:00", "20:00"), ("20:00", "21:00")]


async def test_toggle_endpoint_cross_column_drag_uses_start_cell(client, onboarded_user):
    user = await onboarded_user(client)
    h = user["headers"]

    r = await client.post(
        "/availability/toggle",
        json={"start": {"day": 1, "hour": 9}, "end": {"day": 2, "hour": 11}},
        headers=h,
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["day"] == 1
    assert data["hours"] == [9]
    assert [(i["day_of_week"], i["start_time"], i["end_time"]) for i in data["intervals"]] == [(1, "09:00", "10:00")]


async def test_free_endpoint_and_delete(client, onboarded_user):
    user = await onboarded_user(client)
    h = user["headers"]

    r = await client.post("/availability/defaults", headers=h)
    assert r.status_code == 201, r.text
    assert len(r.json()) == 7

    r = await client.post("/availability/defaults", headers=h)
    assert r.status_code == 409

    r = await client.get("/availability/free", params={"day": 0, "hour": 21}, headers=h)
    assert r.status_code == 200
    body = r.json()
    assert body["free"] is True
    interval_id = body["interval"]["id"]

    r = await client.get("/availability/free", params={"day": 0, "hour": 22}, headers=h)
    assert r.json()["free"] is False

    r = await client.delete(f"/availability/{interval_id}", headers=h)
    assert r.status_code == 204
    r = await client.delete(f"/availability/{interval_id}", headers=h)
    assert r.status_code == 204

    r = await client.get("/availability/free", params={"day": 0, "hour": 21}, headers=h)
    assert r.json()["free"] is False


async def test_weekly_rejects_inverted_window(client, onboarded_user):
    user = await onboarded_user(client)
    r = await client.put(
        "/availability/weekly",
        json={"days": [{"day_of_week": 2, "start_time": "20:00", "end_time": "17:00"}]},
        headers=user["headers"],
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Start time must be before end time"

    # disabled days are not checked
    r = await client.put(
        "/availability/weekly",
        json={"days": [{"day_of_week": 2, "enabled": False, "start_time": "20:00", "end_time": "17:00"}]},
        headers=user["headers"],
    )
    assert r.status_code == 200
    assert r.json() == []

    r = await client.put(
        "/availability/weekly",
        json={"days": [{"day_of_week": 2, "start_time": "17:00", "end_time": "25:00"}]},
        headers=user["headers"],
    )
    assert r.status_code == 422
