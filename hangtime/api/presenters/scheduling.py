from __future__ import annotations

from typing import Any

from hangtime.schemas.availability import IntervalItem, ToggleFailureOut, ToggleResponse, ToggleStepOut
from hangtime.schemas.hangouts import HangoutInterest, HangoutItem
from hangtime.schemas.users import UserSummary
from hangtime.services.availability import ToggleResult
from hangtime.services.toggle_planner import PlanStep, format_minute


def build_hangout_item(proposal: Any) -> HangoutItem:
    interest = proposal.interest
    return HangoutItem(
        id=proposal.id,
        status=proposal.status,
        proposed_at=proposal.proposed_at,
        location=proposal.location,
        message=proposal.message,
        description=proposal.description,
        created_at=proposal.created_at,
        responded_at=proposal.responded_at,
        sender=UserSummary.model_validate(proposal.sender),
        recipient=UserSummary.model_validate(proposal.recipient),
        interest=HangoutInterest(id=interest.id, title=interest.title) if interest is not None else None,
    )


def _step_out(step: PlanStep) -> ToggleStepOut:
    return ToggleStepOut(
        delete_id=step.delete_id,
        inserts=[
            (row.day_of_week, format_minute(row.start_minute), format_minute(row.end_minute))
            for row in step.inserts
        ],
    )


def build_toggle_response(result: ToggleResult, intervals: list[Any]) -> ToggleResponse:
    return ToggleResponse(
        action=result.action.value,
        day=result.day,
        hours=list(result.hours),
        ok=result.ok,
        applied=[_step_out(step) for step in result.applied],
        failed=[ToggleFailureOut(step=_step_out(f.step), error=f.error) for f in result.failed],
        intervals=[IntervalItem.from_model(i) for i in intervals],
    )
