"""SLA endpoints — deadline preview for the intake form."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from casework.domain.policies.sla_clock import compute_deadlines, format_countdown, parse_priority
from casework.domain.value_objects.routing_policy import RoutingPolicy
from casework.infrastructure.api.dependencies import get_policy

router = APIRouter(prefix="/sla", tags=["sla"])


class DeadlineQuery(BaseModel):
    priority: str
    submitted_at: datetime | None = None


@router.post("/deadlines")
async def preview_deadlines(body: DeadlineQuery, policy: RoutingPolicy = Depends(get_policy)):
    """Deadlines an item of this priority would get if submitted now (or at ``submitted_at``)."""
    now = datetime.now(timezone.utc)
    submitted_at = body.submitted_at or now
    priority = parse_priority(body.priority)
    d = compute_deadlines(priority, submitted_at, policy)
    return {
        "priority": priority.value,
        "submitted_at": submitted_at.isoformat(),
        "response_due_at": d.response_due_at.isoformat(),
        "escalation_due_at": d.escalation_due_at.isoformat(),
        "review_due_at": d.review_due_at.isoformat(),
        "response_countdown": format_countdown(d.response_due_at, now),
    }
