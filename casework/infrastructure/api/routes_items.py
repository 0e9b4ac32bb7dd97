"""Item endpoints — intake, routing, lifecycle and SLA view."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from casework.adapters.persistence.database import get_session
from casework.application.ports.item_repo import ItemRepository
from casework.application.use_cases.assign_item import (
    AssignItemUseCase,
    AssignmentDecision,
    BatchAssignUseCase,
    ManualAssignUseCase,
)
from casework.application.use_cases.intake_item import IntakeItemUseCase, ItemSubmission
from casework.application.use_cases.item_lifecycle import (
    CloseItemUseCase,
    EscalateOverdueUseCase,
    StartWorkUseCase,
)
from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.errors import ValidationError
from casework.domain.policies.sla_clock import compute_status, format_countdown, time_remaining
from casework.domain.value_objects.enums import ItemStatus
from casework.domain.value_objects.geo_point import GeoPoint
from casework.domain.value_objects.routing_policy import RoutingPolicy
from casework.infrastructure.api.dependencies import (
    get_assign_item_uc,
    get_batch_assign_uc,
    get_close_item_uc,
    get_escalate_uc,
    get_intake_item_uc,
    get_item_repo,
    get_manual_assign_uc,
    get_policy,
    get_start_work_uc,
)

router = APIRouter(prefix="/items", tags=["items"])


class ItemIn(BaseModel):
    kind: str = "complaint"
    priority: str
    category_id: int
    title: str = ""
    department_id: int | None = None
    latitude: float | None = None
    longitude: float | None = None
    submitted_at: datetime | None = None
    auto_assign: bool = True


class ManualAssignIn(BaseModel):
    staff_id: int
    reason: str | None = None


class CloseIn(BaseModel):
    status: str = ItemStatus.RESOLVED.value
    resolved_at: datetime | None = None
    rating: int | None = Field(default=None, ge=0, le=5)


@router.post("")
async def create_item(
    body: ItemIn,
    intake_uc: IntakeItemUseCase = Depends(get_intake_item_uc),
    session: AsyncSession = Depends(get_session),
):
    """Register a complaint or task, stamp its deadlines and route it."""
    location = None
    if body.latitude is not None and body.longitude is not None:
        location = GeoPoint(latitude=body.latitude, longitude=body.longitude)

    result = await intake_uc.execute(
        ItemSubmission(
            kind=body.kind,
            priority=body.priority,
            category_id=body.category_id,
            title=body.title,
            department_id=body.department_id,
            location=location,
            submitted_at=body.submitted_at,
        ),
        auto_assign=body.auto_assign,
    )
    await session.commit()

    return {
        "item": _serialize_item(result.item),
        "decision": _decision_to_dict(result.decision) if result.decision else None,
    }


@router.post("/assign")
async def assign_all(
    batch_uc: BatchAssignUseCase = Depends(get_batch_assign_uc),
    session: AsyncSession = Depends(get_session),
):
    """Auto-route every unassigned item."""
    decisions = await batch_uc.execute()
    await session.commit()

    assigned = [d for d in decisions if d.assigned]
    return {
        "status": "ok",
        "total": len(decisions),
        "assigned": len(assigned),
        "declined": len(decisions) - len(assigned),
        "decisions": [_decision_to_dict(d) for d in decisions],
    }


@router.post("/escalate")
async def escalate_overdue(
    escalate_uc: EscalateOverdueUseCase = Depends(get_escalate_uc),
    session: AsyncSession = Depends(get_session),
):
    escalated = await escalate_uc.execute()
    await session.commit()
    return {"escalated": [i.id for i in escalated]}


@router.get("/{item_id}")
async def get_item(
    item_id: int,
    items: ItemRepository = Depends(get_item_repo),
    policy: RoutingPolicy = Depends(get_policy),
):
    """Item detail with its live SLA status and countdown."""
    item = await items.get_by_id(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")

    now = datetime.now(timezone.utc)
    return {
        **_serialize_item(item),
        "sla": {
            "status": compute_status(item, now, policy).value,
            "countdown": format_countdown(item.response_due_at, now, completed=item.is_terminal()),
            "seconds_remaining": int(time_remaining(item, now).total_seconds()),
        },
    }


@router.post("/{item_id}/assign")
async def assign_single(
    item_id: int,
    assign_uc: AssignItemUseCase = Depends(get_assign_item_uc),
    items: ItemRepository = Depends(get_item_repo),
    session: AsyncSession = Depends(get_session),
):
    """Auto-route a single item by ID."""
    item = await items.get_by_id(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")

    decision = await assign_uc.execute(item)
    await session.commit()

    return {"status": "ok" if decision.assigned else "declined", **_decision_to_dict(decision)}


@router.post("/{item_id}/manual-assign")
async def manual_assign(
    item_id: int,
    body: ManualAssignIn,
    manual_uc: ManualAssignUseCase = Depends(get_manual_assign_uc),
    session: AsyncSession = Depends(get_session),
):
    assignment = await manual_uc.execute(item_id, body.staff_id, reason=body.reason)
    await session.commit()

    return {
        "assignment_id": assignment.id,
        "item_id": assignment.item_id,
        "staff_id": assignment.staff_id,
        "source": assignment.source.value,
        "reason": assignment.reason,
    }


@router.post("/{item_id}/start")
async def start_work(
    item_id: int,
    start_uc: StartWorkUseCase = Depends(get_start_work_uc),
    session: AsyncSession = Depends(get_session),
):
    item = await start_uc.execute(item_id)
    await session.commit()
    return _serialize_item(item)


@router.post("/{item_id}/close")
async def close_item(
    item_id: int,
    body: CloseIn,
    close_uc: CloseItemUseCase = Depends(get_close_item_uc),
    session: AsyncSession = Depends(get_session),
):
    """Resolve or close an item and free its owner's capacity."""
    try:
        status = ItemStatus(body.status)
    except ValueError:
        raise ValidationError(f"Unknown status: {body.status!r}") from None

    item = await close_uc.execute(
        item_id, status=status, resolved_at=body.resolved_at, rating=body.rating
    )
    await session.commit()
    return _serialize_item(item)


def _serialize_item(i: AssignableItem) -> dict:
    return {
        "id": i.id,
        "kind": i.kind.value,
        "title": i.title,
        "priority": i.priority.value,
        "category_id": i.category_id,
        "department_id": i.department_id,
        "latitude": i.location.latitude if i.location else None,
        "longitude": i.location.longitude if i.location else None,
        "status": i.status.value,
        "assigned_staff_id": i.assigned_staff_id,
        "submitted_at": i.submitted_at.isoformat(),
        "response_due_at": i.response_due_at.isoformat(),
        "escalation_due_at": i.escalation_due_at.isoformat(),
        "review_due_at": i.review_due_at.isoformat(),
        "resolved_at": i.resolved_at.isoformat() if i.resolved_at else None,
        "rating": i.rating,
    }


def _decision_to_dict(d: AssignmentDecision) -> dict:
    return {
        "item_id": d.item_id,
        "staff_id": d.staff_id,
        "assignment_id": d.assignment_id,
        "score": d.score,
        "distance_km": d.distance_km,
        "declined_reason": d.declined_reason,
        "candidates": [
            {"staff_id": c.staff_id, "score": c.score, "distance_km": c.distance_km}
            for c in d.candidates
        ],
    }
