"""Staff endpoints — roster, workload dashboard and performance."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from casework.adapters.persistence.database import get_session
from casework.application.ports.staff_repo import StaffRepository
from casework.application.use_cases.staff_performance import (
    RecomputePerformanceUseCase,
    StaffPerformanceUseCase,
)
from casework.domain.entities.staff_member import StaffMember
from casework.domain.errors import ValidationError
from casework.domain.policies.capacity import load_state, summarize_team, workload_percentage
from casework.domain.value_objects.enums import AvailabilityStatus, Designation
from casework.domain.value_objects.geo_point import GeoPoint
from casework.domain.value_objects.routing_policy import RoutingPolicy
from casework.infrastructure.api.dependencies import (
    get_policy,
    get_recompute_performance_uc,
    get_staff_performance_uc,
    get_staff_repo,
)

router = APIRouter(prefix="/staff", tags=["staff"])


class StaffIn(BaseModel):
    name: str
    max_concurrent_capacity: int = Field(gt=0)
    designation: str = Designation.OFFICER.value
    department_id: int | None = None
    specializations: list[int] = Field(default_factory=list)
    latitude: float | None = None
    longitude: float | None = None
    availability_status: str = AvailabilityStatus.AVAILABLE.value


@router.post("")
async def register_staff(
    body: StaffIn,
    staff_repo: StaffRepository = Depends(get_staff_repo),
    policy: RoutingPolicy = Depends(get_policy),
    session: AsyncSession = Depends(get_session),
):
    try:
        designation = Designation(body.designation)
        availability = AvailabilityStatus(body.availability_status)
    except ValueError as e:
        raise ValidationError(str(e)) from None

    location = None
    if body.latitude is not None and body.longitude is not None:
        location = GeoPoint(latitude=body.latitude, longitude=body.longitude)

    staff = await staff_repo.save(
        StaffMember(
            id=None,
            name=body.name,
            max_concurrent_capacity=body.max_concurrent_capacity,
            designation=designation,
            department_id=body.department_id,
            specializations=set(body.specializations),
            location=location,
            availability_status=availability,
        )
    )
    await session.commit()
    return _serialize_staff(staff, policy)


@router.get("")
async def list_staff(
    staff_repo: StaffRepository = Depends(get_staff_repo),
    policy: RoutingPolicy = Depends(get_policy),
):
    """Roster with each member's load."""
    staff = await staff_repo.get_all()
    return {"total": len(staff), "staff": [_serialize_staff(s, policy) for s in staff]}


@router.get("/workload")
async def workload_summary(
    staff_repo: StaffRepository = Depends(get_staff_repo),
    policy: RoutingPolicy = Depends(get_policy),
):
    """Team-wide load for the supervisor dashboard."""
    summary = summarize_team(await staff_repo.get_all(), policy)
    return {
        "staff_count": summary.staff_count,
        "by_state": {state.value: n for state, n in summary.by_state.items()},
        "average_percentage": summary.average_percentage,
        "total_open": summary.total_open,
        "total_capacity": summary.total_capacity,
    }


@router.post("/performance/recompute")
async def recompute_performance(
    recompute_uc: RecomputePerformanceUseCase = Depends(get_recompute_performance_uc),
    session: AsyncSession = Depends(get_session),
):
    scores = await recompute_uc.execute()
    await session.commit()
    return {"updated": len(scores), "scores": scores}


@router.get("/{staff_id}")
async def get_staff(
    staff_id: int,
    staff_repo: StaffRepository = Depends(get_staff_repo),
    policy: RoutingPolicy = Depends(get_policy),
):
    staff = await staff_repo.get_by_id(staff_id)
    if not staff:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return _serialize_staff(staff, policy)


@router.get("/{staff_id}/performance")
async def staff_performance(
    staff_id: int,
    performance_uc: StaffPerformanceUseCase = Depends(get_staff_performance_uc),
):
    m = await performance_uc.execute(staff_id)
    return {
        "staff_id": m.staff_id,
        "resolution_time_hours": m.resolution_time_hours,
        "sla_compliance": m.sla_compliance,
        "satisfaction_score": m.satisfaction_score,
        "resolved_count": m.resolved_count,
        "on_time_count": m.on_time_count,
    }


def _serialize_staff(s: StaffMember, policy: RoutingPolicy) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "designation": s.designation.value,
        "department_id": s.department_id,
        "specializations": sorted(s.specializations),
        "latitude": s.location.latitude if s.location else None,
        "longitude": s.location.longitude if s.location else None,
        "availability_status": s.availability_status.value,
        "current_workload": s.current_workload,
        "max_concurrent_capacity": s.max_concurrent_capacity,
        "workload_percentage": workload_percentage(s),
        "load_state": load_state(s, policy).value,
        "performance_score": s.performance_score,
    }
