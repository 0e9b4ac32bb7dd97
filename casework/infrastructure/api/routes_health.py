"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from casework.adapters.persistence.database import get_session
from casework.application.ports.staff_repo import StaffRepository
from casework.domain.policies.capacity import summarize_team
from casework.domain.value_objects.enums import LoadState
from casework.domain.value_objects.routing_policy import RoutingPolicy
from casework.infrastructure.api.dependencies import get_policy, get_staff_repo

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    session: AsyncSession = Depends(get_session),
    staff: StaffRepository = Depends(get_staff_repo),
    policy: RoutingPolicy = Depends(get_policy),
):
    """Database connectivity plus how much of the roster can take new work."""
    roster = None
    try:
        await session.execute(text("SELECT 1"))
        team = summarize_team(await staff.get_all(), policy)
        db_status = "connected"
        roster = {
            "staff_count": team.staff_count,
            "accepting_work": team.by_state[LoadState.AVAILABLE] + team.by_state[LoadState.BUSY],
            "open_items": team.total_open,
            "total_capacity": team.total_capacity,
        }
    except Exception as e:
        logger.warning("Health check failed: %s", e)
        db_status = f"error: {e}"

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "roster": roster,
        "service": "casework routing core",
    }
