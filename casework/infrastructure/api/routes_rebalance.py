"""Rebalance endpoints — propose moves, then apply a reviewed list."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from casework.adapters.persistence.database import get_session
from casework.application.use_cases.rebalance import (
    ApplyRebalanceUseCase,
    ProposeRebalanceUseCase,
)
from casework.domain.policies.rebalancing import RebalanceMove
from casework.domain.value_objects.enums import MoveOutcome
from casework.infrastructure.api.dependencies import (
    get_apply_rebalance_uc,
    get_propose_rebalance_uc,
)

router = APIRouter(prefix="/rebalance", tags=["rebalance"])


class MoveIn(BaseModel):
    assignment_id: int
    item_id: int
    from_staff_id: int
    to_staff_id: int


class ApplyIn(BaseModel):
    moves: list[MoveIn]


@router.post("/propose")
async def propose(propose_uc: ProposeRebalanceUseCase = Depends(get_propose_rebalance_uc)):
    """Moves from overloaded to underloaded staff; nothing is written."""
    moves = await propose_uc.execute()
    return {"total": len(moves), "moves": [_move_to_dict(m) for m in moves]}


@router.post("/apply")
async def apply(
    body: ApplyIn,
    apply_uc: ApplyRebalanceUseCase = Depends(get_apply_rebalance_uc),
    session: AsyncSession = Depends(get_session),
):
    """Apply moves; already applied or stale moves are reported, not repeated."""
    results = await apply_uc.execute(
        [
            RebalanceMove(
                assignment_id=m.assignment_id,
                item_id=m.item_id,
                from_staff_id=m.from_staff_id,
                to_staff_id=m.to_staff_id,
            )
            for m in body.moves
        ]
    )
    await session.commit()

    return {
        "applied": sum(1 for r in results if r.outcome == MoveOutcome.APPLIED),
        "results": [
            {
                **_move_to_dict(r.move),
                "outcome": r.outcome.value,
                "new_assignment_id": r.new_assignment_id,
                "detail": r.detail,
            }
            for r in results
        ],
    }


def _move_to_dict(m: RebalanceMove) -> dict:
    return {
        "assignment_id": m.assignment_id,
        "item_id": m.item_id,
        "from_staff_id": m.from_staff_id,
        "to_staff_id": m.to_staff_id,
    }
