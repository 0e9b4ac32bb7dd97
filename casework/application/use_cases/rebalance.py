"""Rebalance use cases — propose moves on a snapshot, then apply them.

Propose never writes. Apply is safe to retry: a move whose assignment was
already superseded by the same target reports ``already_applied`` and
changes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from casework.application.ports.assignment_repo import AssignmentRepository
from casework.application.ports.item_repo import ItemRepository
from casework.application.ports.staff_repo import StaffRepository
from casework.domain.entities.assignment import Assignment
from casework.domain.policies.candidate_scoring import eligibility_failure, item_distance_km
from casework.domain.policies.rebalancing import RebalanceMove, propose_rebalance
from casework.domain.value_objects.enums import AssignmentSource, ItemStatus, MoveOutcome
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveResult:
    move: RebalanceMove
    outcome: MoveOutcome
    new_assignment_id: int | None = None
    detail: str | None = None


class ProposeRebalanceUseCase:
    def __init__(
        self,
        staff_repo: StaffRepository,
        item_repo: ItemRepository,
        assignment_repo: AssignmentRepository,
        policy: RoutingPolicy = DEFAULT_POLICY,
    ):
        self._staff = staff_repo
        self._items = item_repo
        self._assignments = assignment_repo
        self._policy = policy

    async def execute(self) -> list[RebalanceMove]:
        staff_pool = await self._staff.get_all()
        active = await self._assignments.get_active()
        items = await self._items.get_by_ids(sorted({a.item_id for a in active}))
        return propose_rebalance(staff_pool, active, items, self._policy)


class ApplyRebalanceUseCase:
    """Apply proposed moves one by one against the current store state."""

    def __init__(
        self,
        staff_repo: StaffRepository,
        item_repo: ItemRepository,
        assignment_repo: AssignmentRepository,
        policy: RoutingPolicy = DEFAULT_POLICY,
    ):
        self._staff = staff_repo
        self._items = item_repo
        self._assignments = assignment_repo
        self._policy = policy

    async def execute(
        self,
        moves: list[RebalanceMove],
        now: datetime | None = None,
    ) -> list[MoveResult]:
        now = now or datetime.now(timezone.utc)
        results = [await self._apply(move, now) for move in moves]

        applied = sum(1 for r in results if r.outcome == MoveOutcome.APPLIED)
        logger.info("Rebalance apply: %d/%d moves applied", applied, len(results))
        return results

    async def _apply(self, move: RebalanceMove, now: datetime) -> MoveResult:
        if move.from_staff_id == move.to_staff_id:
            return self._skip(move, MoveOutcome.REJECTED, "source and target are the same staff member")

        current = await self._assignments.get_by_id(move.assignment_id)
        if current is None:
            return self._skip(move, MoveOutcome.STALE, "assignment not found")

        if not current.is_active:
            if current.superseded_by is not None:
                successor = await self._assignments.get_by_id(current.superseded_by)
                if (
                    successor is not None
                    and successor.staff_id == move.to_staff_id
                    and successor.source == AssignmentSource.REBALANCE
                ):
                    return MoveResult(
                        move=move,
                        outcome=MoveOutcome.ALREADY_APPLIED,
                        new_assignment_id=successor.id,
                    )
            return self._skip(move, MoveOutcome.STALE, "assignment no longer active")

        if current.staff_id != move.from_staff_id:
            return self._skip(move, MoveOutcome.STALE, "assignment owned by another staff member")

        item = await self._items.get_by_id(move.item_id)
        if item is None or item.status != ItemStatus.ASSIGNED:
            return self._skip(move, MoveOutcome.STALE, "item is no longer waiting")

        source = await self._staff.get_by_id(move.from_staff_id)
        target = await self._staff.get_by_id(move.to_staff_id)
        if source is None or target is None:
            return self._skip(move, MoveOutcome.STALE, "staff member not found")
        if not target.has_room():
            return self._skip(move, MoveOutcome.REJECTED, "target at capacity")

        # Target may have changed since the proposal was made
        reason = eligibility_failure(item, target, item_distance_km(item, target), self._policy)
        if reason is not None:
            return self._skip(move, MoveOutcome.REJECTED, f"target not eligible: {reason}")

        await self._staff.transfer_workload(source, target)
        replacement = await self._assignments.supersede(
            current.id,
            Assignment(
                id=None,
                item_id=move.item_id,
                staff_id=move.to_staff_id,
                source=AssignmentSource.REBALANCE,
                assigned_at=now,
                reason=f"Rebalanced from staff {move.from_staff_id}",
            ),
        )

        item.assigned_staff_id = move.to_staff_id
        await self._items.update(item)

        logger.info(
            "Item %s moved from staff %s to staff %s",
            move.item_id, move.from_staff_id, move.to_staff_id,
        )
        return MoveResult(
            move=move,
            outcome=MoveOutcome.APPLIED,
            new_assignment_id=replacement.id,
        )

    @staticmethod
    def _skip(move: RebalanceMove, outcome: MoveOutcome, detail: str) -> MoveResult:
        logger.warning(
            "Rebalance move of assignment %s skipped (%s): %s",
            move.assignment_id, outcome.value, detail,
        )
        return MoveResult(move=move, outcome=outcome, detail=detail)
