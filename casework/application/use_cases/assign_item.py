"""Assignment use cases — auto-routing, manual routing and batch routing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from casework.application.ports.assignment_repo import AssignmentRepository
from casework.application.ports.item_repo import ItemRepository
from casework.application.ports.staff_repo import StaffRepository
from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.entities.assignment import Assignment
from casework.domain.errors import (
    ConcurrencyConflictError,
    NoEligibleStaffError,
    NotFoundError,
    ValidationError,
)
from casework.domain.policies.assignment_selection import (
    select_assignee,
    validate_manual_assignment,
)
from casework.domain.policies.candidate_scoring import ScoredCandidate
from casework.domain.value_objects.enums import AssignmentSource, ItemStatus
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy

logger = logging.getLogger(__name__)

CONCURRENCY_CONFLICT = "concurrency_conflict"


@dataclass
class AssignmentDecision:
    """Outcome of routing one item: an owner, or a decline with a reason."""

    item_id: int
    staff_id: int | None
    score: float | None
    assignment_id: int | None = None
    distance_km: float | None = None
    declined_reason: str | None = None
    candidates: list[ScoredCandidate] = field(default_factory=list)

    @property
    def assigned(self) -> bool:
        return self.staff_id is not None


class AssignItemUseCase:
    """Score the roster, pick an owner and record the assignment.

    The workload increment is version-checked against the snapshot the
    selection was made on. On a conflict the whole selection is repeated
    against a fresh snapshot, up to ``max_attempts`` times.
    """

    def __init__(
        self,
        staff_repo: StaffRepository,
        item_repo: ItemRepository,
        assignment_repo: AssignmentRepository,
        policy: RoutingPolicy = DEFAULT_POLICY,
        max_attempts: int = 3,
    ):
        if max_attempts < 1:
            raise ValidationError("max_attempts must be at least 1")
        self._staff = staff_repo
        self._items = item_repo
        self._assignments = assignment_repo
        self._policy = policy
        self._max_attempts = max_attempts

    async def execute(self, item: AssignableItem) -> AssignmentDecision:
        if item.is_terminal():
            raise ValidationError(f"Item {item.id} is already {item.status.value}")
        if await self._assignments.get_active_for_item(item.id) is not None:
            raise ValidationError(f"Item {item.id} already has an active assignment")

        attempt = 0
        while True:
            attempt += 1
            pool = await self._staff.get_all()
            try:
                selection = select_assignee(item, pool, self._policy)
            except NoEligibleStaffError as e:
                logger.warning(
                    "Item %s: declined (%s) among %d staff, left for manual assignment",
                    item.id, e.reason, len(pool),
                )
                return AssignmentDecision(
                    item_id=item.id,
                    staff_id=None,
                    score=None,
                    declined_reason=e.reason,
                )

            try:
                await self._staff.adjust_workload(selection.staff, +1)
            except ConcurrencyConflictError:
                if attempt >= self._max_attempts:
                    raise
                logger.warning(
                    "Item %s: staff %s changed concurrently, reselecting (attempt %d/%d)",
                    item.id, selection.staff.id, attempt, self._max_attempts,
                )
                continue

            assignment = await self._assignments.save(
                Assignment(
                    id=None,
                    item_id=item.id,
                    staff_id=selection.staff.id,
                    source=AssignmentSource.AUTO,
                    score=selection.candidate.score,
                    distance_km=selection.candidate.distance_km,
                    reason=selection.reason,
                )
            )
            # Escalation outlives assignment
            if item.status != ItemStatus.ESCALATED:
                item.status = ItemStatus.ASSIGNED
            item.assigned_staff_id = selection.staff.id
            await self._items.update(item)

            logger.info(
                "Item %s → staff %s (score %.2f, %s)",
                item.id, selection.staff.name, selection.candidate.score, selection.reason,
            )
            return AssignmentDecision(
                item_id=item.id,
                staff_id=selection.staff.id,
                score=selection.candidate.score,
                assignment_id=assignment.id,
                distance_km=selection.candidate.distance_km,
                candidates=list(selection.ranked),
            )


class ManualAssignUseCase:
    """Route an item to a named staff member, bypassing scoring."""

    def __init__(
        self,
        staff_repo: StaffRepository,
        item_repo: ItemRepository,
        assignment_repo: AssignmentRepository,
    ):
        self._staff = staff_repo
        self._items = item_repo
        self._assignments = assignment_repo

    async def execute(
        self,
        item_id: int,
        staff_id: int,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> Assignment:
        now = now or datetime.now(timezone.utc)
        item = await self._items.get_by_id(item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")
        staff = await self._staff.get_by_id(staff_id)
        if staff is None:
            raise NotFoundError(f"Staff {staff_id} not found")

        validate_manual_assignment(item, staff)

        active = await self._assignments.get_active_for_item(item_id)
        if active is not None and active.staff_id == staff_id:
            return active

        if active is not None:
            previous = await self._staff.get_by_id(active.staff_id)
            if previous is None:
                raise NotFoundError(f"Staff {active.staff_id} not found")
            await self._staff.transfer_workload(previous, staff)
        else:
            await self._staff.adjust_workload(staff, +1)

        replacement = Assignment(
            id=None,
            item_id=item_id,
            staff_id=staff_id,
            source=AssignmentSource.MANUAL,
            assigned_at=now,
            reason=reason or "Manual assignment",
        )
        if active is not None:
            assignment = await self._assignments.supersede(active.id, replacement)
        else:
            assignment = await self._assignments.save(replacement)

        if item.status != ItemStatus.ESCALATED:
            item.status = ItemStatus.ASSIGNED
        item.assigned_staff_id = staff_id
        await self._items.update(item)

        logger.info(
            "Item %s manually assigned to staff %s%s",
            item_id, staff.name,
            f" (was staff {active.staff_id})" if active is not None else "",
        )
        return assignment


class BatchAssignUseCase:
    """Auto-route every unassigned item."""

    def __init__(self, assign_item: AssignItemUseCase, item_repo: ItemRepository):
        self._assign = assign_item
        self._items = item_repo

    async def execute(self) -> list[AssignmentDecision]:
        items = await self._items.get_unassigned()
        logger.info("Batch assigning %d unassigned items", len(items))

        decisions = []
        for item in items:
            try:
                decision = await self._assign.execute(item)
            except ConcurrencyConflictError:
                logger.warning("Item %s: gave up after repeated conflicts", item.id)
                decision = AssignmentDecision(
                    item_id=item.id,
                    staff_id=None,
                    score=None,
                    declined_reason=CONCURRENCY_CONFLICT,
                )
            decisions.append(decision)

        assigned = sum(1 for d in decisions if d.assigned)
        logger.info("Batch complete: %d/%d assigned", assigned, len(decisions))
        return decisions
