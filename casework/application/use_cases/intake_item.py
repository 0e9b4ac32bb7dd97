"""IntakeItemUseCase — stamp SLA deadlines on a new item and route it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from casework.application.ports.item_repo import ItemRepository
from casework.application.use_cases.assign_item import AssignItemUseCase, AssignmentDecision
from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.errors import ValidationError
from casework.domain.policies.sla_clock import compute_deadlines, parse_priority
from casework.domain.value_objects.enums import ItemKind, Priority
from casework.domain.value_objects.geo_point import GeoPoint
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy

logger = logging.getLogger(__name__)


@dataclass
class ItemSubmission:
    """Raw fields of a complaint or task as it arrives from the portal."""

    kind: ItemKind
    priority: Priority | str
    category_id: int
    title: str = ""
    department_id: int | None = None
    location: GeoPoint | None = None
    submitted_at: datetime | None = None


@dataclass
class IntakeResult:
    item: AssignableItem
    decision: AssignmentDecision | None


class IntakeItemUseCase:
    """Pipeline:

    1. Validate priority and stamp response / escalation / review deadlines
    2. Persist the item as unassigned
    3. Auto-route it (optional)
    """

    def __init__(
        self,
        item_repo: ItemRepository,
        assign_item: AssignItemUseCase,
        policy: RoutingPolicy = DEFAULT_POLICY,
    ):
        self._items = item_repo
        self._assign = assign_item
        self._policy = policy

    async def execute(self, submission: ItemSubmission, auto_assign: bool = True) -> IntakeResult:
        priority = parse_priority(submission.priority)
        try:
            kind = ItemKind(submission.kind)
        except ValueError:
            raise ValidationError(f"Unknown item kind: {submission.kind!r}") from None
        if submission.submitted_at is not None and submission.submitted_at.tzinfo is None:
            raise ValidationError("submitted_at must carry a timezone offset")
        submitted_at = submission.submitted_at or datetime.now(timezone.utc)
        deadlines = compute_deadlines(priority, submitted_at, self._policy)

        item = await self._items.save(
            AssignableItem(
                id=None,
                kind=kind,
                priority=priority,
                category_id=submission.category_id,
                submitted_at=submitted_at,
                response_due_at=deadlines.response_due_at,
                escalation_due_at=deadlines.escalation_due_at,
                review_due_at=deadlines.review_due_at,
                title=submission.title,
                department_id=submission.department_id,
                location=submission.location,
            )
        )
        logger.info(
            "Item %s received: %s/%s, respond by %s",
            item.id, item.kind.value, item.priority.value,
            item.response_due_at.isoformat(),
        )

        if not auto_assign:
            return IntakeResult(item=item, decision=None)

        decision = await self._assign.execute(item)
        return IntakeResult(item=item, decision=decision)
