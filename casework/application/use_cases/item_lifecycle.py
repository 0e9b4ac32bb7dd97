"""Item lifecycle use cases — start work, close, escalate."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from casework.application.ports.assignment_repo import AssignmentRepository
from casework.application.ports.item_repo import ItemRepository
from casework.application.ports.staff_repo import StaffRepository
from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.errors import NotFoundError, ValidationError
from casework.domain.policies.sla_clock import needs_escalation
from casework.domain.value_objects.enums import ItemStatus

logger = logging.getLogger(__name__)


async def _load_item(items: ItemRepository, item_id: int) -> AssignableItem:
    item = await items.get_by_id(item_id)
    if item is None:
        raise NotFoundError(f"Item {item_id} not found")
    return item


class StartWorkUseCase:
    """Mark an assigned item as in progress; it then no longer moves on rebalance."""

    def __init__(self, item_repo: ItemRepository):
        self._items = item_repo

    async def execute(self, item_id: int) -> AssignableItem:
        item = await _load_item(self._items, item_id)
        if item.status == ItemStatus.IN_PROGRESS:
            return item
        if item.status not in (ItemStatus.ASSIGNED, ItemStatus.ESCALATED):
            raise ValidationError(
                f"Item {item_id} cannot start from status {item.status.value}"
            )
        item.status = ItemStatus.IN_PROGRESS
        return await self._items.update(item)


class CloseItemUseCase:
    """Resolve or close an item, ending its assignment and freeing capacity.

    Closing an already terminal item is a no-op apart from recording a
    late rating, so retries never decrement a workload twice.
    """

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
        status: ItemStatus = ItemStatus.RESOLVED,
        resolved_at: datetime | None = None,
        rating: int | None = None,
    ) -> AssignableItem:
        if not status.is_terminal():
            raise ValidationError(f"{status.value} is not a terminal status")
        if rating is not None and not 0 <= rating <= 5:
            raise ValidationError(f"Rating must be within 0..5, got {rating}")
        if resolved_at is not None and resolved_at.tzinfo is None:
            raise ValidationError("resolved_at must carry a timezone offset")

        item = await _load_item(self._items, item_id)
        if item.is_terminal():
            if rating is not None and item.rating != rating:
                item.rating = rating
                await self._items.update(item)
            return item

        resolved_at = resolved_at or datetime.now(timezone.utc)
        if resolved_at < item.submitted_at:
            raise ValidationError(f"Item {item_id}: resolved_at precedes submitted_at")

        active = await self._assignments.get_active_for_item(item_id)
        if active is not None:
            staff = await self._staff.get_by_id(active.staff_id)
            if staff is None:
                raise NotFoundError(f"Staff {active.staff_id} not found")
            await self._staff.adjust_workload(staff, -1)
            await self._assignments.close(active.id, resolved_at)

        item.status = status
        item.resolved_at = resolved_at
        if rating is not None:
            item.rating = rating
        await self._items.update(item)

        logger.info(
            "Item %s %s at %s%s",
            item_id, status.value, resolved_at.isoformat(),
            "" if item.resolved_on_time() else " (SLA breached)",
        )
        return item


class EscalateOverdueUseCase:
    """Flag every open item that has passed its escalation deadline."""

    def __init__(self, item_repo: ItemRepository):
        self._items = item_repo

    async def execute(self, now: datetime | None = None) -> list[AssignableItem]:
        now = now or datetime.now(timezone.utc)
        escalated = []
        for item in await self._items.get_open():
            if not needs_escalation(item, now):
                continue
            item.status = ItemStatus.ESCALATED
            escalated.append(await self._items.update(item))

        if escalated:
            logger.warning(
                "Escalated %d items past their escalation deadline: %s",
                len(escalated), [i.id for i in escalated],
            )
        return escalated
