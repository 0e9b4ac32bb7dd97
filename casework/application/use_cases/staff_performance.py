"""Staff performance use cases — reporting and score recomputation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from casework.application.ports.item_repo import ItemRepository
from casework.application.ports.staff_repo import StaffRepository
from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.errors import NotFoundError
from casework.domain.policies.performance import (
    PerformanceMetrics,
    overdue_rate,
    performance_metrics,
    performance_score,
)
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy

logger = logging.getLogger(__name__)


def _split(items: list[AssignableItem]) -> tuple[list[AssignableItem], list[AssignableItem]]:
    resolved = [i for i in items if i.is_terminal() and i.resolved_at is not None]
    open_items = [i for i in items if i.is_open()]
    return resolved, open_items


class StaffPerformanceUseCase:
    """Resolution time, SLA compliance and satisfaction for one staff member."""

    def __init__(self, staff_repo: StaffRepository, item_repo: ItemRepository):
        self._staff = staff_repo
        self._items = item_repo

    async def execute(self, staff_id: int) -> PerformanceMetrics:
        if await self._staff.get_by_id(staff_id) is None:
            raise NotFoundError(f"Staff {staff_id} not found")
        resolved, _ = _split(await self._items.get_by_staff(staff_id))
        return performance_metrics(staff_id, resolved, [i.rating for i in resolved])


class RecomputePerformanceUseCase:
    """Refresh every staff member's performance_score from their history.

    Runs on a schedule; the new scores feed candidate scoring.
    """

    def __init__(
        self,
        staff_repo: StaffRepository,
        item_repo: ItemRepository,
        policy: RoutingPolicy = DEFAULT_POLICY,
    ):
        self._staff = staff_repo
        self._items = item_repo
        self._policy = policy

    async def execute(self, now: datetime | None = None) -> dict[int, float]:
        now = now or datetime.now(timezone.utc)
        scores: dict[int, float] = {}

        for staff in await self._staff.get_all():
            resolved, open_items = _split(await self._items.get_by_staff(staff.id))
            metrics = performance_metrics(staff.id, resolved, [i.rating for i in resolved])
            score = performance_score(
                metrics.sla_compliance,
                metrics.satisfaction_score,
                overdue_rate(open_items, now),
                self._policy,
            )
            await self._staff.update_performance(staff.id, score)
            scores[staff.id] = score
            logger.debug(
                "Staff %s: compliance=%d%%, satisfaction=%.1f → score %.1f",
                staff.id, metrics.sla_compliance, metrics.satisfaction_score, score,
            )

        logger.info("Recomputed performance for %d staff", len(scores))
        return scores
