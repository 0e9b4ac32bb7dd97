"""PerformanceAggregator — staff metrics from historical work."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.errors import ValidationError
from casework.domain.value_objects.rounding import round_half_up
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy

# Ratings are on a 1..5 scale; this maps them onto 0..100.
SATISFACTION_SCALE = 20


@dataclass(frozen=True)
class PerformanceMetrics:
    staff_id: int
    resolution_time_hours: float
    sla_compliance: int
    satisfaction_score: float
    resolved_count: int
    on_time_count: int


def resolution_time_hours(items: Iterable[AssignableItem]) -> float:
    """Mean submit-to-resolve time in hours, one decimal; 0 for no items."""
    durations = [
        max(0.0, (i.resolved_at - i.submitted_at).total_seconds()) / 3600
        for i in items
        if i.submitted_at is not None and i.resolved_at is not None
    ]
    if not durations:
        return 0.0
    return round_half_up(sum(durations) / len(durations), 1)


def sla_compliance(total_resolved: int, on_time_count: int) -> int:
    """Percent of resolved work closed on time; 100 when nothing is resolved."""
    if total_resolved < 0 or on_time_count < 0:
        raise ValidationError("Counts must be non-negative")
    if on_time_count > total_resolved:
        raise ValidationError(
            f"on_time_count ({on_time_count}) exceeds total_resolved ({total_resolved})"
        )
    if total_resolved == 0:
        return 100
    return int(round_half_up(on_time_count / total_resolved * 100))


def satisfaction_score(ratings: Iterable[int | float | None]) -> float:
    rated = [r for r in ratings if r is not None and r > 0]
    if not rated:
        return 0.0
    return round_half_up(sum(rated) / len(rated), 1)


def overdue_rate(open_items: Iterable[AssignableItem], now: datetime) -> float:
    """Percent of open items already past their response deadline."""
    open_items = [i for i in open_items if i.is_open()]
    if not open_items:
        return 0.0
    overdue = sum(1 for i in open_items if now > i.response_due_at)
    return round_half_up(overdue / len(open_items) * 100, 1)


def performance_score(
    compliance: float,
    satisfaction: float,
    overdue_pct: float,
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> float:
    """Blend the metrics into the 0..100 score used by candidate scoring.

    Non-decreasing in compliance and satisfaction, non-increasing in the
    overdue rate.
    """
    blend = policy.performance_blend
    raw = (
        blend.compliance * compliance
        + blend.satisfaction * satisfaction * SATISFACTION_SCALE
        + blend.punctuality * (100 - overdue_pct)
    )
    return round_half_up(min(100.0, max(0.0, raw)), 1)


def performance_metrics(
    staff_id: int,
    resolved_items: list[AssignableItem],
    ratings: Iterable[int | float | None],
) -> PerformanceMetrics:
    resolved = [i for i in resolved_items if i.resolved_at is not None]
    on_time = sum(1 for i in resolved if i.resolved_on_time())
    return PerformanceMetrics(
        staff_id=staff_id,
        resolution_time_hours=resolution_time_hours(resolved),
        sla_compliance=sla_compliance(len(resolved), on_time),
        satisfaction_score=satisfaction_score(ratings),
        resolved_count=len(resolved),
        on_time_count=on_time,
    )
