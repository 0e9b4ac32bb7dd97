"""RoutingPolicy — every tunable of the routing core in one immutable object.

The domain never reads settings directly; the application layer builds a
policy from ``casework.config.Settings`` and passes it down.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from casework.domain.errors import ValidationError
from casework.domain.value_objects.enums import Priority

# More urgent priorities map to smaller hour values.
DEFAULT_RESPONSE_HOURS: dict[Priority, float] = {
    Priority.EMERGENCY: 1,
    Priority.CRITICAL: 1,
    Priority.HIGH: 4,
    Priority.MEDIUM: 24,
    Priority.LOW: 72,
}
DEFAULT_ESCALATION_HOURS: dict[Priority, float] = {
    Priority.EMERGENCY: 2,
    Priority.CRITICAL: 2,
    Priority.HIGH: 8,
    Priority.MEDIUM: 48,
    Priority.LOW: 120,
}
DEFAULT_REVIEW_HOURS: dict[Priority, float] = {
    Priority.EMERGENCY: 1,
    Priority.CRITICAL: 1,
    Priority.HIGH: 4,
    Priority.MEDIUM: 12,
    Priority.LOW: 24,
}


@dataclass(frozen=True)
class ScoringWeights:
    distance: float = 0.15
    workload: float = 0.35
    performance: float = 0.30
    specialization: float = 0.20

    def __post_init__(self) -> None:
        parts = (self.distance, self.workload, self.performance, self.specialization)
        if any(w < 0 for w in parts):
            raise ValidationError(f"Scoring weights must be non-negative: {parts}")
        if not math.isclose(sum(parts), 1.0, abs_tol=1e-9):
            raise ValidationError(f"Scoring weights must sum to 1.0, got {sum(parts):.4f}")


@dataclass(frozen=True)
class PerformanceBlend:
    """Weights of the performance_score blend; each input is on a 0..100 scale."""

    compliance: float = 0.5
    satisfaction: float = 0.3
    punctuality: float = 0.2

    def __post_init__(self) -> None:
        parts = (self.compliance, self.satisfaction, self.punctuality)
        if any(w < 0 for w in parts):
            raise ValidationError(f"Blend weights must be non-negative: {parts}")


@dataclass(frozen=True)
class RoutingPolicy:
    response_hours: dict[Priority, float] = field(
        default_factory=lambda: dict(DEFAULT_RESPONSE_HOURS)
    )
    escalation_hours: dict[Priority, float] = field(
        default_factory=lambda: dict(DEFAULT_ESCALATION_HOURS)
    )
    review_hours: dict[Priority, float] = field(
        default_factory=lambda: dict(DEFAULT_REVIEW_HOURS)
    )
    risk_window_hours: float = 24.0

    # Capacity thresholds, in workload percent
    busy_threshold: int = 70
    overloaded_threshold: int = 90
    underloaded_threshold: int = 50

    # Candidate scoring
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    max_distance_km: float = 50.0
    min_performance_score: float = 40.0
    specialization_partial_credit: float = 0.3
    neutral_distance_component: float = 0.5

    rebalance_move_cap: int = 2
    performance_blend: PerformanceBlend = field(default_factory=PerformanceBlend)

    def __post_init__(self) -> None:
        for name in ("response_hours", "escalation_hours", "review_hours"):
            table = getattr(self, name)
            missing = [p.value for p in Priority if p not in table]
            if missing:
                raise ValidationError(f"{name} has no entry for {missing}")
            bad = {p.value: h for p, h in table.items() if h <= 0}
            if bad:
                raise ValidationError(f"{name} must be positive, got {bad}")
        if self.risk_window_hours < 0:
            raise ValidationError("risk_window_hours must be non-negative")
        if not 0 < self.busy_threshold <= self.overloaded_threshold <= 100:
            raise ValidationError(
                "Thresholds must satisfy 0 < busy <= overloaded <= 100, got "
                f"busy={self.busy_threshold} overloaded={self.overloaded_threshold}"
            )
        if not 0 < self.underloaded_threshold <= self.overloaded_threshold:
            raise ValidationError("underloaded_threshold must be in (0, overloaded]")
        if self.max_distance_km <= 0:
            raise ValidationError("max_distance_km must be positive")
        if not 0 <= self.specialization_partial_credit <= 1:
            raise ValidationError("specialization_partial_credit must be in [0, 1]")
        if not 0 <= self.neutral_distance_component <= 1:
            raise ValidationError("neutral_distance_component must be in [0, 1]")
        if self.rebalance_move_cap < 0:
            raise ValidationError("rebalance_move_cap must be non-negative")


DEFAULT_POLICY = RoutingPolicy()
