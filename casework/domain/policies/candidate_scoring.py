"""CandidateScoring — hard eligibility plus a weighted suitability score."""

from __future__ import annotations

from dataclasses import dataclass

from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.entities.staff_member import StaffMember
from casework.domain.policies.capacity import (
    accepts_auto_assignment,
    classify_load,
    workload_percentage,
)
from casework.domain.value_objects.enums import LoadState
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy

# Ineligibility reasons, in evaluation order
UNAVAILABLE = "unavailable"
OVERLOADED = "overloaded"
JUNIOR_ON_URGENT = "junior_on_urgent_item"
TOO_FAR = "too_far"
LOW_PERFORMANCE = "low_performance"


@dataclass(frozen=True)
class ScoredCandidate:
    """Transient scoring result for one staff member; never persisted."""

    staff_id: int
    score: float
    distance_km: float | None
    capacity_percentage: float
    eligible: bool
    ineligible_reason: str | None = None


def item_distance_km(item: AssignableItem, staff: StaffMember) -> float | None:
    """Straight-line distance, or None when either side has no location."""
    if item.location is None or staff.location is None:
        return None
    return round(item.location.haversine_km(staff.location), 2)


def eligibility_failure(
    item: AssignableItem,
    staff: StaffMember,
    distance_km: float | None,
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> str | None:
    """Return the first hard constraint the staff member fails, or None.

    Business rules, evaluated in order:
      1. availability must be available or busy;
      2. the staff member must not be overloaded;
      3. critical / emergency items never go to junior or trainee staff;
      4. when both locations are known, distance must be within the limit;
      5. performance_score must reach the configured minimum.
    """
    if not accepts_auto_assignment(staff):
        return f"{UNAVAILABLE}:{staff.availability_status.value}"

    if classify_load(staff, policy) == LoadState.OVERLOADED:
        return OVERLOADED

    if item.priority.is_urgent() and staff.is_junior():
        return JUNIOR_ON_URGENT

    if distance_km is not None and distance_km > policy.max_distance_km:
        return TOO_FAR

    if staff.performance_score < policy.min_performance_score:
        return LOW_PERFORMANCE

    return None


def specialization_component(
    item: AssignableItem,
    staff: StaffMember,
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> float:
    if staff.specializes_in(item.category_id):
        return 1.0
    if item.department_id is not None and item.department_id == staff.department_id:
        return policy.specialization_partial_credit
    return 0.0


def distance_component(distance_km: float | None, policy: RoutingPolicy = DEFAULT_POLICY) -> float:
    if distance_km is None:
        return policy.neutral_distance_component
    return 1.0 - min(distance_km, policy.max_distance_km) / policy.max_distance_km


def score_candidate(
    item: AssignableItem,
    staff: StaffMember,
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> ScoredCandidate:
    """Score one staff member for one item.

    Ineligible staff get ``score=0`` and the reason they were excluded.
    Eligible staff get a weighted sum on a 0..100 scale:

        100 * (w_d*distance + w_w*headroom + w_p*performance + w_s*specialization)
    """
    distance_km = item_distance_km(item, staff)
    pct = workload_percentage(staff)

    reason = eligibility_failure(item, staff, distance_km, policy)
    if reason is not None:
        return ScoredCandidate(
            staff_id=staff.id,
            score=0.0,
            distance_km=distance_km,
            capacity_percentage=pct,
            eligible=False,
            ineligible_reason=reason,
        )

    w = policy.weights
    raw = (
        w.distance * distance_component(distance_km, policy)
        + w.workload * (1.0 - pct / 100)
        + w.performance * (staff.performance_score / 100)
        + w.specialization * specialization_component(item, staff, policy)
    )
    return ScoredCandidate(
        staff_id=staff.id,
        score=round(100 * raw, 2),
        distance_km=distance_km,
        capacity_percentage=pct,
        eligible=True,
    )


def score_pool(
    item: AssignableItem,
    staff_pool: list[StaffMember],
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> list[ScoredCandidate]:
    return [score_candidate(item, staff, policy) for staff in staff_pool]
