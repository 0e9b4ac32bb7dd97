"""CapacityModel — workload percentage and load classification of staff."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from casework.domain.entities.staff_member import StaffMember
from casework.domain.value_objects.enums import AvailabilityStatus, LoadState
from casework.domain.value_objects.rounding import round_half_up
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy

ACCEPTING_STATUSES = frozenset({AvailabilityStatus.AVAILABLE, AvailabilityStatus.BUSY})


def workload_percentage(staff: StaffMember) -> int:
    """Open assignments over capacity, as an integer percent capped at 100."""
    raw = staff.current_workload / staff.max_concurrent_capacity * 100
    return min(100, int(round_half_up(raw)))


def classify_load(staff: StaffMember, policy: RoutingPolicy = DEFAULT_POLICY) -> LoadState:
    pct = workload_percentage(staff)
    if pct >= policy.overloaded_threshold:
        return LoadState.OVERLOADED
    if pct >= policy.busy_threshold:
        return LoadState.BUSY
    return LoadState.AVAILABLE


def accepts_auto_assignment(staff: StaffMember) -> bool:
    """On-break, off-duty and on-leave staff never receive auto-assigned work."""
    return staff.availability_status in ACCEPTING_STATUSES


def load_state(staff: StaffMember, policy: RoutingPolicy = DEFAULT_POLICY) -> LoadState:
    if not accepts_auto_assignment(staff):
        return LoadState.OFFLINE
    return classify_load(staff, policy)


def is_underloaded(staff: StaffMember, policy: RoutingPolicy = DEFAULT_POLICY) -> bool:
    return (
        staff.availability_status == AvailabilityStatus.AVAILABLE
        and workload_percentage(staff) < policy.underloaded_threshold
    )


@dataclass(frozen=True)
class TeamWorkload:
    """Aggregate view of a team, as shown on the supervisor dashboard."""

    staff_count: int
    by_state: dict[LoadState, int]
    average_percentage: float
    total_open: int
    total_capacity: int


def summarize_team(
    staff_pool: list[StaffMember],
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> TeamWorkload:
    counts = Counter(load_state(s, policy) for s in staff_pool)
    by_state = {state: counts.get(state, 0) for state in LoadState}

    average = 0.0
    if staff_pool:
        average = round_half_up(
            sum(workload_percentage(s) for s in staff_pool) / len(staff_pool), 1
        )

    return TeamWorkload(
        staff_count=len(staff_pool),
        by_state=by_state,
        average_percentage=average,
        total_open=sum(s.current_workload for s in staff_pool),
        total_capacity=sum(s.max_concurrent_capacity for s in staff_pool),
    )
