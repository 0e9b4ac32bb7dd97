"""AssignmentSelection — pick the best eligible staff member for an item."""

from __future__ import annotations

import math
from dataclasses import dataclass

from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.entities.staff_member import StaffMember
from casework.domain.errors import NoEligibleStaffError, ValidationError
from casework.domain.policies.candidate_scoring import ScoredCandidate, score_candidate
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy


@dataclass(frozen=True)
class Selection:
    """Result of the selection policy."""

    staff: StaffMember
    candidate: ScoredCandidate
    ranked: tuple[ScoredCandidate, ...]

    @property
    def reason(self) -> str:
        c = self.candidate
        distance = "n/a" if c.distance_km is None else f"{c.distance_km:.1f} km"
        return (
            f"Best score {c.score:.2f} of {len(self.ranked)} eligible "
            f"(load {c.capacity_percentage:.0f}%, distance {distance})"
        )


def _rank_key(pair: tuple[ScoredCandidate, StaffMember]) -> tuple:
    candidate, staff = pair
    distance = math.inf if candidate.distance_km is None else candidate.distance_km
    return (-candidate.score, staff.current_workload, distance, staff.id)


def rank_candidates(
    item: AssignableItem,
    staff_pool: list[StaffMember],
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> list[tuple[ScoredCandidate, StaffMember]]:
    """Eligible candidates, best first.

    Tie-breaks: higher score, then lower current_workload, then lower
    distance (unknown distance ranks last), then lower staff id.
    """
    scored = [(score_candidate(item, staff, policy), staff) for staff in staff_pool]
    eligible = [pair for pair in scored if pair[0].eligible]
    return sorted(eligible, key=_rank_key)


def select_assignee(
    item: AssignableItem,
    staff_pool: list[StaffMember],
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> Selection:
    """Pick the assignment target for an item.

    Raises:
        NoEligibleStaffError: if nobody in the pool passes the hard constraints.
    """
    ranked = rank_candidates(item, staff_pool, policy)
    if not ranked:
        raise NoEligibleStaffError(item.id)

    best_candidate, best_staff = ranked[0]
    return Selection(
        staff=best_staff,
        candidate=best_candidate,
        ranked=tuple(candidate for candidate, _ in ranked),
    )


def validate_manual_assignment(item: AssignableItem, staff: StaffMember) -> None:
    """Manual routing skips scoring but never the urgent/junior constraint."""
    if item.is_terminal():
        raise ValidationError(f"Item {item.id} is already {item.status.value}")
    if item.priority.is_urgent() and staff.is_junior():
        raise ValidationError(
            f"{item.priority.value.capitalize()} item {item.id} cannot be assigned "
            f"to {staff.designation.value} staff {staff.id}"
        )
