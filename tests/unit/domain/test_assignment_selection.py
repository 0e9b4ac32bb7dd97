"""Tests for the assignment selector."""

import pytest

from casework.domain.errors import NoEligibleStaffError, ValidationError
from casework.domain.policies.assignment_selection import (
    rank_candidates,
    select_assignee,
    validate_manual_assignment,
)
from casework.domain.value_objects.enums import (
    AvailabilityStatus,
    Designation,
    ItemStatus,
    Priority,
)
from casework.domain.value_objects.geo_point import GeoPoint
from casework.domain.value_objects.routing_policy import RoutingPolicy, ScoringWeights

CATEGORY_X = 7

# Workload and distance do not contribute, so ties are easy to build
FLAT = RoutingPolicy(
    weights=ScoringWeights(distance=0.0, workload=0.0, performance=0.5, specialization=0.5)
)


def test_headroom_and_performance_win(make_item, make_staff):
    """A is nearly full and weaker, B has room and a better record."""
    a = make_staff(id=1, capacity=10, workload=9, performance_score=80, specializations={CATEGORY_X})
    b = make_staff(id=2, capacity=10, workload=2, performance_score=90, specializations={CATEGORY_X})
    selection = select_assignee(make_item(category_id=CATEGORY_X), [a, b])
    assert selection.staff.id == 2


def test_headroom_and_performance_win_when_both_eligible(make_item, make_staff):
    a = make_staff(id=1, workload=6, performance_score=80, specializations={CATEGORY_X})
    b = make_staff(id=2, workload=2, performance_score=90, specializations={CATEGORY_X})
    selection = select_assignee(make_item(category_id=CATEGORY_X), [a, b])
    assert selection.staff.id == 2
    assert [c.staff_id for c in selection.ranked] == [2, 1]
    assert "eligible" in selection.reason


def test_never_selects_off_duty_staff(make_item, make_staff):
    star = make_staff(id=1, performance_score=100, availability_status=AvailabilityStatus.OFF_DUTY)
    other = make_staff(id=2, workload=5, performance_score=50)
    assert select_assignee(make_item(), [star, other]).staff.id == 2


def test_never_selects_junior_for_critical(make_item, make_staff):
    junior = make_staff(id=1, designation=Designation.JUNIOR, performance_score=100)
    senior = make_staff(id=2, designation=Designation.SENIOR, workload=6, performance_score=45)
    selection = select_assignee(make_item(priority=Priority.CRITICAL), [junior, senior])
    assert selection.staff.id == 2


def test_tie_broken_by_lower_workload(make_item, make_staff):
    a = make_staff(id=1, workload=3)
    b = make_staff(id=2, workload=1)
    assert select_assignee(make_item(), [a, b], FLAT).staff.id == 2


def test_tie_broken_by_distance_unknown_last(make_item, make_staff):
    item = make_item(location=GeoPoint(latitude=43.0, longitude=76.0))
    unknown = make_staff(id=1, location=None)
    farther = make_staff(id=2, location=GeoPoint(latitude=43.0, longitude=76.2))
    nearer = make_staff(id=3, location=GeoPoint(latitude=43.0, longitude=76.05))
    ranked = rank_candidates(item, [unknown, farther, nearer], FLAT)
    assert [staff.id for _, staff in ranked] == [3, 2, 1]


def test_tie_broken_by_staff_id(make_item, make_staff):
    pool = [make_staff(id=5), make_staff(id=3), make_staff(id=4)]
    assert select_assignee(make_item(), pool, FLAT).staff.id == 3


def test_no_eligible_staff_declines(make_item, make_staff):
    pool = [
        make_staff(id=1, availability_status=AvailabilityStatus.ON_LEAVE),
        make_staff(id=2, workload=10),
    ]
    with pytest.raises(NoEligibleStaffError) as exc:
        select_assignee(make_item(id=42), pool)
    assert exc.value.item_id == 42
    assert exc.value.reason == "no_eligible_staff"


def test_empty_pool_declines(make_item):
    with pytest.raises(NoEligibleStaffError):
        select_assignee(make_item(), [])


def test_selection_is_deterministic(make_item, make_staff):
    pool = [make_staff(id=i, workload=i % 4) for i in range(1, 8)]
    first = select_assignee(make_item(), pool)
    second = select_assignee(make_item(), list(reversed(pool)))
    assert first.staff.id == second.staff.id


# ─── manual assignment ───────────────────────────────────────────────


def test_manual_rejects_junior_on_emergency(make_item, make_staff):
    with pytest.raises(ValidationError):
        validate_manual_assignment(
            make_item(priority=Priority.EMERGENCY), make_staff(designation=Designation.TRAINEE)
        )


def test_manual_rejects_terminal_item(make_item, make_staff, now):
    item = make_item(status=ItemStatus.CLOSED, resolved_at=now)
    with pytest.raises(ValidationError):
        validate_manual_assignment(item, make_staff())


def test_manual_allows_overloaded_staff(make_item, make_staff):
    validate_manual_assignment(make_item(), make_staff(workload=10))
