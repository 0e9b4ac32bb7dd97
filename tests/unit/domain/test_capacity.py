"""Tests for the capacity model."""

import pytest

from casework.domain.policies.capacity import (
    accepts_auto_assignment,
    classify_load,
    is_underloaded,
    load_state,
    summarize_team,
    workload_percentage,
)
from casework.domain.value_objects.enums import AvailabilityStatus, LoadState
from casework.domain.value_objects.routing_policy import RoutingPolicy


@pytest.mark.parametrize(
    "workload, expected",
    [(0, LoadState.AVAILABLE), (6, LoadState.AVAILABLE), (7, LoadState.BUSY),
     (8, LoadState.BUSY), (9, LoadState.OVERLOADED), (10, LoadState.OVERLOADED)],
)
def test_classify_thresholds(make_staff, workload, expected):
    assert classify_load(make_staff(capacity=10, workload=workload)) == expected


def test_percentage_rounds_half_up(make_staff):
    # 1/8 = 12.5%
    assert workload_percentage(make_staff(capacity=8, workload=1)) == 13


def test_percentage_capped_at_100(make_staff):
    assert workload_percentage(make_staff(capacity=4, workload=7)) == 100


def test_percentage_monotone_in_workload(make_staff):
    values = [workload_percentage(make_staff(capacity=7, workload=w)) for w in range(0, 10)]
    assert values == sorted(values)
    assert all(0 <= v <= 100 for v in values)


def test_thresholds_are_configurable(make_staff):
    policy = RoutingPolicy(busy_threshold=50, overloaded_threshold=60, underloaded_threshold=30)
    assert classify_load(make_staff(workload=5), policy) == LoadState.BUSY
    assert classify_load(make_staff(workload=6), policy) == LoadState.OVERLOADED


@pytest.mark.parametrize(
    "status, accepts",
    [(AvailabilityStatus.AVAILABLE, True), (AvailabilityStatus.BUSY, True),
     (AvailabilityStatus.ON_BREAK, False), (AvailabilityStatus.OFF_DUTY, False),
     (AvailabilityStatus.ON_LEAVE, False)],
)
def test_availability_gates_auto_assignment(make_staff, status, accepts):
    staff = make_staff(availability_status=status)
    assert accepts_auto_assignment(staff) is accepts
    assert (load_state(staff) == LoadState.OFFLINE) is not accepts


def test_underloaded_requires_available_status(make_staff):
    assert is_underloaded(make_staff(workload=4))
    assert not is_underloaded(make_staff(workload=5))
    assert not is_underloaded(make_staff(workload=1, availability_status=AvailabilityStatus.BUSY))


def test_summarize_team(make_staff):
    team = [
        make_staff(id=1, workload=2),
        make_staff(id=2, workload=7),
        make_staff(id=3, workload=9),
        make_staff(id=4, workload=0, availability_status=AvailabilityStatus.ON_LEAVE),
    ]
    summary = summarize_team(team)
    assert summary.staff_count == 4
    assert summary.by_state == {
        LoadState.AVAILABLE: 1,
        LoadState.BUSY: 1,
        LoadState.OVERLOADED: 1,
        LoadState.OFFLINE: 1,
    }
    assert summary.average_percentage == 45.0
    assert summary.total_open == 18
    assert summary.total_capacity == 40


def test_summarize_empty_team():
    summary = summarize_team([])
    assert summary.staff_count == 0
    assert summary.average_percentage == 0.0
