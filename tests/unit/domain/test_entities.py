"""Tests for domain entities."""

from datetime import timedelta

import pytest

from casework.domain.entities.assignment import Assignment
from casework.domain.errors import ValidationError
from casework.domain.value_objects.enums import (
    AssignmentSource,
    Designation,
    ItemStatus,
    Priority,
)


def test_staff_member_creation(make_staff):
    s = make_staff(id=1, designation=Designation.SENIOR, specializations={3, 7})
    assert s.specializes_in(7)
    assert not s.specializes_in(8)
    assert not s.is_junior()


@pytest.mark.parametrize("designation", [Designation.JUNIOR, Designation.TRAINEE])
def test_junior_designations(make_staff, designation):
    assert make_staff(designation=designation).is_junior()


def test_staff_has_room(make_staff):
    assert make_staff(capacity=3, workload=2).has_room()
    assert not make_staff(capacity=3, workload=3).has_room()


def test_staff_capacity_must_be_positive(make_staff):
    with pytest.raises(ValidationError):
        make_staff(capacity=0)


def test_staff_workload_must_be_non_negative(make_staff):
    with pytest.raises(ValidationError):
        make_staff(workload=-1)


def test_staff_performance_in_range(make_staff):
    with pytest.raises(ValidationError):
        make_staff(performance_score=101)


def test_item_defaults(make_item):
    item = make_item(priority=Priority.HIGH)
    assert item.status == ItemStatus.UNASSIGNED
    assert item.assigned_staff_id is None
    assert item.is_open()
    assert item.earliest_deadline() == item.response_due_at


def test_item_resolved_on_time(make_item):
    item = make_item(priority=Priority.HIGH, status=ItemStatus.RESOLVED)
    item.resolved_at = item.response_due_at
    assert item.resolved_on_time()
    item.resolved_at = item.response_due_at + timedelta(seconds=1)
    assert not item.resolved_on_time()


def test_assignment_active_until_resolved(now):
    a = Assignment(id=1, item_id=1, staff_id=1, source=AssignmentSource.AUTO)
    assert a.is_active
    assert a.assigned_at.tzinfo is not None
    a.resolved_at = now
    assert not a.is_active
