"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest

from casework.adapters.memory.repositories import (
    InMemoryAssignmentRepository,
    InMemoryItemRepository,
    InMemoryStaffRepository,
    InMemoryStore,
)
from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.entities.staff_member import StaffMember
from casework.domain.policies.sla_clock import compute_deadlines
from casework.domain.value_objects.enums import ItemKind, Priority

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_staff():
    """Factory for staff members; capacity 10 and empty workload by default."""

    def _make(id=1, capacity=10, workload=0, **kwargs) -> StaffMember:
        return StaffMember(
            id=id,
            name=kwargs.pop("name", f"Staff {id}"),
            max_concurrent_capacity=capacity,
            current_workload=workload,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_item():
    """Factory for items with deadlines stamped from the default policy."""

    def _make(id=1, priority=Priority.MEDIUM, category_id=7, submitted_at=NOW, **kwargs) -> AssignableItem:
        deadlines = compute_deadlines(priority, submitted_at)
        return AssignableItem(
            id=id,
            kind=kwargs.pop("kind", ItemKind.COMPLAINT),
            priority=priority,
            category_id=category_id,
            submitted_at=submitted_at,
            response_due_at=deadlines.response_due_at,
            escalation_due_at=deadlines.escalation_due_at,
            review_due_at=deadlines.review_due_at,
            **kwargs,
        )

    return _make


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def staff_repo(store):
    return InMemoryStaffRepository(store)


@pytest.fixture
def item_repo(store):
    return InMemoryItemRepository(store)


@pytest.fixture
def assignment_repo(store):
    return InMemoryAssignmentRepository(store)
