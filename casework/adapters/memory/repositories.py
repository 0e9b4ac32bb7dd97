"""In-memory repository implementations over one shared store.

Used when the core is embedded without a database, and by the test suite.
Records are copied on the way in and out, so a caller's snapshot never
aliases stored state; workload writes take a per-staff ``asyncio.Lock`` and
check the snapshot version exactly like the SQL adapter.
"""

from __future__ import annotations

import asyncio
import copy
import itertools
from collections import defaultdict
from datetime import datetime

from casework.application.ports.assignment_repo import AssignmentRepository
from casework.application.ports.item_repo import ItemRepository
from casework.application.ports.staff_repo import StaffRepository
from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.entities.assignment import Assignment
from casework.domain.entities.staff_member import StaffMember
from casework.domain.errors import ConcurrencyConflictError, NotFoundError, ValidationError


class InMemoryStore:
    def __init__(self):
        self.staff: dict[int, StaffMember] = {}
        self.items: dict[int, AssignableItem] = {}
        self.assignments: dict[int, Assignment] = {}
        self._sequences: dict[str, itertools.count] = defaultdict(lambda: itertools.count(1))
        self._locks: dict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    def next_id(self, table: str) -> int:
        return next(self._sequences[table])

    def staff_lock(self, staff_id: int) -> asyncio.Lock:
        return self._locks[staff_id]


class InMemoryStaffRepository(StaffRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, staff: StaffMember) -> StaffMember:
        if staff.id is None:
            staff.id = self._store.next_id("staff")
        self._store.staff[staff.id] = copy.deepcopy(staff)
        return staff

    async def get_by_id(self, staff_id: int) -> StaffMember | None:
        stored = self._store.staff.get(staff_id)
        return copy.deepcopy(stored) if stored else None

    async def get_all(self) -> list[StaffMember]:
        return [copy.deepcopy(s) for _, s in sorted(self._store.staff.items())]

    def _checked(self, staff: StaffMember, delta: int) -> StaffMember:
        stored = self._store.staff.get(staff.id)
        if stored is None:
            raise NotFoundError(f"Staff {staff.id} not found")
        if stored.version != staff.version:
            raise ConcurrencyConflictError(staff.id, staff.version, stored.version)
        if stored.current_workload + delta < 0:
            raise ValidationError(
                f"Staff {staff.id}: workload would become negative "
                f"({stored.current_workload} {delta:+d})"
            )
        return stored

    @staticmethod
    def _apply(stored: StaffMember, delta: int) -> StaffMember:
        stored.current_workload += delta
        stored.version += 1
        return copy.deepcopy(stored)

    async def adjust_workload(self, staff: StaffMember, delta: int) -> StaffMember:
        async with self._store.staff_lock(staff.id):
            stored = self._checked(staff, delta)
            return self._apply(stored, delta)

    async def transfer_workload(
        self, source: StaffMember, target: StaffMember
    ) -> tuple[StaffMember, StaffMember]:
        if source.id == target.id:
            raise ValidationError(f"Staff {source.id}: cannot transfer workload to itself")
        first, second = sorted((source.id, target.id))
        async with self._store.staff_lock(first), self._store.staff_lock(second):
            # Validate both before touching either
            stored_source = self._checked(source, -1)
            stored_target = self._checked(target, +1)
            return self._apply(stored_source, -1), self._apply(stored_target, +1)

    async def update_performance(self, staff_id: int, score: float) -> None:
        stored = self._store.staff.get(staff_id)
        if stored is None:
            raise NotFoundError(f"Staff {staff_id} not found")
        stored.performance_score = score


class InMemoryItemRepository(ItemRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, item: AssignableItem) -> AssignableItem:
        if item.id is None:
            item.id = self._store.next_id("items")
        self._store.items[item.id] = copy.deepcopy(item)
        return item

    async def get_by_id(self, item_id: int) -> AssignableItem | None:
        stored = self._store.items.get(item_id)
        return copy.deepcopy(stored) if stored else None

    async def get_by_ids(self, item_ids: list[int]) -> dict[int, AssignableItem]:
        return {
            i: copy.deepcopy(self._store.items[i])
            for i in item_ids
            if i in self._store.items
        }

    async def get_unassigned(self) -> list[AssignableItem]:
        items = [
            i for i in self._store.items.values()
            if i.assigned_staff_id is None and i.is_open()
        ]
        return [copy.deepcopy(i) for i in sorted(items, key=lambda i: (i.submitted_at, i.id))]

    async def get_open(self) -> list[AssignableItem]:
        return [
            copy.deepcopy(i)
            for _, i in sorted(self._store.items.items())
            if i.is_open()
        ]

    async def get_by_staff(self, staff_id: int) -> list[AssignableItem]:
        return [
            copy.deepcopy(i)
            for _, i in sorted(self._store.items.items())
            if i.assigned_staff_id == staff_id
        ]

    async def update(self, item: AssignableItem) -> AssignableItem:
        stored = self._store.items.get(item.id)
        if stored is None:
            raise NotFoundError(f"Item {item.id} not found")
        stored.status = item.status
        stored.assigned_staff_id = item.assigned_staff_id
        stored.resolved_at = item.resolved_at
        stored.rating = item.rating
        return item


class InMemoryAssignmentRepository(AssignmentRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save(self, assignment: Assignment) -> Assignment:
        if assignment.is_active and await self.get_active_for_item(assignment.item_id):
            raise ValidationError(f"Item {assignment.item_id} already has an active assignment")
        if assignment.id is None:
            assignment.id = self._store.next_id("assignments")
        self._store.assignments[assignment.id] = copy.deepcopy(assignment)
        return assignment

    async def get_by_id(self, assignment_id: int) -> Assignment | None:
        stored = self._store.assignments.get(assignment_id)
        return copy.deepcopy(stored) if stored else None

    async def get_active(self) -> list[Assignment]:
        return [
            copy.deepcopy(a)
            for _, a in sorted(self._store.assignments.items())
            if a.is_active
        ]

    async def get_active_for_item(self, item_id: int) -> Assignment | None:
        for a in self._store.assignments.values():
            if a.item_id == item_id and a.is_active:
                return copy.deepcopy(a)
        return None

    async def close(self, assignment_id: int, resolved_at: datetime) -> None:
        stored = self._store.assignments.get(assignment_id)
        if stored is None:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        if stored.is_active:
            stored.resolved_at = resolved_at

    async def supersede(self, assignment_id: int, replacement: Assignment) -> Assignment:
        await self.close(assignment_id, replacement.assigned_at)
        replacement = await self.save(replacement)
        self._store.assignments[assignment_id].superseded_by = replacement.id
        return replacement
