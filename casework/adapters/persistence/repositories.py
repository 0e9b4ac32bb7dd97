"""SQLAlchemy repository implementations.

Workload writes are conditional updates on the staff ``version`` column, so
two transactions that read the same snapshot cannot both commit an
increment. Every write happens inside the caller's session; the caller
commits or rolls back.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from casework.adapters.persistence.models import AssignmentModel, ItemModel, StaffModel
from casework.application.ports.assignment_repo import AssignmentRepository
from casework.application.ports.item_repo import ItemRepository
from casework.application.ports.staff_repo import StaffRepository
from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.entities.assignment import Assignment
from casework.domain.entities.staff_member import StaffMember
from casework.domain.errors import ConcurrencyConflictError, NotFoundError, ValidationError
from casework.domain.value_objects.enums import (
    AssignmentSource,
    AvailabilityStatus,
    Designation,
    ItemKind,
    ItemStatus,
    Priority,
)
from casework.domain.value_objects.geo_point import GeoPoint

TERMINAL_STATUSES = [ItemStatus.RESOLVED.value, ItemStatus.CLOSED.value]

# ─── Mappers ─────────────────────────────────────────────────────────


def _point(lat: float | None, lng: float | None) -> GeoPoint | None:
    if lat is None or lng is None:
        return None
    return GeoPoint(latitude=lat, longitude=lng)


def _staff_to_domain(m: StaffModel) -> StaffMember:
    return StaffMember(
        id=m.id,
        name=m.name,
        designation=Designation(m.designation),
        department_id=m.department_id,
        specializations=set(m.specializations) if m.specializations else set(),
        location=_point(m.latitude, m.longitude),
        max_concurrent_capacity=m.max_concurrent_capacity,
        current_workload=m.current_workload,
        availability_status=AvailabilityStatus(m.availability_status),
        performance_score=m.performance_score,
        version=m.version,
    )


def _item_to_domain(m: ItemModel) -> AssignableItem:
    return AssignableItem(
        id=m.id,
        kind=ItemKind(m.kind),
        priority=Priority(m.priority),
        category_id=m.category_id,
        submitted_at=m.submitted_at,
        response_due_at=m.response_due_at,
        escalation_due_at=m.escalation_due_at,
        review_due_at=m.review_due_at,
        title=m.title,
        department_id=m.department_id,
        location=_point(m.latitude, m.longitude),
        status=ItemStatus(m.status),
        assigned_staff_id=m.assigned_staff_id,
        resolved_at=m.resolved_at,
        rating=m.rating,
    )


def _assignment_to_domain(m: AssignmentModel) -> Assignment:
    return Assignment(
        id=m.id,
        item_id=m.item_id,
        staff_id=m.staff_id,
        source=AssignmentSource(m.source),
        assigned_at=m.assigned_at,
        resolved_at=m.resolved_at,
        superseded_by=m.superseded_by,
        score=m.score,
        distance_km=m.distance_km,
        reason=m.reason,
    )


def _assignment_to_model(a: Assignment) -> AssignmentModel:
    return AssignmentModel(
        item_id=a.item_id,
        staff_id=a.staff_id,
        source=a.source.value,
        assigned_at=a.assigned_at,
        resolved_at=a.resolved_at,
        superseded_by=a.superseded_by,
        score=a.score,
        distance_km=a.distance_km,
        reason=a.reason,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlStaffRepository(StaffRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, staff: StaffMember) -> StaffMember:
        m = StaffModel(
            name=staff.name,
            designation=staff.designation.value,
            department_id=staff.department_id,
            specializations=sorted(staff.specializations),
            latitude=staff.location.latitude if staff.location else None,
            longitude=staff.location.longitude if staff.location else None,
            max_concurrent_capacity=staff.max_concurrent_capacity,
            current_workload=staff.current_workload,
            availability_status=staff.availability_status.value,
            performance_score=staff.performance_score,
            version=staff.version,
        )
        self._s.add(m)
        await self._s.flush()
        staff.id = m.id
        return staff

    async def get_by_id(self, staff_id: int) -> StaffMember | None:
        m = await self._s.get(StaffModel, staff_id, populate_existing=True)
        return _staff_to_domain(m) if m else None

    async def get_all(self) -> list[StaffMember]:
        result = await self._s.execute(
            select(StaffModel)
            .order_by(StaffModel.id)
            .execution_options(populate_existing=True)
        )
        return [_staff_to_domain(m) for m in result.scalars()]

    async def adjust_workload(self, staff: StaffMember, delta: int) -> StaffMember:
        # The version check guarantees the stored workload equals the snapshot's.
        if staff.current_workload + delta < 0:
            raise ValidationError(
                f"Staff {staff.id}: workload would become negative "
                f"({staff.current_workload} {delta:+d})"
            )

        result = await self._s.execute(
            update(StaffModel)
            .where(StaffModel.id == staff.id, StaffModel.version == staff.version)
            .values(
                current_workload=StaffModel.current_workload + delta,
                version=StaffModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            actual = (
                await self._s.execute(select(StaffModel.version).where(StaffModel.id == staff.id))
            ).scalar_one_or_none()
            if actual is None:
                raise NotFoundError(f"Staff {staff.id} not found")
            raise ConcurrencyConflictError(staff.id, staff.version, actual)

        await self._s.flush()
        return await self.get_by_id(staff.id)

    async def transfer_workload(
        self, source: StaffMember, target: StaffMember
    ) -> tuple[StaffMember, StaffMember]:
        if source.id == target.id:
            raise ValidationError(f"Staff {source.id}: cannot transfer workload to itself")
        # Lock rows in id order; a conflict on the second row leaves the
        # first update to be rolled back with the caller's transaction.
        if source.id < target.id:
            updated_source = await self.adjust_workload(source, -1)
            updated_target = await self.adjust_workload(target, +1)
        else:
            updated_target = await self.adjust_workload(target, +1)
            updated_source = await self.adjust_workload(source, -1)
        return updated_source, updated_target

    async def update_performance(self, staff_id: int, score: float) -> None:
        await self._s.execute(
            update(StaffModel)
            .where(StaffModel.id == staff_id)
            .values(performance_score=score)
        )
        await self._s.flush()


class SqlItemRepository(ItemRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, item: AssignableItem) -> AssignableItem:
        m = ItemModel(
            kind=item.kind.value,
            title=item.title,
            priority=item.priority.value,
            category_id=item.category_id,
            department_id=item.department_id,
            latitude=item.location.latitude if item.location else None,
            longitude=item.location.longitude if item.location else None,
            submitted_at=item.submitted_at,
            response_due_at=item.response_due_at,
            escalation_due_at=item.escalation_due_at,
            review_due_at=item.review_due_at,
            status=item.status.value,
            assigned_staff_id=item.assigned_staff_id,
            resolved_at=item.resolved_at,
            rating=item.rating,
        )
        self._s.add(m)
        await self._s.flush()
        item.id = m.id
        return item

    async def get_by_id(self, item_id: int) -> AssignableItem | None:
        m = await self._s.get(ItemModel, item_id)
        return _item_to_domain(m) if m else None

    async def get_by_ids(self, item_ids: list[int]) -> dict[int, AssignableItem]:
        if not item_ids:
            return {}
        result = await self._s.execute(select(ItemModel).where(ItemModel.id.in_(item_ids)))
        return {m.id: _item_to_domain(m) for m in result.scalars()}

    async def get_unassigned(self) -> list[AssignableItem]:
        result = await self._s.execute(
            select(ItemModel)
            .where(
                ItemModel.assigned_staff_id.is_(None),
                ItemModel.status.not_in(TERMINAL_STATUSES),
            )
            .order_by(ItemModel.submitted_at, ItemModel.id)
        )
        return [_item_to_domain(m) for m in result.scalars()]

    async def get_open(self) -> list[AssignableItem]:
        result = await self._s.execute(
            select(ItemModel)
            .where(ItemModel.status.not_in(TERMINAL_STATUSES))
            .order_by(ItemModel.id)
        )
        return [_item_to_domain(m) for m in result.scalars()]

    async def get_by_staff(self, staff_id: int) -> list[AssignableItem]:
        result = await self._s.execute(
            select(ItemModel)
            .where(ItemModel.assigned_staff_id == staff_id)
            .order_by(ItemModel.id)
        )
        return [_item_to_domain(m) for m in result.scalars()]

    async def update(self, item: AssignableItem) -> AssignableItem:
        await self._s.execute(
            update(ItemModel)
            .where(ItemModel.id == item.id)
            .values(
                status=item.status.value,
                assigned_staff_id=item.assigned_staff_id,
                resolved_at=item.resolved_at,
                rating=item.rating,
            )
        )
        await self._s.flush()
        return item


class SqlAssignmentRepository(AssignmentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, assignment: Assignment) -> Assignment:
        m = _assignment_to_model(assignment)
        self._s.add(m)
        await self._s.flush()
        assignment.id = m.id
        return assignment

    async def get_by_id(self, assignment_id: int) -> Assignment | None:
        m = await self._s.get(AssignmentModel, assignment_id)
        return _assignment_to_domain(m) if m else None

    async def get_active(self) -> list[Assignment]:
        result = await self._s.execute(
            select(AssignmentModel)
            .where(AssignmentModel.resolved_at.is_(None))
            .order_by(AssignmentModel.id)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def get_active_for_item(self, item_id: int) -> Assignment | None:
        result = await self._s.execute(
            select(AssignmentModel).where(
                AssignmentModel.item_id == item_id,
                AssignmentModel.resolved_at.is_(None),
            )
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def close(self, assignment_id: int, resolved_at) -> None:
        await self._s.execute(
            update(AssignmentModel)
            .where(
                AssignmentModel.id == assignment_id,
                AssignmentModel.resolved_at.is_(None),
            )
            .values(resolved_at=resolved_at)
        )
        await self._s.flush()

    async def supersede(self, assignment_id: int, replacement: Assignment) -> Assignment:
        # Close first: the partial unique index allows one open link per item.
        await self.close(assignment_id, replacement.assigned_at)
        replacement = await self.save(replacement)
        await self._s.execute(
            update(AssignmentModel)
            .where(AssignmentModel.id == assignment_id)
            .values(superseded_by=replacement.id)
        )
        await self._s.flush()
        return replacement
