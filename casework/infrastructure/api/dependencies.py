"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from casework.adapters.persistence.database import get_session
from casework.adapters.persistence.repositories import (
    SqlAssignmentRepository,
    SqlItemRepository,
    SqlStaffRepository,
)
from casework.application.ports.assignment_repo import AssignmentRepository
from casework.application.ports.item_repo import ItemRepository
from casework.application.ports.staff_repo import StaffRepository
from casework.application.use_cases.assign_item import (
    AssignItemUseCase,
    BatchAssignUseCase,
    ManualAssignUseCase,
)
from casework.application.use_cases.intake_item import IntakeItemUseCase
from casework.application.use_cases.item_lifecycle import (
    CloseItemUseCase,
    EscalateOverdueUseCase,
    StartWorkUseCase,
)
from casework.application.use_cases.rebalance import (
    ApplyRebalanceUseCase,
    ProposeRebalanceUseCase,
)
from casework.application.use_cases.staff_performance import (
    RecomputePerformanceUseCase,
    StaffPerformanceUseCase,
)
from casework.config import settings
from casework.domain.value_objects.routing_policy import RoutingPolicy

# Built once at import so a bad configuration fails at startup
_policy = settings.routing_policy()


def get_policy() -> RoutingPolicy:
    return _policy


def get_staff_repo(session: AsyncSession = Depends(get_session)) -> StaffRepository:
    return SqlStaffRepository(session)


def get_item_repo(session: AsyncSession = Depends(get_session)) -> ItemRepository:
    return SqlItemRepository(session)


def get_assignment_repo(session: AsyncSession = Depends(get_session)) -> AssignmentRepository:
    return SqlAssignmentRepository(session)


def get_assign_item_uc(
    staff: StaffRepository = Depends(get_staff_repo),
    items: ItemRepository = Depends(get_item_repo),
    assignments: AssignmentRepository = Depends(get_assignment_repo),
    policy: RoutingPolicy = Depends(get_policy),
) -> AssignItemUseCase:
    return AssignItemUseCase(
        staff_repo=staff,
        item_repo=items,
        assignment_repo=assignments,
        policy=policy,
        max_attempts=settings.assignment_max_attempts,
    )


def get_intake_item_uc(
    items: ItemRepository = Depends(get_item_repo),
    assign_uc: AssignItemUseCase = Depends(get_assign_item_uc),
    policy: RoutingPolicy = Depends(get_policy),
) -> IntakeItemUseCase:
    return IntakeItemUseCase(item_repo=items, assign_item=assign_uc, policy=policy)


def get_batch_assign_uc(
    items: ItemRepository = Depends(get_item_repo),
    assign_uc: AssignItemUseCase = Depends(get_assign_item_uc),
) -> BatchAssignUseCase:
    return BatchAssignUseCase(assign_item=assign_uc, item_repo=items)


def get_manual_assign_uc(
    staff: StaffRepository = Depends(get_staff_repo),
    items: ItemRepository = Depends(get_item_repo),
    assignments: AssignmentRepository = Depends(get_assignment_repo),
) -> ManualAssignUseCase:
    return ManualAssignUseCase(staff_repo=staff, item_repo=items, assignment_repo=assignments)


def get_start_work_uc(items: ItemRepository = Depends(get_item_repo)) -> StartWorkUseCase:
    return StartWorkUseCase(item_repo=items)


def get_close_item_uc(
    staff: StaffRepository = Depends(get_staff_repo),
    items: ItemRepository = Depends(get_item_repo),
    assignments: AssignmentRepository = Depends(get_assignment_repo),
) -> CloseItemUseCase:
    return CloseItemUseCase(staff_repo=staff, item_repo=items, assignment_repo=assignments)


def get_escalate_uc(items: ItemRepository = Depends(get_item_repo)) -> EscalateOverdueUseCase:
    return EscalateOverdueUseCase(item_repo=items)


def get_propose_rebalance_uc(
    staff: StaffRepository = Depends(get_staff_repo),
    items: ItemRepository = Depends(get_item_repo),
    assignments: AssignmentRepository = Depends(get_assignment_repo),
    policy: RoutingPolicy = Depends(get_policy),
) -> ProposeRebalanceUseCase:
    return ProposeRebalanceUseCase(
        staff_repo=staff, item_repo=items, assignment_repo=assignments, policy=policy
    )


def get_apply_rebalance_uc(
    staff: StaffRepository = Depends(get_staff_repo),
    items: ItemRepository = Depends(get_item_repo),
    assignments: AssignmentRepository = Depends(get_assignment_repo),
    policy: RoutingPolicy = Depends(get_policy),
) -> ApplyRebalanceUseCase:
    return ApplyRebalanceUseCase(
        staff_repo=staff, item_repo=items, assignment_repo=assignments, policy=policy
    )


def get_staff_performance_uc(
    staff: StaffRepository = Depends(get_staff_repo),
    items: ItemRepository = Depends(get_item_repo),
) -> StaffPerformanceUseCase:
    return StaffPerformanceUseCase(staff_repo=staff, item_repo=items)


def get_recompute_performance_uc(
    staff: StaffRepository = Depends(get_staff_repo),
    items: ItemRepository = Depends(get_item_repo),
    policy: RoutingPolicy = Depends(get_policy),
) -> RecomputePerformanceUseCase:
    return RecomputePerformanceUseCase(staff_repo=staff, item_repo=items, policy=policy)
