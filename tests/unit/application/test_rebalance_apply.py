"""Tests for ProposeRebalanceUseCase and ApplyRebalanceUseCase."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from casework.application.use_cases.rebalance import (
    ApplyRebalanceUseCase,
    ProposeRebalanceUseCase,
)
from casework.domain.entities.assignment import Assignment
from casework.domain.policies.rebalancing import RebalanceMove
from casework.domain.value_objects.enums import (
    AssignmentSource,
    AvailabilityStatus,
    Designation,
    ItemStatus,
    MoveOutcome,
    Priority,
)


async def _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now):
    """Staff 1 holds 9 of 10 slots (three items tracked here); staff 2 is idle."""
    await staff_repo.save(make_staff(id=1, workload=9))
    await staff_repo.save(make_staff(id=2, workload=0))
    for n, priority in enumerate([Priority.LOW, Priority.MEDIUM, Priority.HIGH]):
        item = await item_repo.save(
            make_item(id=None, priority=priority, status=ItemStatus.ASSIGNED, assigned_staff_id=1)
        )
        await assignment_repo.save(
            Assignment(
                id=None, item_id=item.id, staff_id=1, source=AssignmentSource.AUTO,
                assigned_at=now + timedelta(minutes=n),
            )
        )


@pytest.fixture
def propose_uc(staff_repo, item_repo, assignment_repo):
    return ProposeRebalanceUseCase(staff_repo=staff_repo, item_repo=item_repo, assignment_repo=assignment_repo)


@pytest.fixture
def apply_uc(staff_repo, item_repo, assignment_repo):
    return ApplyRebalanceUseCase(staff_repo=staff_repo, item_repo=item_repo, assignment_repo=assignment_repo)


@pytest.mark.asyncio
async def test_propose_does_not_write(
    propose_uc, staff_repo, item_repo, assignment_repo, make_staff, make_item, now
):
    await _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now)
    moves = await propose_uc.execute()

    assert [m.item_id for m in moves] == [1, 2]
    assert (await staff_repo.get_by_id(1)).current_workload == 9
    assert len(await assignment_repo.get_active()) == 3


@pytest.mark.asyncio
async def test_apply_moves_items(
    propose_uc, apply_uc, staff_repo, item_repo, assignment_repo, make_staff, make_item, now
):
    await _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now)
    moves = await propose_uc.execute()

    results = await apply_uc.execute(moves, now=now + timedelta(hours=1))

    assert [r.outcome for r in results] == [MoveOutcome.APPLIED, MoveOutcome.APPLIED]
    assert (await staff_repo.get_by_id(1)).current_workload == 7
    assert (await staff_repo.get_by_id(2)).current_workload == 2
    for r in results:
        new = await assignment_repo.get_by_id(r.new_assignment_id)
        assert new.source == AssignmentSource.REBALANCE
        assert new.staff_id == 2
        old = await assignment_repo.get_by_id(r.move.assignment_id)
        assert old.superseded_by == new.id
        assert (await item_repo.get_by_id(r.move.item_id)).assigned_staff_id == 2


@pytest.mark.asyncio
async def test_apply_twice_is_idempotent(
    propose_uc, apply_uc, staff_repo, item_repo, assignment_repo, make_staff, make_item, now
):
    await _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now)
    moves = await propose_uc.execute()

    first = await apply_uc.execute(moves)
    second = await apply_uc.execute(moves)

    assert all(r.outcome == MoveOutcome.ALREADY_APPLIED for r in second)
    assert [r.new_assignment_id for r in second] == [r.new_assignment_id for r in first]
    assert (await staff_repo.get_by_id(1)).current_workload == 7
    assert (await staff_repo.get_by_id(2)).current_workload == 2
    assert len(await assignment_repo.get_active()) == 3


@pytest.mark.asyncio
async def test_started_item_is_stale(
    propose_uc, apply_uc, staff_repo, item_repo, assignment_repo, make_staff, make_item, now
):
    await _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now)
    moves = await propose_uc.execute()
    item = await item_repo.get_by_id(moves[0].item_id)
    item.status = ItemStatus.IN_PROGRESS
    await item_repo.update(item)

    results = await apply_uc.execute(moves)

    assert [r.outcome for r in results] == [MoveOutcome.STALE, MoveOutcome.APPLIED]
    assert (await staff_repo.get_by_id(1)).current_workload == 8


@pytest.mark.asyncio
async def test_full_target_rejected(apply_uc, staff_repo, item_repo, assignment_repo, make_staff, make_item, now):
    await _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now)
    await staff_repo.save(make_staff(id=3, capacity=2, workload=2))

    [result] = await apply_uc.execute(
        [RebalanceMove(assignment_id=1, item_id=1, from_staff_id=1, to_staff_id=3)]
    )

    assert result.outcome == MoveOutcome.REJECTED
    assert (await staff_repo.get_by_id(3)).current_workload == 2
    assert (await assignment_repo.get_by_id(1)).is_active


@pytest.mark.asyncio
async def test_move_to_same_staff_rejected(apply_uc, staff_repo, item_repo, assignment_repo, make_staff, make_item, now):
    await _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now)

    [result] = await asyncio.wait_for(
        apply_uc.execute([RebalanceMove(assignment_id=1, item_id=1, from_staff_id=1, to_staff_id=1)]),
        timeout=2,
    )

    assert result.outcome == MoveOutcome.REJECTED
    assert (await staff_repo.get_by_id(1)).current_workload == 9
    assert (await assignment_repo.get_by_id(1)).is_active


@pytest.mark.asyncio
async def test_target_on_leave_since_proposal_rejected(
    propose_uc, apply_uc, staff_repo, item_repo, assignment_repo, make_staff, make_item, now
):
    await _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now)
    moves = await propose_uc.execute()
    target = await staff_repo.get_by_id(2)
    target.availability_status = AvailabilityStatus.ON_LEAVE
    await staff_repo.save(target)

    results = await apply_uc.execute(moves)

    assert {r.outcome for r in results} == {MoveOutcome.REJECTED}
    assert all("on_leave" in r.detail for r in results)
    assert (await staff_repo.get_by_id(1)).current_workload == 9
    assert (await staff_repo.get_by_id(2)).current_workload == 0
    assert len(await assignment_repo.get_active()) == 3


@pytest.mark.asyncio
async def test_critical_item_not_moved_to_junior(
    apply_uc, staff_repo, item_repo, assignment_repo, make_staff, make_item, now
):
    await _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now)
    await staff_repo.save(make_staff(id=3, designation=Designation.JUNIOR))
    item = await item_repo.save(
        make_item(id=None, priority=Priority.CRITICAL, status=ItemStatus.ASSIGNED, assigned_staff_id=1)
    )
    current = await assignment_repo.save(
        Assignment(id=None, item_id=item.id, staff_id=1, source=AssignmentSource.AUTO, assigned_at=now)
    )

    [result] = await apply_uc.execute(
        [RebalanceMove(assignment_id=current.id, item_id=item.id, from_staff_id=1, to_staff_id=3)]
    )

    assert result.outcome == MoveOutcome.REJECTED
    assert "junior_on_urgent_item" in result.detail
    assert (await staff_repo.get_by_id(3)).current_workload == 0
    assert (await item_repo.get_by_id(item.id)).assigned_staff_id == 1

@pytest.mark.asyncio
async def test_unknown_or_foreign_assignment_is_stale(
    apply_uc, staff_repo, item_repo, assignment_repo, make_staff, make_item, now
):
    await _overloaded_team(staff_repo, item_repo, assignment_repo, make_staff, make_item, now)
    results = await apply_uc.execute(
        [
            RebalanceMove(assignment_id=99, item_id=1, from_staff_id=1, to_staff_id=2),
            RebalanceMove(assignment_id=1, item_id=1, from_staff_id=2, to_staff_id=1),
        ]
    )
    assert [r.outcome for r in results] == [MoveOutcome.STALE, MoveOutcome.STALE]
