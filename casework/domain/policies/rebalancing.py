"""RebalancePolicy — propose moves from overloaded to underloaded staff.

Proposal is pure: it reads a snapshot and returns moves. Applying them
(closing the old assignment, opening a new one, shifting workload) is the
caller's job, see ``ApplyRebalanceUseCase``.
"""

from __future__ import annotations

import dataclasses
import logging
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass

from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.entities.assignment import Assignment
from casework.domain.entities.staff_member import StaffMember
from casework.domain.policies.candidate_scoring import eligibility_failure, item_distance_km
from casework.domain.policies.capacity import classify_load, is_underloaded, workload_percentage
from casework.domain.value_objects.enums import ItemStatus, LoadState
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebalanceMove:
    assignment_id: int
    item_id: int
    from_staff_id: int
    to_staff_id: int


def movable_assignments(
    source: StaffMember,
    assignments: list[Assignment],
    items: Mapping[int, AssignableItem],
) -> list[Assignment]:
    """Active assignments of ``source`` that may move, least urgent first.

    Items still in ``assigned`` status are movable; once work is in progress
    they stay put. Assignments whose item is missing from the snapshot are
    treated as movable and ordered oldest first, after the known ones.
    """
    known: list[Assignment] = []
    unknown: list[Assignment] = []
    for a in assignments:
        if not a.is_active or a.staff_id != source.id:
            continue
        item = items.get(a.item_id)
        if item is None:
            unknown.append(a)
        elif item.status == ItemStatus.ASSIGNED:
            known.append(a)

    # Stable two-pass sort: latest earliest-deadline first, then oldest assignment
    known.sort(key=lambda a: (a.assigned_at, a.id))
    known.sort(key=lambda a: items[a.item_id].earliest_deadline(), reverse=True)
    unknown.sort(key=lambda a: (a.assigned_at, a.id))
    return known + unknown


def _next_target(
    item: AssignableItem | None,
    targets: list[StaffMember],
    projected: dict[int, int],
    cursor: int,
    policy: RoutingPolicy,
) -> int | None:
    """Index of the next target in round-robin order that can take the item."""
    for offset in range(len(targets)):
        index = (cursor + offset) % len(targets)
        target = targets[index]
        if projected[target.id] + 1 > target.max_concurrent_capacity:
            continue
        if item is not None:
            as_projected = dataclasses.replace(target, current_workload=projected[target.id])
            distance = item_distance_km(item, as_projected)
            if eligibility_failure(item, as_projected, distance, policy) is not None:
                continue
        return index
    return None


def propose_rebalance(
    staff_pool: list[StaffMember],
    assignments: list[Assignment],
    items: Mapping[int, AssignableItem] | None = None,
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> list[RebalanceMove]:
    """Propose item moves that relieve overloaded staff.

    1. Overloaded staff are the sources; available staff under the
       underloaded threshold are the targets.
    2. No targets → no moves (rebalancing is never forced).
    3. Each source gives up at most ``policy.rebalance_move_cap`` items,
       least urgent first.
    4. Targets are taken round-robin; a target is skipped when one more item
       would exceed its capacity or break the item's hard constraints.
    """
    items = items or {}
    sources = sorted(
        (s for s in staff_pool if classify_load(s, policy) == LoadState.OVERLOADED),
        key=lambda s: (-workload_percentage(s), s.id),
    )
    targets = sorted(
        (s for s in staff_pool if is_underloaded(s, policy)),
        key=lambda s: (workload_percentage(s), s.id),
    )
    if not sources or not targets:
        logger.info(
            "Rebalance: %d overloaded, %d underloaded → no moves",
            len(sources), len(targets),
        )
        return []

    by_staff: dict[int, list[Assignment]] = defaultdict(list)
    for a in assignments:
        by_staff[a.staff_id].append(a)

    projected = {t.id: t.current_workload for t in targets}
    moves: list[RebalanceMove] = []
    cursor = 0

    for source in sources:
        moved = 0
        for assignment in movable_assignments(source, by_staff[source.id], items):
            if moved >= policy.rebalance_move_cap:
                break
            item = items.get(assignment.item_id)
            index = _next_target(item, targets, projected, cursor, policy)
            if index is None:
                logger.warning(
                    "Rebalance: no target can take assignment %s from staff %s",
                    assignment.id, source.id,
                )
                continue

            target = targets[index]
            moves.append(
                RebalanceMove(
                    assignment_id=assignment.id,
                    item_id=assignment.item_id,
                    from_staff_id=source.id,
                    to_staff_id=target.id,
                )
            )
            projected[target.id] += 1
            cursor = (index + 1) % len(targets)
            moved += 1

    logger.info(
        "Rebalance: %d overloaded, %d underloaded → %d moves proposed",
        len(sources), len(targets), len(moves),
    )
    return moves
