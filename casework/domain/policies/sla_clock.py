"""SlaClock — priority-driven deadlines and on-time/at-risk/overdue status.

All functions are pure: the same item and the same ``now`` always give the
same answer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from casework.domain.entities.assignable_item import AssignableItem
from casework.domain.errors import ValidationError
from casework.domain.value_objects.enums import ItemStatus, Priority, SlaStatus
from casework.domain.value_objects.routing_policy import DEFAULT_POLICY, RoutingPolicy


@dataclass(frozen=True)
class SlaDeadlines:
    response_due_at: datetime
    escalation_due_at: datetime
    review_due_at: datetime


def parse_priority(priority: Priority | str | None) -> Priority:
    """Coerce a priority value, failing loudly on anything unknown."""
    if priority is None:
        raise ValidationError("Priority is required")
    if isinstance(priority, Priority):
        return priority
    try:
        return Priority(str(priority).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown priority: {priority!r}") from None


def compute_deadlines(
    priority: Priority | str | None,
    submitted_at: datetime | None,
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> SlaDeadlines:
    """Stamp the three SLA deadlines of a freshly submitted item.

    Each deadline is ``submitted_at + hours[priority]`` from its own table.

    Raises:
        ValidationError: on an unknown priority or a missing timestamp.
    """
    prio = parse_priority(priority)
    if submitted_at is None:
        raise ValidationError("submitted_at is required to compute deadlines")

    return SlaDeadlines(
        response_due_at=submitted_at + timedelta(hours=policy.response_hours[prio]),
        escalation_due_at=submitted_at + timedelta(hours=policy.escalation_hours[prio]),
        review_due_at=submitted_at + timedelta(hours=policy.review_hours[prio]),
    )


def compute_status(
    item: AssignableItem,
    now: datetime,
    policy: RoutingPolicy = DEFAULT_POLICY,
) -> SlaStatus:
    """Classify an item against its response deadline.

    Open items are ``overdue`` once ``now`` passes the deadline and
    ``at_risk`` inside the risk window before it. Terminal items report
    ``compliant`` or ``breached`` based on when they were resolved.
    """
    if item.is_terminal():
        if item.resolved_at is None:
            raise ValidationError(
                f"Item {item.id} is {item.status.value} but has no resolved_at"
            )
        if item.resolved_on_time():
            return SlaStatus.COMPLIANT
        return SlaStatus.BREACHED

    if now > item.response_due_at:
        return SlaStatus.OVERDUE
    if item.response_due_at - now < timedelta(hours=policy.risk_window_hours):
        return SlaStatus.AT_RISK
    return SlaStatus.ON_TIME


def needs_escalation(item: AssignableItem, now: datetime) -> bool:
    """Open, not yet escalated, and past the escalation deadline."""
    return (
        item.is_open()
        and item.status != ItemStatus.ESCALATED
        and now > item.escalation_due_at
    )


def time_remaining(item: AssignableItem, now: datetime) -> timedelta:
    """Signed time left until the response deadline (negative once overdue)."""
    return item.response_due_at - now


def format_countdown(deadline: datetime, now: datetime, completed: bool = False) -> str:
    """Human-readable countdown used on staff dashboards.

    Examples: ``"Completed"``, ``"Overdue by 3h"``, ``"5h 12m"``, ``"2d 4h"``.
    """
    if completed:
        return "Completed"

    diff = deadline - now
    if diff <= timedelta(0):
        overdue_hours = int(-diff.total_seconds() // 3600)
        return f"Overdue by {overdue_hours}h"

    total_minutes = int(diff.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours < 24:
        return f"{hours}h {minutes}m"

    days, hours = divmod(hours, 24)
    return f"{days}d {hours}h"
