"""Tests for the SLA clock."""

from datetime import timedelta

import pytest

from casework.domain.errors import ValidationError
from casework.domain.policies.sla_clock import (
    compute_deadlines,
    compute_status,
    format_countdown,
    needs_escalation,
    parse_priority,
    time_remaining,
)
from casework.domain.value_objects.enums import ItemStatus, Priority, SlaStatus
from casework.domain.value_objects.routing_policy import RoutingPolicy

# ─── compute_deadlines ───────────────────────────────────────────────


def test_medium_deadlines(now):
    d = compute_deadlines(Priority.MEDIUM, now)
    assert d.response_due_at == now + timedelta(hours=24)
    assert d.escalation_due_at == now + timedelta(hours=48)
    assert d.review_due_at == now + timedelta(hours=12)


@pytest.mark.parametrize("priority", list(Priority))
def test_deadlines_strictly_after_submission(now, priority):
    d = compute_deadlines(priority, now)
    assert d.response_due_at > now
    assert d.escalation_due_at > now
    assert d.review_due_at > now


def test_more_urgent_priority_never_gets_a_later_deadline(now):
    order = [Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL, Priority.EMERGENCY]
    due = [compute_deadlines(p, now).response_due_at for p in order]
    assert due == sorted(due, reverse=True)


def test_priority_accepts_strings(now):
    assert parse_priority(" High ") == Priority.HIGH
    assert compute_deadlines("low", now).response_due_at == now + timedelta(hours=72)


def test_unknown_priority_rejected(now):
    with pytest.raises(ValidationError, match="Unknown priority"):
        compute_deadlines("urgent-ish", now)


def test_missing_priority_rejected(now):
    with pytest.raises(ValidationError):
        compute_deadlines(None, now)


def test_missing_submission_time_rejected():
    with pytest.raises(ValidationError):
        compute_deadlines(Priority.LOW, None)


def test_custom_policy_hours(now):
    policy = RoutingPolicy(
        response_hours={p: 2 for p in Priority},
    )
    assert compute_deadlines(Priority.LOW, now, policy).response_due_at == now + timedelta(hours=2)


# ─── compute_status ──────────────────────────────────────────────────


def test_fresh_low_item_is_on_time(make_item, now):
    item = make_item(priority=Priority.LOW)
    assert compute_status(item, now) == SlaStatus.ON_TIME


def test_item_inside_risk_window_is_at_risk(make_item, now):
    """Medium items are due in 24h, so they start inside the 24h window."""
    item = make_item(priority=Priority.MEDIUM)
    assert compute_status(item, now + timedelta(hours=1)) == SlaStatus.AT_RISK


def test_exactly_at_deadline_is_not_overdue(make_item):
    item = make_item(priority=Priority.HIGH)
    assert compute_status(item, item.response_due_at) == SlaStatus.AT_RISK


def test_past_deadline_is_overdue(make_item):
    item = make_item(priority=Priority.HIGH)
    assert compute_status(item, item.response_due_at + timedelta(seconds=1)) == SlaStatus.OVERDUE


def test_overdue_is_monotonic_in_time(make_item, now):
    item = make_item(priority=Priority.LOW)
    seen_overdue = False
    for hour in range(0, 120):
        overdue = compute_status(item, now + timedelta(hours=hour)) == SlaStatus.OVERDUE
        assert overdue or not seen_overdue
        seen_overdue = seen_overdue or overdue
    assert seen_overdue


def test_resolved_on_time_is_compliant(make_item, now):
    item = make_item(status=ItemStatus.RESOLVED, resolved_at=now + timedelta(hours=3))
    assert compute_status(item, now + timedelta(days=30)) == SlaStatus.COMPLIANT


def test_resolved_late_is_breached(make_item, now):
    item = make_item(status=ItemStatus.CLOSED, resolved_at=now + timedelta(hours=25))
    assert compute_status(item, now + timedelta(hours=25)) == SlaStatus.BREACHED


def test_terminal_item_never_reports_overdue(make_item, now):
    item = make_item(status=ItemStatus.RESOLVED, resolved_at=now + timedelta(hours=1))
    assert compute_status(item, now + timedelta(days=365)) != SlaStatus.OVERDUE


def test_terminal_without_resolution_time_rejected(make_item, now):
    item = make_item(status=ItemStatus.RESOLVED)
    with pytest.raises(ValidationError):
        compute_status(item, now)


# ─── escalation and countdown ────────────────────────────────────────


def test_needs_escalation_after_escalation_deadline(make_item):
    item = make_item(priority=Priority.HIGH)
    assert not needs_escalation(item, item.escalation_due_at)
    assert needs_escalation(item, item.escalation_due_at + timedelta(minutes=1))


def test_escalated_item_not_escalated_twice(make_item):
    item = make_item(status=ItemStatus.ESCALATED)
    assert not needs_escalation(item, item.escalation_due_at + timedelta(days=1))


def test_time_remaining_goes_negative(make_item):
    item = make_item(priority=Priority.HIGH)
    assert time_remaining(item, item.response_due_at + timedelta(hours=2)) == timedelta(hours=-2)


def test_format_countdown(now):
    assert format_countdown(now + timedelta(hours=5, minutes=12), now) == "5h 12m"
    assert format_countdown(now + timedelta(days=2, hours=4), now) == "2d 4h"
    assert format_countdown(now - timedelta(hours=3), now) == "Overdue by 3h"
    assert format_countdown(now - timedelta(hours=3), now, completed=True) == "Completed"
