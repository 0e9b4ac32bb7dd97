"""Tests for the performance aggregator."""

from datetime import timedelta

import pytest

from casework.domain.errors import ValidationError
from casework.domain.policies.performance import (
    overdue_rate,
    performance_metrics,
    performance_score,
    resolution_time_hours,
    satisfaction_score,
    sla_compliance,
)
from casework.domain.value_objects.enums import ItemStatus, Priority


@pytest.mark.parametrize(
    "total, on_time, expected",
    [(0, 0, 100), (10, 10, 100), (10, 5, 50), (20, 18, 90), (3, 2, 67), (8, 1, 13)],
)
def test_sla_compliance(total, on_time, expected):
    assert sla_compliance(total, on_time) == expected


def test_sla_compliance_rejects_inconsistent_counts():
    with pytest.raises(ValidationError):
        sla_compliance(5, 6)
    with pytest.raises(ValidationError):
        sla_compliance(-1, 0)


def test_resolution_time(make_item, now):
    items = [
        make_item(id=1, status=ItemStatus.RESOLVED, resolved_at=now + timedelta(hours=2)),
        make_item(id=2, status=ItemStatus.RESOLVED, resolved_at=now + timedelta(hours=5)),
    ]
    assert resolution_time_hours(items) == 3.5
    assert resolution_time_hours([]) == 0.0


def test_resolution_time_clamps_clock_skew(make_item, now):
    item = make_item(status=ItemStatus.RESOLVED, resolved_at=now - timedelta(hours=1))
    assert resolution_time_hours([item]) == 0.0


def test_satisfaction_ignores_missing_ratings():
    assert satisfaction_score([5, 4, None, 0, 4]) == 4.3
    assert satisfaction_score([]) == 0.0


def test_overdue_rate(make_item, now):
    items = [
        make_item(id=1, priority=Priority.HIGH),
        make_item(id=2, priority=Priority.LOW),
        make_item(id=3, priority=Priority.HIGH, status=ItemStatus.RESOLVED, resolved_at=now),
    ]
    assert overdue_rate(items, now + timedelta(hours=5)) == 50.0
    assert overdue_rate([], now) == 0.0


def test_performance_score_blend():
    # 0.5*90 + 0.3*4.0*20 + 0.2*(100-10) = 45 + 24 + 18
    assert performance_score(90, 4.0, 10) == 87.0


def test_performance_score_bounds():
    assert performance_score(100, 5.0, 0) == 100.0
    assert performance_score(0, 0.0, 100) == 0.0


def test_performance_score_monotonic():
    base = performance_score(70, 3.0, 20)
    assert performance_score(80, 3.0, 20) >= base
    assert performance_score(70, 3.5, 20) >= base
    assert performance_score(70, 3.0, 40) <= base


def test_twenty_resolved_eighteen_on_time(make_item, now):
    items = [
        make_item(
            id=i,
            priority=Priority.HIGH,
            status=ItemStatus.RESOLVED,
            # High items are due in 4h; the last two land late
            resolved_at=now + timedelta(hours=3 if i < 18 else 6),
            rating=5,
        )
        for i in range(20)
    ]
    m = performance_metrics(9, items, [i.rating for i in items])
    assert m.staff_id == 9
    assert m.resolved_count == 20
    assert m.on_time_count == 18
    assert m.sla_compliance == 90
    assert m.satisfaction_score == 5.0
    assert m.resolution_time_hours == 3.3


def test_metrics_with_no_history():
    m = performance_metrics(1, [], [])
    assert m.sla_compliance == 100
    assert m.resolution_time_hours == 0.0
    assert m.satisfaction_score == 0.0
