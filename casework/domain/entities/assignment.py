"""Assignment entity — the link between one item and one staff member."""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from casework.domain.value_objects.enums import AssignmentSource


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Assignment:
    id: int | None
    item_id: int
    staff_id: int
    source: AssignmentSource
    assigned_at: datetime = field(default_factory=_utcnow)
    resolved_at: datetime | None = None
    superseded_by: int | None = None
    score: float | None = None
    distance_km: float | None = None
    reason: str | None = None

    @property
    def is_active(self) -> bool:
        return self.resolved_at is None
