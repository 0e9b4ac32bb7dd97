"""AssignableItem entity — a citizen complaint or an internal task."""

from dataclasses import dataclass
from datetime import datetime

from casework.domain.value_objects.enums import ItemKind, ItemStatus, Priority
from casework.domain.value_objects.geo_point import GeoPoint


@dataclass
class AssignableItem:
    id: int | None
    kind: ItemKind
    priority: Priority
    category_id: int
    submitted_at: datetime
    response_due_at: datetime
    escalation_due_at: datetime
    review_due_at: datetime
    title: str = ""
    department_id: int | None = None
    location: GeoPoint | None = None
    status: ItemStatus = ItemStatus.UNASSIGNED
    assigned_staff_id: int | None = None
    resolved_at: datetime | None = None
    rating: int | None = None

    def is_terminal(self) -> bool:
        return self.status.is_terminal()

    def is_open(self) -> bool:
        return not self.is_terminal()

    def earliest_deadline(self) -> datetime:
        return min(self.response_due_at, self.escalation_due_at, self.review_due_at)

    def resolved_on_time(self) -> bool:
        """True when the item was resolved no later than its response deadline."""
        return self.resolved_at is not None and self.resolved_at <= self.response_due_at
