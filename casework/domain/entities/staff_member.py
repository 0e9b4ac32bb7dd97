"""StaffMember entity — an employee who handles complaints and tasks."""

from dataclasses import dataclass, field

from casework.domain.errors import ValidationError
from casework.domain.value_objects.enums import AvailabilityStatus, Designation
from casework.domain.value_objects.geo_point import GeoPoint


@dataclass
class StaffMember:
    id: int | None
    name: str
    max_concurrent_capacity: int
    designation: Designation = Designation.OFFICER
    department_id: int | None = None
    specializations: set[int] = field(default_factory=set)
    location: GeoPoint | None = None
    current_workload: int = 0
    availability_status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    performance_score: float = 70.0
    version: int = 0

    def __post_init__(self) -> None:
        if self.max_concurrent_capacity <= 0:
            raise ValidationError(
                f"Staff {self.id}: max_concurrent_capacity must be > 0, "
                f"got {self.max_concurrent_capacity}"
            )
        if self.current_workload < 0:
            raise ValidationError(
                f"Staff {self.id}: current_workload must be >= 0, got {self.current_workload}"
            )
        if not 0.0 <= self.performance_score <= 100.0:
            raise ValidationError(
                f"Staff {self.id}: performance_score must be in [0, 100], "
                f"got {self.performance_score}"
            )

    def is_junior(self) -> bool:
        return self.designation in (Designation.TRAINEE, Designation.JUNIOR)

    def specializes_in(self, category_id: int) -> bool:
        return category_id in self.specializations

    def has_room(self, extra: int = 1) -> bool:
        return self.current_workload + extra <= self.max_concurrent_capacity
