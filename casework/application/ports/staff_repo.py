"""Port interface for staff roster persistence."""

from abc import ABC, abstractmethod

from casework.domain.entities.staff_member import StaffMember


class StaffRepository(ABC):
    @abstractmethod
    async def save(self, staff: StaffMember) -> StaffMember:
        ...

    @abstractmethod
    async def get_by_id(self, staff_id: int) -> StaffMember | None:
        ...

    @abstractmethod
    async def get_all(self) -> list[StaffMember]:
        ...

    @abstractmethod
    async def adjust_workload(self, staff: StaffMember, delta: int) -> StaffMember:
        """Add ``delta`` to current_workload if the record is unchanged.

        The write succeeds only when the stored version still equals
        ``staff.version``; it then bumps the version. Returns the updated
        record.

        Raises:
            ConcurrencyConflictError: if the record changed since the snapshot.
            ValidationError: if the workload would become negative.
        """
        ...

    @abstractmethod
    async def transfer_workload(
        self, source: StaffMember, target: StaffMember
    ) -> tuple[StaffMember, StaffMember]:
        """Move one unit of workload from source to target, both version-checked.

        Either both records change or neither does.
        """
        ...

    @abstractmethod
    async def update_performance(self, staff_id: int, score: float) -> None:
        ...
