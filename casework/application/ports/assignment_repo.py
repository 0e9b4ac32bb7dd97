"""Port interface for assignment persistence."""

from abc import ABC, abstractmethod
from datetime import datetime

from casework.domain.entities.assignment import Assignment


class AssignmentRepository(ABC):
    @abstractmethod
    async def save(self, assignment: Assignment) -> Assignment:
        ...

    @abstractmethod
    async def get_by_id(self, assignment_id: int) -> Assignment | None:
        ...

    @abstractmethod
    async def get_active(self) -> list[Assignment]:
        ...

    @abstractmethod
    async def get_active_for_item(self, item_id: int) -> Assignment | None:
        ...

    @abstractmethod
    async def close(self, assignment_id: int, resolved_at: datetime) -> None:
        ...

    @abstractmethod
    async def supersede(self, assignment_id: int, replacement: Assignment) -> Assignment:
        """Close an active assignment and open its replacement in one step.

        The old link is closed at ``replacement.assigned_at`` and points to
        the new one through ``superseded_by``; the item never has two active
        links.
        """
        ...
