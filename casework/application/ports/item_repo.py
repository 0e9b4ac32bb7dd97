"""Port interface for complaint / task persistence."""

from abc import ABC, abstractmethod

from casework.domain.entities.assignable_item import AssignableItem


class ItemRepository(ABC):
    @abstractmethod
    async def save(self, item: AssignableItem) -> AssignableItem:
        ...

    @abstractmethod
    async def get_by_id(self, item_id: int) -> AssignableItem | None:
        ...

    @abstractmethod
    async def get_by_ids(self, item_ids: list[int]) -> dict[int, AssignableItem]:
        ...

    @abstractmethod
    async def get_unassigned(self) -> list[AssignableItem]:
        """Open items with no staff linkage, oldest first."""
        ...

    @abstractmethod
    async def get_open(self) -> list[AssignableItem]:
        """Every non-terminal item."""
        ...

    @abstractmethod
    async def get_by_staff(self, staff_id: int) -> list[AssignableItem]:
        """Every item (open or terminal) currently linked to the staff member."""
        ...

    @abstractmethod
    async def update(self, item: AssignableItem) -> AssignableItem:
        """Persist status, assignment linkage, resolution time and rating.

        Deadlines are never rewritten.
        """
        ...
