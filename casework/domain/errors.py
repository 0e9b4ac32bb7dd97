"""Domain errors raised by the routing core."""

from __future__ import annotations

NO_ELIGIBLE_STAFF = "no_eligible_staff"


class RoutingError(Exception):
    """Base class for every error the routing core raises."""


class ValidationError(RoutingError, ValueError):
    """Malformed input — rejected before anything is written."""


class NotFoundError(RoutingError, LookupError):
    """A referenced staff member, item or assignment does not exist."""


class NoEligibleStaffError(RoutingError):
    """No staff member passed the hard constraints for an item.

    This is a business outcome, not a fault: callers queue the item for
    manual assignment.
    """

    def __init__(self, item_id: int | None, reason: str = NO_ELIGIBLE_STAFF):
        self.item_id = item_id
        self.reason = reason
        super().__init__(f"Item {item_id}: {reason}")


class ConcurrencyConflictError(RoutingError):
    """A staff record changed between snapshot read and workload write.

    Callers retry the whole selection against a fresh snapshot.
    """

    def __init__(
        self,
        staff_id: int,
        expected_version: int,
        actual_version: int | None = None,
    ):
        self.staff_id = staff_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Staff {staff_id} changed concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )
