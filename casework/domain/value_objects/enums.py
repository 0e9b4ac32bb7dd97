"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    EMERGENCY = "emergency"

    def is_urgent(self) -> bool:
        return self in (Priority.CRITICAL, Priority.EMERGENCY)


class ItemKind(str, Enum):
    COMPLAINT = "complaint"
    TASK = "task"


class ItemStatus(str, Enum):
    UNASSIGNED = "unassigned"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    ESCALATED = "escalated"
    CLOSED = "closed"

    def is_terminal(self) -> bool:
        return self in (ItemStatus.RESOLVED, ItemStatus.CLOSED)


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    ON_BREAK = "on_break"
    OFF_DUTY = "off_duty"
    ON_LEAVE = "on_leave"


class LoadState(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    OVERLOADED = "overloaded"
    OFFLINE = "offline"


class Designation(str, Enum):
    TRAINEE = "trainee"
    JUNIOR = "junior"
    OFFICER = "officer"
    SENIOR = "senior"
    SUPERVISOR = "supervisor"


class AssignmentSource(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"
    REBALANCE = "rebalance"


class SlaStatus(str, Enum):
    ON_TIME = "on_time"
    AT_RISK = "at_risk"
    OVERDUE = "overdue"
    COMPLIANT = "compliant"
    BREACHED = "breached"


class MoveOutcome(str, Enum):
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    STALE = "stale"
    REJECTED = "rejected"
