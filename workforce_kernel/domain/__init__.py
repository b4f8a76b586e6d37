"""
Pure domain layer: value objects, state machines, routing and arithmetic.

Nothing in this package touches the database.
"""

from workforce_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from workforce_kernel.domain.leave import (
    BalancePosition,
    HalfDayPeriod,
    LeaveBalance,
    LeaveCategory,
    LeaveRequest,
    LeaveRequestStatus,
    compute_day_count,
)
from workforce_kernel.domain.notifications import Notification, NotificationDispatcher
from workforce_kernel.domain.routing import ApprovalRouter
from workforce_kernel.domain.time_entry import TimeEntry, TimeEntryStatus
from workforce_kernel.domain.values import Actor, DecisionOutcome, DirectoryEntry, Role

__all__ = [
    "Actor",
    "ApprovalRouter",
    "BalancePosition",
    "Clock",
    "DecisionOutcome",
    "DeterministicClock",
    "DirectoryEntry",
    "HalfDayPeriod",
    "LeaveBalance",
    "LeaveCategory",
    "LeaveRequest",
    "LeaveRequestStatus",
    "Notification",
    "NotificationDispatcher",
    "Role",
    "SystemClock",
    "TimeEntry",
    "TimeEntryStatus",
    "compute_day_count",
]
