"""
Leave domain types (``workforce_kernel.domain.leave``).

Responsibility
--------------
Pure value objects for leave: the request state machine, the day-count
formula, and ``BalancePosition`` -- the arithmetic behind every ledger
row.  ``BalanceLedger`` delegates all math here so the balance equation
can be property-tested without a database.

Architecture position
---------------------
**Kernel domain layer** -- ZERO I/O.

Invariants enforced
-------------------
* ``LEAVE_TRANSITIONS``: a request leaves ``pending`` exactly once and
  every other state is terminal.
* Day count is ``0.5`` for a half day, otherwise the inclusive calendar
  span ``(end - start).days + 1``.  Weekends and holidays are counted.
* ``BalancePosition``: ``balance == allocated - used`` for every value
  that can be constructed through ``opening``/``deduct``/``reverse``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from workforce_kernel.exceptions import InvalidLeaveRequestError


class LeaveRequestStatus(str, Enum):
    """Leave request lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


LEAVE_TRANSITIONS: dict[LeaveRequestStatus, frozenset[LeaveRequestStatus]] = {
    LeaveRequestStatus.PENDING: frozenset({
        LeaveRequestStatus.APPROVED,
        LeaveRequestStatus.REJECTED,
        LeaveRequestStatus.CANCELLED,
    }),
    LeaveRequestStatus.APPROVED: frozenset(),
    LeaveRequestStatus.REJECTED: frozenset(),
    LeaveRequestStatus.CANCELLED: frozenset(),
}

TERMINAL_LEAVE_STATUSES: frozenset[LeaveRequestStatus] = frozenset({
    LeaveRequestStatus.APPROVED,
    LeaveRequestStatus.REJECTED,
    LeaveRequestStatus.CANCELLED,
})


class HalfDayPeriod(str, Enum):
    """Which half of the day a half-day request covers."""

    AM = "AM"
    PM = "PM"


HALF_DAY = Decimal("0.5")


def compute_day_count(start_date: date, end_date: date, half_day: bool) -> Decimal:
    """
    Number of leave days a request consumes.

    >>> compute_day_count(date(2025, 3, 3), date(2025, 3, 7), False)
    Decimal('5')
    >>> compute_day_count(date(2025, 3, 3), date(2025, 3, 3), True)
    Decimal('0.5')
    """
    if half_day:
        return HALF_DAY
    return Decimal((end_date - start_date).days + 1)


def validate_leave_window(
    start_date: date,
    end_date: date,
    half_day: bool,
    half_day_period: HalfDayPeriod | None,
) -> None:
    """
    Check the date range and half-day fields are consistent.

    Raises:
        InvalidLeaveRequestError: end before start, or the half-day period
            given without the flag (or missing with it).
    """
    if end_date < start_date:
        raise InvalidLeaveRequestError(
            f"end date {end_date} is before start date {start_date}"
        )
    if half_day and half_day_period is None:
        raise InvalidLeaveRequestError("half-day requests need an AM/PM period")
    if not half_day and half_day_period is not None:
        raise InvalidLeaveRequestError(
            "half-day period given for a full-day request"
        )


@dataclass(frozen=True)
class BalancePosition:
    """
    Allocated / used / remaining days for one ledger row.

    Instances are only produced by ``opening``, ``deduct`` and ``reverse``,
    each of which keeps ``balance == allocated - used``.
    """

    allocated: Decimal
    used: Decimal
    balance: Decimal

    @classmethod
    def opening(cls, allocated: Decimal) -> BalancePosition:
        if allocated < 0:
            raise ValueError(f"Allocation cannot be negative: {allocated}")
        return cls(allocated=allocated, used=Decimal("0"), balance=allocated)

    @property
    def is_consistent(self) -> bool:
        return self.balance == self.allocated - self.used

    def can_cover(self, days: Decimal) -> bool:
        return self.balance >= days

    def deduct(self, days: Decimal) -> BalancePosition:
        """Return the position after consuming ``days``."""
        if days <= 0:
            raise ValueError(f"Deduction must be positive: {days}")
        if not self.can_cover(days):
            raise ValueError(
                f"Deduction of {days} exceeds balance {self.balance}"
            )
        return BalancePosition(
            allocated=self.allocated,
            used=self.used + days,
            balance=self.balance - days,
        )

    def reverse(self, days: Decimal) -> BalancePosition:
        """Return the position after giving ``days`` back."""
        if days <= 0:
            raise ValueError(f"Reversal must be positive: {days}")
        if days > self.used:
            raise ValueError(f"Reversal of {days} exceeds usage {self.used}")
        return BalancePosition(
            allocated=self.allocated,
            used=self.used - days,
            balance=self.balance + days,
        )


@dataclass(frozen=True)
class LeaveCategory:
    """A kind of leave and its policy flags (read-only to the kernel)."""

    category_id: UUID
    name: str
    is_paid: bool = True
    requires_approval: bool = True
    requires_attachment: bool = False
    default_allocation: Decimal = Decimal("0")


@dataclass(frozen=True)
class LeaveBalance:
    """Immutable snapshot of a ledger row."""

    employee_id: UUID
    year: int
    category_id: UUID
    allocated: Decimal
    used: Decimal
    balance: Decimal

    @property
    def position(self) -> BalancePosition:
        return BalancePosition(self.allocated, self.used, self.balance)


@dataclass(frozen=True)
class LeaveRequest:
    """Immutable snapshot of a leave request."""

    request_id: UUID
    employee_id: UUID
    category_id: UUID
    start_date: date
    end_date: date
    half_day: bool
    day_count: Decimal
    reason: str
    status: LeaveRequestStatus
    half_day_period: HalfDayPeriod | None = None
    backup_employee_id: UUID | None = None
    attachment_ref: str | None = None
    reviewer_id: UUID | None = None
    review_comment: str | None = None
    reviewed_at: datetime | None = None
    ledger_year: int | None = None
