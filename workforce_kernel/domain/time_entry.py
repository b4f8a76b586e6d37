"""
Time entry domain types (``workforce_kernel.domain.time_entry``).

Responsibility
--------------
Pure value objects for a single logged work record: the review state
machine, hours validation and the frozen DTO returned to callers.

Architecture position
---------------------
**Kernel domain layer** -- ZERO I/O.  No imports from ``db/``,
``services/`` or ``selectors/``.

Invariants enforced
-------------------
* ``TIME_ENTRY_TRANSITIONS`` defines the only valid status transitions.
  ``approved`` has no outgoing edges; ``rejected`` loops back to
  ``submitted`` after the owner re-edits.
* Hours are a ``Decimal`` in ``[0, 24]``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import UUID

from workforce_kernel.exceptions import InvalidHoursError


class TimeEntryStatus(str, Enum):
    """Time entry lifecycle states."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


TIME_ENTRY_TRANSITIONS: dict[TimeEntryStatus, frozenset[TimeEntryStatus]] = {
    TimeEntryStatus.DRAFT: frozenset({TimeEntryStatus.SUBMITTED}),
    TimeEntryStatus.SUBMITTED: frozenset({
        TimeEntryStatus.APPROVED,
        TimeEntryStatus.REJECTED,
    }),
    TimeEntryStatus.REJECTED: frozenset({TimeEntryStatus.SUBMITTED}),
    TimeEntryStatus.APPROVED: frozenset(),
}

# Owner may change fields only in these states.
EDITABLE_STATUSES: frozenset[TimeEntryStatus] = frozenset({
    TimeEntryStatus.DRAFT,
    TimeEntryStatus.REJECTED,
})

DELETABLE_STATUSES: frozenset[TimeEntryStatus] = frozenset({
    TimeEntryStatus.DRAFT,
})

EDITABLE_FIELDS: frozenset[str] = frozenset({
    "work_date",
    "project_id",
    "task",
    "hours",
    "billable",
    "description",
})

MIN_HOURS = Decimal("0")
MAX_HOURS = Decimal("24")


def can_transition(current: TimeEntryStatus, target: TimeEntryStatus) -> bool:
    """True if ``current -> target`` is an edge of the state machine."""
    return target in TIME_ENTRY_TRANSITIONS.get(current, frozenset())


def normalize_hours(value: Decimal | int | float | str) -> Decimal:
    """
    Convert ``value`` to Decimal and check it lies in ``[0, 24]``.

    Floats go through ``str`` so 7.5 becomes Decimal("7.5"), not its
    binary expansion.

    Raises:
        InvalidHoursError: if the value is not numeric or out of range.
    """
    try:
        hours = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidHoursError(str(value)) from None

    if not hours.is_finite() or hours < MIN_HOURS or hours > MAX_HOURS:
        raise InvalidHoursError(str(value))
    return hours


@dataclass(frozen=True)
class TimeEntry:
    """Immutable snapshot of a time entry."""

    entry_id: UUID
    employee_id: UUID
    work_date: date
    project_id: UUID
    task: str
    hours: Decimal
    billable: bool
    status: TimeEntryStatus
    description: str | None = None
    reviewer_id: UUID | None = None
    review_comment: str | None = None
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES


@dataclass(frozen=True)
class BulkItemResult:
    """Outcome for one entry of a bulk decision."""

    entry_id: UUID
    decided: bool
    error_code: str | None = None
    entry: TimeEntry | None = None


@dataclass(frozen=True)
class BulkDecisionResult:
    """
    Per-entry results of a bulk decision, in request order.

    Entries are decided independently: one failure never undoes another
    entry's success.
    """

    items: tuple[BulkItemResult, ...]

    @property
    def decided(self) -> tuple[BulkItemResult, ...]:
        return tuple(item for item in self.items if item.decided)

    @property
    def failed(self) -> tuple[BulkItemResult, ...]:
        return tuple(item for item in self.items if not item.decided)

    @property
    def decided_count(self) -> int:
        return len(self.decided)
