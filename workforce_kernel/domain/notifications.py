"""
Notification contract and message builders.

Responsibility:
    Defines the ``NotificationDispatcher`` protocol the lifecycles call after
    a visible transition, and the pure functions that turn a transition into
    a ``(title, message)`` pair.  Delivery itself lives outside the domain.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  The persistent dispatcher is
    ``services/notification_service.py``; tests inject a recording stub.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol, Sequence, runtime_checkable
from uuid import UUID

from workforce_kernel.domain.values import DecisionOutcome

# Projects named in a consolidated bulk message before "and N more".
MAX_LISTED_PROJECTS = 3


@runtime_checkable
class NotificationDispatcher(Protocol):
    """Anything that can deliver a message to one recipient."""

    def dispatch(self, recipient_id: UUID, title: str, message: str) -> None:
        ...


@dataclass(frozen=True)
class Notification:
    """Immutable snapshot of a delivered notification."""

    notification_id: UUID
    recipient_id: UUID
    title: str
    message: str
    is_read: bool
    created_at: datetime | None = None


def format_hours(hours: Decimal) -> str:
    """7.500000000 -> '7.5', 8 -> '8'."""
    return format(hours.normalize(), "f")


def format_day(day: date) -> str:
    return day.isoformat()


def _outcome_word(outcome: DecisionOutcome) -> str:
    return "Approved" if outcome == DecisionOutcome.APPROVED else "Rejected"


def _comment_suffix(comment: str | None) -> str:
    return f" Comment: {comment}" if comment else ""


def timesheet_submitted(
    owner_name: str, project_name: str, hours: Decimal, work_date: date,
) -> tuple[str, str]:
    return (
        "New Timesheet Submitted",
        f"{owner_name} has submitted a timesheet for {project_name} "
        f"({format_hours(hours)}h on {format_day(work_date)}) for your review.",
    )


def timesheet_decided(
    project_name: str,
    hours: Decimal,
    work_date: date,
    outcome: DecisionOutcome,
    comment: str | None,
) -> tuple[str, str]:
    return (
        f"Timesheet {_outcome_word(outcome)}",
        f"Your timesheet for {project_name} ({format_hours(hours)}h on "
        f"{format_day(work_date)}) has been {outcome.value}."
        f"{_comment_suffix(comment)}",
    )


def timesheets_bulk_decided(
    count: int,
    project_names: Sequence[str],
    outcome: DecisionOutcome,
    comment: str | None,
) -> tuple[str, str]:
    """
    One consolidated message per owner after a bulk decision.

    Project names are de-duplicated in first-seen order; more than
    ``MAX_LISTED_PROJECTS`` collapse into "and N more".
    """
    unique: list[str] = []
    for name in project_names:
        if name not in unique:
            unique.append(name)

    if len(unique) > MAX_LISTED_PROJECTS:
        listed = ", ".join(unique[:MAX_LISTED_PROJECTS])
        project_list = f"{listed} and {len(unique) - MAX_LISTED_PROJECTS} more"
    else:
        project_list = ", ".join(unique)

    plural = count > 1
    return (
        f"{count} Timesheet{'s' if plural else ''} {_outcome_word(outcome)}",
        f"{count} of your timesheet entries for {project_list} "
        f"{'have' if plural else 'has'} been {outcome.value}."
        f"{_comment_suffix(comment)}",
    )


def leave_requested(
    owner_name: str,
    category_name: str,
    start_date: date,
    end_date: date,
    backup_name: str | None = None,
) -> tuple[str, str]:
    backup_text = f" Backup: {backup_name}." if backup_name else ""
    return (
        "New Leave Request",
        f"{owner_name} has requested {category_name} from "
        f"{format_day(start_date)} to {format_day(end_date)} for your review."
        f"{backup_text}",
    )


def backup_assigned(
    owner_name: str, category_name: str, start_date: date, end_date: date,
) -> tuple[str, str]:
    return (
        "Backup Assignment",
        f"You have been assigned as backup for {owner_name} during their "
        f"{category_name} from {format_day(start_date)} to "
        f"{format_day(end_date)}.",
    )


def leave_decided(
    category_name: str,
    start_date: date,
    end_date: date,
    outcome: DecisionOutcome,
    comment: str | None,
) -> tuple[str, str]:
    return (
        f"Leave Request {_outcome_word(outcome)}",
        f"Your {category_name} request from {format_day(start_date)} to "
        f"{format_day(end_date)} has been {outcome.value}."
        f"{_comment_suffix(comment)}",
    )


def leave_cancelled(
    owner_name: str, category_name: str, start_date: date, end_date: date,
) -> tuple[str, str]:
    return (
        "Leave Request Cancelled",
        f"{owner_name} has cancelled their {category_name} request from "
        f"{format_day(start_date)} to {format_day(end_date)}.",
    )
