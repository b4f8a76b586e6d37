"""
Identity and decision value objects shared by every lifecycle.

The kernel never authenticates anyone.  Callers hand in an ``Actor`` that
was already resolved from a session, and the directory supplies
``DirectoryEntry`` rows describing who reports to whom.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class Role(str, Enum):
    """Portal roles as issued by the identity collaborator."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class DecisionOutcome(str, Enum):
    """The two outcomes a reviewer may record."""

    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Actor:
    """An authenticated caller: who they are and which role they act in."""

    user_id: UUID
    role: Role = Role.EMPLOYEE

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class DirectoryEntry:
    """Directory view of an employee, as needed for routing and messages."""

    employee_id: UUID
    first_name: str
    last_name: str
    role: Role = Role.EMPLOYEE
    manager_id: UUID | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# created_by_id for rows written by seeding and onboarding jobs.
SYSTEM_ACTOR_ID = UUID("00000000-0000-0000-0000-000000000000")
