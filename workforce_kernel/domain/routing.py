"""
ApprovalRouter -- who may decide what.

Responsibility:
    Pure authorization rules for reviews.  A reviewer may decide an item
    when they are an admin or the direct manager of the item's owner.
    Bulk decisions are admin-only because only admins see the
    cross-organization time entry table.

Architecture position:
    Kernel > Domain -- no storage, no session, no ambient "current user".
    The caller passes the reviewer and the subject owner explicitly.

Failure modes:
    - UnauthorizedError from the ``authorize_*`` helpers.  There is no
      retry; an authorization failure is terminal for that call.
"""

from __future__ import annotations

from workforce_kernel.domain.values import Actor, DirectoryEntry, Role
from workforce_kernel.exceptions import UnauthorizedError

QUEUE_ROLES: frozenset[Role] = frozenset({Role.MANAGER, Role.ADMIN})


class ApprovalRouter:
    """Direct-manager-or-admin routing rule."""

    def can_decide(self, reviewer: Actor, subject_owner: DirectoryEntry) -> bool:
        if reviewer.role == Role.ADMIN:
            return True
        return (
            subject_owner.manager_id is not None
            and subject_owner.manager_id == reviewer.user_id
        )

    def can_bulk_decide(self, reviewer_role: Role) -> bool:
        return reviewer_role == Role.ADMIN

    def can_view_queue(self, role: Role) -> bool:
        return role in QUEUE_ROLES

    def authorize_decision(
        self,
        reviewer: Actor,
        subject_owner: DirectoryEntry,
        action: str,
    ) -> None:
        if not self.can_decide(reviewer, subject_owner):
            raise UnauthorizedError(
                str(reviewer.user_id),
                action,
                f"not the direct manager of {subject_owner.employee_id} "
                "and not an admin",
            )

    def authorize_bulk(self, reviewer: Actor, action: str) -> None:
        if not self.can_bulk_decide(reviewer.role):
            raise UnauthorizedError(
                str(reviewer.user_id), action, "bulk decisions are admin-only",
            )

    def authorize_queue(self, reviewer: Actor) -> None:
        if not self.can_view_queue(reviewer.role):
            raise UnauthorizedError(
                str(reviewer.user_id),
                "view approval queue",
                "only managers and admins review",
            )
