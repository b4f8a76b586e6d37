"""
BaseService -- shared constructor and lookups for the write side.

Responsibility:
    Holds the caller's Session and the injected Clock, and turns "row not
    found" into the kernel's typed NotFound errors in one place.

Architecture position:
    Kernel > Services.

Invariants enforced:
    Services flush; they never commit or roll back the caller's
    transaction.  A service may open a SAVEPOINT (``session.begin_nested()``)
    around a sub-unit that must succeed or fail as one: the leave decision,
    each item of a bulk decision, a persisted notification, a ledger row
    insert.

Failure modes:
    - A subclass calling ``session.commit()`` would split the leave
      decision's status write from its ledger deduction.
"""

from abc import ABC
from typing import Callable, Generic, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from workforce_kernel.db.base import Base
from workforce_kernel.domain.clock import Clock, SystemClock
from workforce_kernel.exceptions import NotFoundError

ModelType = TypeVar("ModelType", bound=Base)
RowType = TypeVar("RowType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Session + Clock holder for every write-side service.

    Every timestamp a service writes (created_at, submitted_at,
    reviewed_at) is read from ``self.clock``.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()

    def _get_or_raise(
        self,
        model: type[RowType],
        row_id: UUID,
        not_found: Callable[[str], NotFoundError],
    ) -> RowType:
        row = self.session.get(model, row_id)
        if row is None:
            raise not_found(str(row_id))
        return row
