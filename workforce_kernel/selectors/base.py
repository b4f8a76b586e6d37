"""
Module: workforce_kernel.selectors.base
Responsibility: Read side of the kernel: approval queues, ledger views and
    notification lists.  Selectors never add, delete, flush or commit.
Architecture position: Kernel > Selectors.  May import from db/, models/
    and domain/.  Never imports services/.

Invariants enforced:
    - Selectors return frozen DTOs, never ORM instances.
    - Fresh reads: ``_fetch`` uses ``populate_existing`` so a session that
      already holds a row in its identity map (a reviewer's long-lived
      session, say) sees the stored status, not the one it loaded earlier.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy import Select
from sqlalchemy.engine import Result
from sqlalchemy.orm import Session

from workforce_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """Holds the caller's Session; subclasses only read."""

    def __init__(self, session: Session):
        self.session = session

    def _fetch(self, stmt: Select) -> Result:
        return self.session.execute(stmt.execution_options(populate_existing=True))
