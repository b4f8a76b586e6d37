"""
Module: workforce_kernel.db.base
Responsibility: Declarative base for the workforce tables.  Fixes how
    identifiers, quantities and instants are stored so every model maps the
    same Python type to the same column type.
Architecture position: Kernel > DB.  Imported by every model file; imports
    nothing from the rest of the kernel.

Invariants enforced:
    - Identifiers are uuid4 values stored as 36-character strings, so the
      same schema runs on PostgreSQL and on the in-memory SQLite used by
      the test suite.
    - Hours and leave days are Decimal columns (Numeric(38, 9)).  A float
      never reaches the ledger.
    - Instants are timezone-aware.
    - Every tracked row records who created it; the system actor is used
      for onboarding and configuration seeding.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Integer, MetaData, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

# Named check and unique constraints are spelled out in each model; only
# foreign keys and primary keys get generated names.
NAMING_CONVENTION = {
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class UUIDString(TypeDecorator):
    """UUID column stored as String(36).

    Accepts a ``uuid.UUID`` or its canonical string on the way in and always
    hands back a ``uuid.UUID``.  A malformed string fails at bind time
    rather than being written.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, PyUUID):
            value = PyUUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, PyUUID):
            return value
        return PyUUID(value)


class UTCDateTime(TypeDecorator):
    """Timezone-aware instant that always reads back in UTC.

    SQLite keeps no offset, so a reloaded value would otherwise come back
    naive.  Naive values on the way in are taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base: uuid4 ``id`` plus the shared type map."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: UTCDateTime(),
        PyUUID: UUIDString(),
        int: Integer,
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"


class TrackedBase(Base):
    """
    Abstract base for rows people create and change.

    ``created_at`` falls back to the database clock when a service does not
    stamp it from its injected Clock.  ``updated_at`` moves on every UPDATE
    issued through the ORM; compare-and-set UPDATEs set ``updated_by_id``
    explicitly.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    created_by_id: Mapped[PyUUID] = mapped_column(nullable=False)
    updated_by_id: Mapped[PyUUID | None] = mapped_column(nullable=True)


UUID = PyUUID
