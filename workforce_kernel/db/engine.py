"""
Module: workforce_kernel.db.engine
Responsibility: One process-wide engine and session factory for the
    workforce tables, plus the unit-of-work scope callers wrap every
    portal operation in.
Architecture position: Kernel > DB.  Services never call into this module;
    they receive a Session.  Only entry points and the test suite do.

Invariants enforced:
    - PostgreSQL is the production backend, run at READ COMMITTED.  Ledger
      rows are protected by SELECT ... FOR UPDATE, decisions by
      compare-and-set UPDATEs, so a stricter isolation level is not needed.
    - SQLite (``sqlite://``) is accepted for tests.  pysqlite's implicit
      transaction handling breaks SAVEPOINT, which both the leave decision
      and bulk decisions rely on, so BEGIN is emitted by SQLAlchemy.
    - ``session_scope`` is the only place a commit happens.

Failure modes:
    - RuntimeError when the engine is used before ``init_engine_from_url``.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from workforce_kernel.logging_config import LogContext, configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Engine not initialized. Call init_engine_from_url() first."


def _sqlite_engine(database_url: str, echo: bool) -> Engine:
    # One shared in-memory database for every session, threads included.
    engine = create_engine(
        database_url,
        echo=echo,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def _postgres_engine(database_url: str, echo: bool, **pool_options) -> Engine:
    return create_engine(
        database_url,
        echo=echo,
        poolclass=QueuePool,
        isolation_level="READ COMMITTED",
        **pool_options,
    )


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the process-wide engine and session factory.

    Pool options only apply to server backends; SQLite always uses a
    single static connection.  Calling this again replaces the previous
    engine without disposing it; use ``reset_engine`` first for that.
    """
    global _engine, _SessionFactory

    dialect = make_url(database_url).get_backend_name()
    if dialect == "sqlite":
        _engine = _sqlite_engine(database_url, echo)
    else:
        _engine = _postgres_engine(
            database_url,
            echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=pool_pre_ping,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
        )

    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": dialect, "pool_size": pool_size if dialect != "sqlite" else 1},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Session factory, for code that opens one session per thread."""
    if _SessionFactory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _SessionFactory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    One unit of work: commit on normal exit, roll back on any exception.

    Services only flush, so everything a portal operation did (state
    change, ledger deduction, persisted notifications) commits here
    together.  The exception is re-raised after the rollback.

    Usage:
        with session_scope() as session:
            ApprovalEngine(session).decide_leave_request(actor, request_id, outcome)
    """
    correlation_id = LogContext.get_all().get("correlation_id") or LogContext.new_correlation_id()
    session = get_session()
    with LogContext.bind(correlation_id=correlation_id):
        try:
            yield session
            session.commit()
            logger.debug("unit_of_work_committed")
        except Exception:
            session.rollback()
            logger.warning("unit_of_work_rolled_back", exc_info=True)
            raise
        finally:
            session.close()


def create_tables(engine: Engine | None = None) -> None:
    """Create every workforce table that does not exist yet."""
    from workforce_kernel.db.base import Base
    import workforce_kernel.models  # noqa: F401  (registers every table)

    Base.metadata.create_all(engine or get_engine())


def drop_tables(engine: Engine | None = None) -> None:
    """Drop every workforce table.  Test suites only."""
    from workforce_kernel.db.base import Base
    import workforce_kernel.models  # noqa: F401

    Base.metadata.drop_all(engine or get_engine())


def reset_engine() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionFactory = None


def is_postgres() -> bool:
    return _engine is not None and _engine.dialect.name == "postgresql"
