"""
Database connection and session management.

Uses synchronous SQLAlchemy (via SQLModel) with NullPool for PostgreSQL.
Connection pooling delegated to pgBouncer at infrastructure level.

The Session is the unit of work: domain operations receive it from the
caller and group their writes with `transaction()`, which composes with
any transaction the caller already holds.
"""

from typing import Generator
from contextlib import contextmanager
from urllib.parse import urlparse
import logging

from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import Session, create_engine

from orgspace.core.config import settings

logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    """Ensure PostgreSQL URLs use the psycopg (v3) driver."""
    if not url:
        raise ValueError("DATABASE_URL is not configured")

    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql+psycopg://") or url.startswith("sqlite"):
        return url
    raise ValueError("DATABASE_URL must start with postgresql://, postgresql+psycopg:// or sqlite")


def enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let SQLAlchemy own BEGIN on SQLite connections.

    pysqlite defers BEGIN until the first DML statement, which breaks
    SAVEPOINT semantics used by nested `transaction()` blocks.

    SQLite ignores FOR UPDATE, so transactions start with BEGIN IMMEDIATE:
    the write lock is taken up front and a second writer waits for the
    first to commit instead of reading a row that is about to change.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_conn, connection_record):  # noqa: ARG001
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str) -> Engine:
    """Create an engine configured for the target dialect."""
    url = normalize_database_url(url)

    if url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False}, echo=False)
        enable_sqlite_savepoints(engine)
        return engine

    engine = create_engine(
        url,
        poolclass=NullPool,       # Let pgBouncer handle all pooling
        connect_args={
            "prepare_threshold": None,  # Disable server-side prepared statements (pgBouncer)
        },
        pool_pre_ping=True,
        echo=False,
    )
    return engine.execution_options(postgresql_prepared_statement_cache_size=0)


engine = build_engine(settings.DATABASE_URL)

db_url = urlparse(settings.DATABASE_URL)
logger.info("Database engine configured (driver=%s, host=%s)", db_url.scheme, db_url.hostname or "local")

# expire_on_commit=False keeps loaded attributes usable after a transaction
# block commits (services return ORM objects to the HTTP layer).
SessionLocal = sessionmaker(
    bind=engine,
    class_=Session,
    expire_on_commit=False,
    autoflush=False,
)


@contextmanager
def transaction(session: Session) -> Generator[Session, None, None]:
    """
    Run a block atomically on the caller's unit of work.

    - No transaction open: begins one, commits on success.
    - Transaction already open: uses a SAVEPOINT so the block can be
      rolled back alone while the outer transaction decides the commit.

    Any exception rolls the block back and propagates.
    """
    if session.in_transaction():
        with session.begin_nested():
            yield session
    else:
        with session.begin():
            yield session


def verify_migrations() -> None:
    """Verify that alembic migrations have been applied (PostgreSQL only)."""
    if engine.dialect.name != "postgresql":
        return

    logger.info("Verifying database migrations...")
    with Session(engine) as session:
        exists = session.execute(text("""
            SELECT EXISTS (
                SELECT FROM information_schema.tables
                WHERE table_schema = 'public'
                AND table_name = 'alembic_version'
            )
        """)).scalar()

        if not exists:
            logger.error("Alembic version table not found. Run 'alembic upgrade head'.")
            raise RuntimeError(
                "Database schema not initialized. "
                "Please run 'alembic upgrade head' before starting the application."
            )

        current_version = session.execute(text("SELECT version_num FROM alembic_version")).scalar()
        if current_version:
            logger.info("Database migrations verified (current: %s)", current_version)
        else:
            logger.warning("No migration version found in alembic_version table")


def get_db() -> Generator[Session, None, None]:
    # Request-scoped session. Services commit their own transaction blocks;
    # anything left pending (plain reads) is committed here.
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
