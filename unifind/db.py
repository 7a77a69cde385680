"""
Database Engine and Sessions

Builds the SQLAlchemy engine and session factory used by the stores and the
workflow engine.
"""
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from unifind.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _install_sqlite_pragmas(engine: Engine) -> None:
    """
    Make SQLite behave like a transactional store.

    pysqlite's own transaction handling is disabled so that every transaction
    starts with BEGIN IMMEDIATE: writers take the database lock up front and
    concurrent workflow operations serialize instead of racing on stale reads.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(url: str | None = None) -> Engine:
    """Create an engine for `url` (defaults to settings.DATABASE_URL)."""
    url = url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.SQLITE_BUSY_TIMEOUT,
            },
        )
        _install_sqlite_pragmas(engine)
    else:
        engine = create_engine(
            url,
            pool_pre_ping=True,  # Verify connections before using
            pool_recycle=1800,
        )

    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables."""
    # Registers the mapped classes on Base.metadata
    from unifind.storage import tables  # noqa: F401

    Base.metadata.create_all(engine)


engine = create_db_engine()
SessionLocal = create_session_factory(engine)
