"""
Database connection and session management.
"""
import logging
from contextlib import contextmanager
from typing import Generator
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from .models import Base

logger = logging.getLogger(__name__)


def _ensure_database_exists(database_url: str):
    """Create the MySQL database if it does not already exist."""
    url = make_url(database_url)
    db_name = url.database
    # Connect to the server without selecting the database
    tmp_engine = create_engine(url.set(database=None), pool_pre_ping=True)
    with tmp_engine.connect() as conn:
        conn.execute(text(f"CREATE DATABASE IF NOT EXISTS `{db_name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"))
        conn.commit()
    tmp_engine.dispose()


def _on_sqlite_connect(dbapi_connection, connection_record):
    # let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest correctly
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine with the options each backend needs."""
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every session sees an empty DB
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        event.listen(engine, "connect", _on_sqlite_connect)
        event.listen(engine, "begin", _on_sqlite_begin)
        return engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=echo,
    )


class Database:
    """
    Owns the engine and session factory for one store.
    Passed explicitly to the app and to tests instead of living at module level.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.engine = build_engine(database_url, echo=echo)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self):
        """Initialize database by creating all tables."""
        if make_url(self.database_url).get_backend_name() == "mysql":
            _ensure_database_exists(self.database_url)
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ready (%s)", self.engine.url.render_as_string(hide_password=True))

    def drop_all(self):
        Base.metadata.drop_all(bind=self.engine)

    def get_db(self) -> Generator[Session, None, None]:
        """
        Get database session.
        Use as dependency injection in FastAPI.
        """
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def session(self):
        """
        Context manager for database session.
        Use for non-FastAPI contexts.
        """
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self):
        self.engine.dispose()
