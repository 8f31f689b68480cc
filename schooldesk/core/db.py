# schooldesk/core/db.py - SQLAlchemy database setup with connection pooling
from sqlalchemy import create_engine, text, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool, QueuePool
from typing import Generator, Optional
import logging
import time
import threading
from contextlib import contextmanager

from schooldesk.core.config import settings
from schooldesk.core.exceptions import SchoolDeskError

logger = logging.getLogger(__name__)


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for ``url`` with the pool and driver settings this
    application relies on.

    SQLite connections get the pysqlite transaction recipe so that
    SAVEPOINTs (``Session.begin_nested``) behave; the payment flow depends
    on them.
    """
    is_sqlite = url.startswith("sqlite")

    engine_args = {
        "url": url,
        "echo": echo,
    }

    if is_sqlite:
        engine_args.update({
            "connect_args": {
                "check_same_thread": False,
                "timeout": 30,  # 30 second timeout for SQLite locks
            },
        })
        # In-memory databases must share a single connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            engine_args["poolclass"] = StaticPool
    else:
        engine_args.update({
            "poolclass": QueuePool,
            "pool_size": settings.DATABASE_POOL_SIZE,
            "max_overflow": settings.DATABASE_MAX_OVERFLOW,
            "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
            "pool_recycle": settings.DATABASE_POOL_RECYCLE,
            "pool_pre_ping": True,  # Verify connections before use
            "connect_args": {
                "connect_timeout": 10,
                "application_name": f"schooldesk_{settings.ENV}",
                "options": "-c timezone=UTC",
            },
        })

    engine = create_engine(**engine_args)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            # Hand transaction control to SQLAlchemy instead of pysqlite
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA temp_store=memory")
            cursor.close()

        @event.listens_for(engine, "begin")
        def do_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return engine
class DatabaseManager:
    """Lazily built engine and session factory shared by the API and scripts"""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.DATABASE_URL
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self.engine is not None

    def initialize(self):
        if self.initialized:
            return

        with self._lock:
            if self.initialized:
                return

            engine = build_engine(self.url, echo=settings.DATABASE_ECHO or settings.DEV_LOG_SQL)
            if settings.is_development:
                self._watch_slow_queries(engine, settings.DATABASE_SLOW_QUERY_MS)
            self._log_server_version(engine)

            self.SessionLocal = sessionmaker(
                bind=engine,
                autoflush=False,
                expire_on_commit=False,
            )
            self.engine = engine
            logger.info(f"Database ready ({engine.dialect.name})")

    @staticmethod
    def _watch_slow_queries(engine: Engine, threshold_ms: int):
        @event.listens_for(engine, "before_cursor_execute")
        def start_timer(conn, cursor, statement, parameters, context, executemany):
            context._query_start_time = time.perf_counter()

        @event.listens_for(engine, "after_cursor_execute")
        def report_slow(conn, cursor, statement, parameters, context, executemany):
            elapsed_ms = (time.perf_counter() - context._query_start_time) * 1000
            if elapsed_ms > threshold_ms:
                logger.warning(f"Slow query ({elapsed_ms:.0f}ms): {statement[:100]}...")

    @staticmethod
    def _log_server_version(engine: Engine):
        version_sql = "SELECT sqlite_version()" if engine.dialect.name == "sqlite" else "SELECT version()"
        try:
            with engine.connect() as conn:
                version = conn.execute(text(version_sql)).scalar()
        except SQLAlchemyError as e:
            logger.error(f"Database connection test failed: {e}")
            raise
        logger.info(f"Connected to {engine.dialect.name}: {str(version)[:50]}")

    def get_session(self) -> Generator[Session, None, None]:
        """
        Yield a request-scoped session. Services commit their own units of
        work; anything left open when the request fails is rolled back.
        """
        self.initialize()
        session = self.SessionLocal()
        try:
            yield session
        except SchoolDeskError:
            session.rollback()
            raise
        except Exception as e:
            session.rollback()
            logger.error(f"Request session rolled back: {e}")
            raise
        finally:
            session.close()

    @contextmanager
    def transaction(self):
        """
        Session that commits on exit, for scripts working outside a request.

            with db_manager.transaction() as session:
                FeeService(session).apply_fee_structure(structure_id)
        """
        self.initialize()
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise
        finally:
            session.close()

    def health_check(self) -> dict:
        try:
            self.initialize()
            started = time.perf_counter()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return {"status": "unhealthy", "error": str(e)}
        return {
            "status": "healthy",
            "dialect": self.engine.dialect.name,
            "response_time_ms": round((time.perf_counter() - started) * 1000, 2),
        }

    def close(self):
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self.SessionLocal = None
            logger.info("Database connections closed")


db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request"""
    yield from db_manager.get_session()


def get_engine() -> Engine:
    db_manager.initialize()
    return db_manager.engine


def health_check() -> dict:
    return db_manager.health_check()


__all__ = [
    "build_engine",
    "get_db",
    "get_engine",
    "health_check",
    "db_manager",
    "DatabaseManager",
]
