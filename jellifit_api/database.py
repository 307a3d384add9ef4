import logging
import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from . import config

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine with pool settings suited to the target database"""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # Single shared connection, otherwise each thread gets its own empty database
            kwargs["poolclass"] = StaticPool
    else:
        kwargs = {
            "pool_pre_ping": True,  # Test connections before using
            "pool_recycle": config.DB_POOL_RECYCLE,
            "pool_size": config.DB_POOL_SIZE,
            "max_overflow": config.DB_MAX_OVERFLOW,
            "pool_timeout": config.DB_POOL_TIMEOUT,
        }

    try:
        engine = create_engine(database_url, echo=False, **kwargs)
        logger.info(f"✅ Database engine created ({engine.dialect.name})")
    except Exception as e:
        logger.error(f"❌ Failed to create database engine: {e}")
        raise

    if database_url.startswith("sqlite"):

        @event.listens_for(engine, "connect")
        def enable_foreign_keys(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    if config.DB_LOG_SLOW_QUERIES:
        log_slow_queries(engine, config.DB_SLOW_QUERY_THRESHOLD)

    return engine


def log_slow_queries(engine: Engine, threshold: float) -> None:
    """Log a warning for every statement that takes longer than ``threshold`` seconds"""

    @event.listens_for(engine, "before_cursor_execute")
    def start_timer(conn, _cursor, _statement, _parameters, _context, _executemany):
        conn.info.setdefault("statement_started", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def report_slow(conn, _cursor, statement, _parameters, _context, _executemany):
        elapsed = time.perf_counter() - conn.info["statement_started"].pop()
        if elapsed > threshold:
            sql = " ".join(statement.split())
            logger.warning(f"🐌 Slow query on {engine.dialect.name} ({elapsed * 1000:.0f} ms): {sql[:200]}")


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
