"""
Database engine and session management.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from habitquest.constants import DATABASE_URL
from habitquest.exceptions import ConflictError

logger = logging.getLogger("habitquest.database")


def enable_sqlite_savepoints(target_engine) -> None:
    """
    Let SQLAlchemy own BEGIN on pysqlite connections.
    Without this SAVEPOINT / ROLLBACK TO does not behave on SQLite.
    """
    @event.listens_for(target_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(target_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
if DATABASE_URL.startswith("sqlite"):
    enable_sqlite_savepoints(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: one session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, operation: str):
    """
    Run a block as one transaction: commit on success, roll back on any error.

    A version mismatch on a versioned row (concurrent writer) surfaces
    as ConflictError.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning(f"{operation}: concurrent update detected, rolled back")
        raise ConflictError(f"{operation} conflicted with a concurrent update") from exc
    except Exception:
        db.rollback()
        raise
