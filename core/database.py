import logging
import os
import threading
from contextlib import contextmanager

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

load_dotenv()

log = logging.getLogger(__name__)

MOCK_DATABASE_URL = "sqlite+pysqlite:///:memory:"

# Without a configured database the yard runs on process-local mock data
DATABASE_URL = os.getenv("DATABASE_URL") or MOCK_DATABASE_URL
MOCK_MODE = DATABASE_URL == MOCK_DATABASE_URL


def build_engine(database_url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across sessions."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(database_url, pool_pre_ping=True)


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Every mock-mode session shares one SQLite connection, so one session's
# rollback would discard another's uncommitted work; only one may be open.
_mock_session_lock = threading.Lock()


@contextmanager
def session_scope():
    """Open a session and close it afterwards; in mock mode also hold the process-wide lock."""
    locked = MOCK_MODE
    if locked:
        _mock_session_lock.acquire()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        if locked:
            _mock_session_lock.release()


def get_db():
    """
    Dependency to provide a DB session for FastAPI routes.
    Ensures sessions are closed automatically to prevent memory leaks.
    """
    with session_scope() as db:
        yield db
