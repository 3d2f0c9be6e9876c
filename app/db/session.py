"""Database engine and session factory.

The import worker runs in its own thread, so SQLite connections must be
shareable across threads and wait for the writer lock instead of failing.
"""
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.models.base import Base
from app.db.db_url import resolve_db_url

SQLITE_BUSY_TIMEOUT = 30  # seconds


def build_engine(db_url: str) -> Engine:
    """Engine for db_url (relative SQLite paths resolved against the project root)."""
    resolved = resolve_db_url(db_url)
    connect_args = {}
    if resolved.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
    return create_engine(
        resolved,
        pool_pre_ping=True,  # Verify connections before using
        echo=False,  # Set to True for SQL query logging
        connect_args=connect_args,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def check_db_connection(bind: Optional[Engine] = None) -> bool:
    """Check if database connection is available."""
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def init_db(bind: Optional[Engine] = None) -> None:
    """Create every table on Base.metadata (Alembic owns the schema in production)."""
    import app.models  # noqa: F401  (register every model on Base.metadata)

    Base.metadata.create_all(bind=bind or engine)
