"""Database engine and session factory.

The drafting core never writes to storage itself; this module is what
callers use to persist the drafts it builds.
"""

from contextlib import contextmanager
from typing import Generator, Optional, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings

T = TypeVar("T")


def build_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create an engine for ``url`` (default: DATABASE_URL setting).

    Pool settings only apply to server databases, not SQLite.
    """
    settings = get_settings()
    url = url or settings.DATABASE_URL

    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.DATABASE_ECHO if echo is None else echo,
    }
    if not url.startswith("sqlite"):
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    return create_engine(url, **engine_kwargs)


engine = build_engine()

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


@contextmanager
def get_db_session(factory: sessionmaker = SessionLocal) -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.add(orchestrator.create_draft(business))

    Automatically commits on success, rolls back on exception.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def persist_draft(session: Session, draft: T) -> T:
    """Add a draft (and its cloned subgraph) to ``session`` and flush it.

    Errors from the database, such as an IntegrityError when the live row
    already has a draft, propagate unchanged.
    """
    session.add(draft)
    session.flush()
    return draft
