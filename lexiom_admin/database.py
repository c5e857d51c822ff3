"""Database engine, session factory and declarative base"""
from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from lexiom_admin.config import settings


def _engine_kwargs(url: str) -> Dict[str, Any]:
    """Pool and timeout options per backend.

    SQLite (tests, local dev) gets a single-thread-relaxed connection; PostgreSQL
    gets a bounded pool and a server-side statement timeout so a stalled store
    round-trip fails the request instead of hanging it.
    """
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
        "pool_recycle": settings.DATABASE_POOL_RECYCLE,
        "pool_pre_ping": True,
        "connect_args": {
            "options": f"-c statement_timeout={settings.DATABASE_STATEMENT_TIMEOUT_MS}",
        },
    }


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
