"""Database engine and sessions for invoice and settings storage."""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from pharmabill.core.config import settings


def create_db_engine(url: str) -> Engine:
    """Engine for the given URL.

    File-backed SQLite gets a fresh connection per session, in-memory
    SQLite shares one connection so every session sees the same tables.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_size=5, max_overflow=10, pool_recycle=3600, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(url, connect_args=connect_args, poolclass=NullPool)


engine = create_db_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
