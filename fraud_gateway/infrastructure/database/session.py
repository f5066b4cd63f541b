"""Database engine construction and the session factory handed to repositories"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from fraud_gateway.config import settings


def build_engine(database_url: str) -> Engine:
    """
    Pooled engine for Postgres.

    Repository calls run on worker threads, so SQLite (tests, local runs)
    has the same-thread check disabled.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_seconds,
    )


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_session_factory() -> sessionmaker:
    """Repositories open one session per call from this factory"""
    return SessionLocal
