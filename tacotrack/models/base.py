"""
Database engine, session factory and declarative base
"""
import os
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool, StaticPool
from sqlalchemy.orm import declarative_base, sessionmaker
from tacotrack.config import get_settings

settings = get_settings()

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def resolve_database_url(url: str) -> str:
    """Make a relative SQLite file path absolute so the working directory does not matter."""
    if url in IN_MEMORY_URLS:
        return url
    if url.startswith("sqlite:///") and not url.startswith("sqlite:////"):
        return "sqlite:///" + os.path.abspath(url[len("sqlite:///"):])
    return url


def build_engine(url: str):
    """Engine for the given URL, with pooling suited to the backend."""
    if url in IN_MEMORY_URLS:
        # In-memory database: every session must share the one connection
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 60},
            poolclass=NullPool,
            pool_pre_ping=True
        )
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=3,
        max_overflow=5,
        pool_recycle=300,
    )


engine = build_engine(resolve_database_url(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Request-scoped database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.expire_all()
        db.close()


def init_db(bind=None):
    """Create any missing tables. Existing tables are left as they are."""
    # Register every model on Base.metadata
    import tacotrack.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
