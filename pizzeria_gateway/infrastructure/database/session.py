"""Database engine and session management"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from pizzeria_gateway.config import settings
from pizzeria_gateway.infrastructure.database.models import Base


def build_engine(database_url: str) -> Engine:
    """Pooled engine for server databases; SQLite gets a thread-shareable connection instead"""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create missing tables (orders, settings, hours, closures)"""
    Base.metadata.create_all(bind=bind)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
