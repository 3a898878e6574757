"""Database connection and session management"""

from typing import Iterator, Optional
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from config.settings import settings
from database.models import Base
from core.logging import logger, log_structured


engine: Optional[Engine] = None
SessionLocal: Optional[sessionmaker] = None


def _normalize_url(database_url: str) -> str:
    """Map heroku-style postgres:// URLs onto the psycopg2 driver"""
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+psycopg2://", 1)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+psycopg2://", 1)
    return database_url


def init_database(database_url: Optional[str] = None) -> bool:
    """
    Initialize database connection and create tables

    Args:
        database_url: Overrides settings.DATABASE_URL (used by tests)

    Returns:
        bool: True if successful, False otherwise
    """
    global engine, SessionLocal

    url = database_url or settings.DATABASE_URL
    if not url:
        logger.warning("⚠️ DATABASE_URL is not set - persistence disabled")
        return False

    try:
        url = _normalize_url(url)

        if url.startswith("sqlite"):
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(
                url,
                pool_pre_ping=True,
                pool_recycle=3600,
                echo=False
            )

        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        Base.metadata.create_all(bind=engine)

        db_host = url.split('@')[1] if '@' in url else url.split(':')[0]
        logger.info(f"✅ Database connected ({db_host})")
        log_structured("database_connected", {
            "dialect": engine.dialect.name,
            "tables": sorted(Base.metadata.tables.keys())
        })

        return True

    except SQLAlchemyError as e:
        logger.error(f"❌ Database connection failed: {str(e)}")
        engine = None
        SessionLocal = None
        return False


def get_db() -> Iterator[Session]:
    """
    Get database session (FastAPI dependency)

    Yields:
        Session: SQLAlchemy database session
    """
    if SessionLocal is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db_session() -> Optional[Session]:
    """
    Get database session for direct use (not as dependency)

    Returns:
        Optional[Session]: SQLAlchemy database session or None if not initialized
    """
    if SessionLocal is None:
        return None
    return SessionLocal()


def ping_database() -> bool:
    """Run a trivial query to verify connectivity"""
    if engine is None:
        return False
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return True
