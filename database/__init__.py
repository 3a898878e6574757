"""
Database module for GlamMefy Backend

Usage:
    from database import init_database

    # Connect, create tables and seed the default catalog
    init_database()

    # Per-request session (FastAPI dependency)
    from database.connection import get_db
"""

from typing import Optional

from config.settings import settings
from core.logging import logger


def init_database(database_url: Optional[str] = None) -> bool:
    """
    Initialize the relational database and seed the hairstyle catalog

    Returns:
        bool: True if initialization successful, False otherwise
    """
    from database.connection import init_database as init_sql, get_db_session
    from database.seed import seed_hairstyles

    logger.info("🔄 Initializing database connection...")
    if not init_sql(database_url):
        return False

    if settings.SEED_CATALOG:
        db = get_db_session()
        try:
            seed_hairstyles(db)
        finally:
            db.close()

    return True
