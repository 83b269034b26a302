# WORKFLOW: Database session management and connection handling.
# Used by: Pipeline load step, CLI startup, tests
# Functions:
# 1. configure_engine() - Point the lazy engine at a database URL
# 2. get_session_factory() - Lazy session factory bound to the engine
# 3. init_db() - Create tables and indexes (idempotent migration)
# 4. check_db_connection() - Health check for database connectivity
# 5. dispose_engine() - Release the engine (before compressing a file database)
#
# Database lifecycle:
# Startup: configure_engine() -> init_db() -> check_db_connection()
# Runtime: get_session_factory()() -> Session -> replace tables -> Close session
# Shutdown: dispose_engine() -> optional compression of the database file

from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from core.config import settings
import logging

logger = logging.getLogger(__name__)

# Lazy-loaded database engine and session factory
_engine = None
_SessionLocal = None
_database_url = None


def configure_engine(database_url: str) -> None:
    """Use the given database URL for subsequently created engines."""
    global _database_url
    dispose_engine()
    _database_url = database_url


def get_engine() -> Engine:
    """Get database engine (lazy-loaded)."""
    global _engine
    if _engine is None:
        url = _database_url or settings.resolved_database_url()
        _engine = create_engine(url, echo=False)
        logger.info(f"Created database engine for {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def get_session_factory():
    """Get session factory (lazy-loaded)."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def init_db(engine: Optional[Engine] = None) -> None:
    """
    Initialize database tables and indexes.
    """
    from db.models import Base

    try:
        engine = engine or get_engine()
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise


def check_db_connection(engine: Optional[Engine] = None) -> bool:
    """
    Check if database connection is working.
    """
    try:
        engine = engine or get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False


def dispose_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
