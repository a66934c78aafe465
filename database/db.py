"""
Database Configuration Module

Engine, session factory and the shared declarative base for every model.

Connection Pooling Strategy:
- PostgreSQL: pool_size=30, max_overflow=20 (50 total), pre-ping, 30 min recycle
- SQLite (local/dev): default pool, same-thread check disabled
"""

from datetime import datetime
import uuid as uuid
from pytz import timezone

from sqlalchemy import Column, TIMESTAMP, Boolean, Integer, Uuid, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from config import DATABASE_URL
from logger import logging


# ============================================
# CONNECTION POOL SETTINGS
# ============================================

POOL_CONFIG = {
    # Base pool size - always maintain this many connections
    "pool_size": 30,
    # Additional connections allowed during peak load
    "max_overflow": 20,
    # Timeout waiting for a connection from pool (seconds)
    "pool_timeout": 30,
    # Test connection health before using (handles stale connections)
    "pool_pre_ping": True,
    # Recycle connections after 30 minutes
    "pool_recycle": 1800,
    "echo": False,
}


def build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, **POOL_CONFIG)


db_engine = build_engine(DATABASE_URL)

# ============================================
# SESSION CONFIGURATION
# ============================================

SessionLocal = sessionmaker(
    autoflush=False,  # Manual flush for better control
    bind=db_engine,
    expire_on_commit=False,
)

# Timezone configuration
UTC = timezone("UTC")


def time_now():
    """Get current UTC time"""
    return datetime.now(UTC)


# ============================================
# DECLARATIVE BASE
# ============================================

DBBase = declarative_base()


def init_models():
    import models  # noqa: F401 registers every table on DBBase.metadata

    DBBase.metadata.create_all(bind=db_engine)


# ============================================
# SESSION MANAGEMENT
# ============================================


def get_db():
    """
    Generator function for database session dependency injection.

    Commits on success unless the request flagged a rollback, rolls back on error
    and always closes the session.
    """
    from context_manager.context import context_set_db_session_rollback

    db: Session = SessionLocal()
    try:
        logging.debug("DB session created")
        yield db

        if context_set_db_session_rollback.get():
            logging.debug("Rolling back DB session")
            db.rollback()
        else:
            logging.debug("Committing DB session")
            db.commit()

    except Exception as e:
        logging.error(f"DB session error: {e}")
        db.rollback()
        raise
    finally:
        logging.debug("Closing DB session")
        db.close()


# ============================================
# BASE MODEL CLASS
# ============================================


class DBBaseClass:
    """
    Base class for all database models.

    Provides:
    - Auto-incrementing primary key (id)
    - UUID for external references
    - Created/updated timestamps
    - Soft delete flag
    """

    id = Column(Integer, primary_key=True, unique=True, autoincrement=True)

    # UUID for external API references (don't expose internal IDs)
    uuid = Column(Uuid(as_uuid=True), default=uuid.uuid4, unique=True, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), default=time_now, nullable=False)
    updated_at = Column(
        TIMESTAMP(timezone=True), default=time_now, onupdate=time_now, nullable=False
    )

    is_deleted = Column(Boolean, default=False, index=True)
