#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from typing import Generator, Optional

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from database.repository import MatchingRepository
from matching.rollout import RolloutController
from scheduler.queue import RecomputeScheduler
from .config import get_config
from .services.rollout_service import get_rollout_controller


class DatabaseManager:
    """Manages database connections and sessions."""

    def __init__(self, url: Optional[str] = None):
        config = get_config()
        self.engine = create_engine(
            url or config.database.url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=10,
            max_overflow=20
        )
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get a database session.

        Yields:
            Session: SQLAlchemy database session.
        """
        session = self.SessionLocal()
        try:
            yield session
        finally:
            session.close()


_db_manager: Optional[DatabaseManager] = None
_scheduler: Optional[RecomputeScheduler] = None


def get_db_manager() -> DatabaseManager:
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.

    Usage:
        @app.get("/endpoint")
        def my_endpoint(db: Session = Depends(get_db)):
            ...
    """
    yield from get_db_manager().get_session()


def get_repository(db: Session = Depends(get_db)) -> MatchingRepository:
    return MatchingRepository(db)


def get_rollout() -> RolloutController:
    return get_rollout_controller(lambda: get_db_manager().SessionLocal())


def get_scheduler() -> RecomputeScheduler:
    """Scheduler used for RQ nudges after writes; the enqueue itself joins the request's transaction."""
    global _scheduler
    if _scheduler is None:
        _scheduler = RecomputeScheduler(get_config().scheduler)
    return _scheduler
