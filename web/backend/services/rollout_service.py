#!/usr/bin/env python3
"""
Rollout service - loads the rollout config row into controller snapshots.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.models import MatchingRolloutConfig
from database.repositories import RolloutRepository
from matching.errors import ConfigUnavailable
from matching.rollout import RolloutController, RolloutSnapshot
from ..config import get_config

logger = logging.getLogger(__name__)


def snapshot_from_row(row: MatchingRolloutConfig) -> RolloutSnapshot:
    return RolloutSnapshot(
        shadow_mode=bool(row.shadow_mode),
        driver_ui_enabled=bool(row.driver_ui_enabled),
        company_ui_enabled=bool(row.company_ui_enabled),
        company_beta_ids=frozenset(str(i) for i in (row.company_beta_ids or [])),
    )


def make_rollout_loader(session_factory: Callable[[], Session]) -> Callable[[], Optional[RolloutSnapshot]]:
    """Loader for RolloutController; database errors surface as ConfigUnavailable."""
    def load() -> Optional[RolloutSnapshot]:
        session = session_factory()
        try:
            row = RolloutRepository(session).get_config()
            return snapshot_from_row(row) if row is not None else None
        except SQLAlchemyError as e:
            raise ConfigUnavailable(str(e)) from e
        finally:
            session.close()

    return load


class RolloutService:
    """Operator-facing reads and updates of the rollout config."""

    def __init__(self, db: Session, controller: RolloutController):
        self.repo = RolloutRepository(db)
        self.db = db
        self.controller = controller

    def update_config(self, **changes) -> RolloutSnapshot:
        row = self.repo.save_config(**changes)
        self.db.commit()
        self.controller.invalidate()
        return snapshot_from_row(row)


_controller: Optional[RolloutController] = None


def get_rollout_controller(session_factory: Optional[Callable[[], Session]] = None) -> RolloutController:
    """Get the process-wide rollout controller, creating it on first use."""
    global _controller
    if _controller is None:
        if session_factory is None:
            raise ConfigUnavailable("Rollout controller requested before a session factory was provided")
        _controller = RolloutController(
            make_rollout_loader(session_factory),
            ttl_seconds=get_config().rollout.cache_ttl_seconds,
        )
    return _controller
