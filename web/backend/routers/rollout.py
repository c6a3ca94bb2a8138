#!/usr/bin/env python3
"""
Rollout endpoints - read and update who may see match scores.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from matching.rollout import RolloutController
from ..dependencies import get_db, get_rollout
from ..models.requests import RolloutUpdate
from ..models.responses import RolloutConfigResponse
from ..services.rollout_service import RolloutService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rollout", tags=["rollout"])


@router.get("", response_model=RolloutConfigResponse)
def get_rollout_config(rollout: RolloutController = Depends(get_rollout)):
    """
    Get the rollout config currently in effect.

    When the config cannot be read the closed defaults are reported with
    ``fail_closed`` set.
    """
    snapshot = rollout.snapshot()
    return RolloutConfigResponse(fail_closed=snapshot.fail_closed, **snapshot.to_dict())


@router.put("", response_model=RolloutConfigResponse)
def update_rollout_config(
    update: RolloutUpdate,
    db: Session = Depends(get_db),
    rollout: RolloutController = Depends(get_rollout),
):
    """Update the rollout config; takes effect for new reads immediately in this process."""
    service = RolloutService(db, rollout)
    snapshot = service.update_config(**update.model_dump(exclude_none=True))
    logger.info(f"Rollout config updated: {snapshot.to_dict()}")
    return RolloutConfigResponse(**snapshot.to_dict())
