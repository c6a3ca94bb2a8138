#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class FeedbackRequest(BaseModel):
    """A driver's feedback on one job match."""
    feedback: Literal["helpful", "not_relevant", "hide"] = Field(
        ..., description="helpful, not_relevant or hide"
    )


class MatchEventRequest(BaseModel):
    """A driver's interaction with a job."""
    job_id: str = Field(..., min_length=1)
    event_type: Literal["view", "click", "save", "apply"]


class RecomputeRequest(BaseModel):
    """Request to rescore an entity's matches."""
    entity_type: Literal["driver_profile", "job", "company_profile", "application", "lead"]
    entity_id: str = Field(..., min_length=1)
    reason: str = Field(default="manual", max_length=200)
    company_id: Optional[str] = None


class RolloutUpdate(BaseModel):
    """Partial update of the rollout config; omitted fields are unchanged."""
    shadow_mode: Optional[bool] = None
    driver_ui_enabled: Optional[bool] = None
    company_ui_enabled: Optional[bool] = None
    company_beta_ids: Optional[List[str]] = None
