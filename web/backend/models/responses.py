#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict


class MatchReasonModel(BaseModel):
    text: str
    positive: bool


class ComponentScoreModel(BaseModel):
    score: float
    max_score: float
    detail: str = ""


class MatchActions(BaseModel):
    """What the caller may do with a match."""
    can_apply: bool = True
    can_save: bool = True
    feedback: List[str] = Field(default_factory=list)


class ScoreFields(BaseModel):
    """Fields shared by driver-side and company-side matches."""
    overall_score: int = Field(ge=0, le=100)
    rules_score: float
    semantic_score: Optional[float] = None
    behavior_score: Optional[float] = None
    confidence: str
    top_reasons: List[MatchReasonModel] = Field(default_factory=list)
    cautions: List[MatchReasonModel] = Field(default_factory=list)
    missing_fields: List[str] = Field(default_factory=list)
    score_breakdown: Dict[str, ComponentScoreModel] = Field(default_factory=dict)
    degraded_mode: bool
    computed_at: Optional[str] = None


class DriverJobMatch(ScoreFields):
    """A stored driver -> job match, with display caps applied."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "match_id": "550e8400-e29b-41d4-a716-446655440000",
                "driver_id": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
                "job_id": "6ba7b811-9dad-11d1-80b4-00c04fd430c8",
                "job_title": "OTR Dry Van Owner Operator",
                "company_id": "c0mpany-0000-0000-0000-000000000001",
                "overall_score": 84,
                "rules_score": 78.0,
                "semantic_score": 71.5,
                "behavior_score": 5.0,
                "confidence": "high",
                "top_reasons": [{"text": "Owner-operator matches the job's driver type", "positive": True}],
                "cautions": [],
                "missing_fields": ["zip code"],
                "degraded_mode": False,
                "computed_at": "2026-02-01T12:00:00+00:00",
                "actions": {"can_apply": True, "can_save": True,
                            "feedback": ["helpful", "not_relevant", "hide"]}
            }
        }
    )

    match_id: str
    driver_id: str
    job_id: str
    job_title: Optional[str] = None
    company_id: Optional[str] = None
    actions: MatchActions = Field(default_factory=MatchActions)


class CandidateMatch(ScoreFields):
    """A stored company -> candidate match."""
    match_id: str
    company_id: str
    job_id: str
    job_title: Optional[str] = None
    candidate_source: str
    candidate_id: str
    candidate_driver_id: Optional[str] = None


class DriverMatchesResponse(BaseModel):
    success: bool = True
    visible: bool
    count: int
    matches: List[DriverJobMatch]


class MatchScoresResponse(BaseModel):
    """job_id -> overall score for every visible match of the driver."""
    success: bool = True
    visible: bool
    scores: Dict[str, int]


class DriverMatchResponse(BaseModel):
    success: bool = True
    visible: bool
    match: Optional[DriverJobMatch] = None


class CandidateMatchesResponse(BaseModel):
    success: bool = True
    visible: bool
    count: int
    matches: List[CandidateMatch]


class RolloutConfigResponse(BaseModel):
    success: bool = True
    shadow_mode: bool
    driver_ui_enabled: bool
    company_ui_enabled: bool
    company_beta_ids: List[str]
    fail_closed: bool = False


class FeedbackResponse(BaseModel):
    success: bool = True
    driver_id: str
    job_id: str
    feedback: str
    recompute_enqueued: bool


class MatchEventResponse(BaseModel):
    success: bool = True
    event_id: str


class RecomputeResponse(BaseModel):
    success: bool = True
    entity_type: str
    entity_id: str
    enqueued: bool
