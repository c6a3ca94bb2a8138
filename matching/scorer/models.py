#!/usr/bin/env python3
"""
Scoring Models - Data structures for match scoring.

Breakdown keys are a fixed enumeration: rule categories (``RuleCategory``)
plus the three signal summaries (``SignalComponent``).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class RuleCategory(str, Enum):
    # Driver -> job, in declaration order
    DRIVER_TYPE = "driverType"
    ROUTE = "route"
    FREIGHT = "freight"
    TEAM = "team"
    LOCATION = "location"
    EXPERIENCE = "experience"
    LICENSE = "license"
    # Company -> candidate only
    LICENSE_CLASS = "licenseClass"
    ROUTE_FREIGHT_TEAM = "routeFreightTeam"
    RECENCY = "recency"


class SignalComponent(str, Enum):
    RULES = "rules"
    SEMANTIC = "semantic"
    BEHAVIOR = "behavior"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FeedbackValue(str, Enum):
    HELPFUL = "helpful"
    NOT_RELEVANT = "not_relevant"
    HIDE = "hide"


class MatchEventType(str, Enum):
    VIEW = "view"
    CLICK = "click"
    SAVE = "save"
    APPLY = "apply"


class JobStatus(str, Enum):
    DRAFT = "Draft"
    ACTIVE = "Active"
    PAUSED = "Paused"
    CLOSED = "Closed"


class CandidateSource(str, Enum):
    APPLICATION = "application"
    LEAD = "lead"


class Role(str, Enum):
    DRIVER = "driver"
    COMPANY = "company"


BreakdownKey = Union[RuleCategory, SignalComponent]

# Declaration order used to break ties between equally weighted factors
FACTOR_ORDER: Dict[BreakdownKey, int] = {
    key: index
    for index, key in enumerate(list(RuleCategory) + list(SignalComponent))
}

MATCH_ACTIONS: Dict[str, Any] = {
    "can_apply": True,
    "can_save": True,
    "feedback": [f.value for f in FeedbackValue],
}


@dataclass(frozen=True)
class ComponentScore:
    score: float
    max_score: float
    detail: str

    @property
    def fraction(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return max(0.0, min(1.0, self.score / self.max_score))

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "max_score": self.max_score, "detail": self.detail}


@dataclass(frozen=True)
class MatchReason:
    text: str
    positive: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "positive": self.positive}


@dataclass(frozen=True)
class Factor:
    """A positive or negative explanation attached to one breakdown component."""
    component: BreakdownKey
    text: str
    positive: bool
    points: Optional[float] = None  # own-unit magnitude when the breakdown does not imply it


@dataclass
class DriverFeatures:
    """Normalized driver attributes (profile, with application as fallback)."""
    driver_id: str
    driver_type: Optional[str] = None
    license_class: Optional[str] = None
    years_exp: Optional[str] = None
    license_state: Optional[str] = None
    zip_code: Optional[str] = None
    about: Optional[str] = None
    solo_team: Optional[str] = None
    endorsements: Dict[str, bool] = field(default_factory=dict)
    hauler_experience: Dict[str, bool] = field(default_factory=dict)
    route_prefs: Dict[str, bool] = field(default_factory=dict)
    text_block: str = ""


@dataclass
class JobFeatures:
    job_id: str
    company_id: Optional[str] = None
    title: str = ""
    description: str = ""
    driver_type: Optional[str] = None
    route_type: Optional[str] = None
    freight_type: Optional[str] = None
    team_driving: Optional[str] = None
    location: Optional[str] = None
    pay: Optional[str] = None
    status: str = JobStatus.ACTIVE.value
    text_block: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == JobStatus.ACTIVE.value


@dataclass
class CandidateFeatures:
    """Normalized candidate attributes from an application or an imported lead."""
    candidate_id: str
    source: CandidateSource
    candidate_driver_id: Optional[str] = None
    name: str = ""
    driver_type: Optional[str] = None
    license_class: Optional[str] = None
    years_exp: Optional[str] = None
    state: Optional[str] = None
    solo_team: Optional[str] = None
    endorsements: Dict[str, bool] = field(default_factory=dict)
    hauler_experience: Dict[str, bool] = field(default_factory=dict)
    route_prefs: Dict[str, bool] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    text_block: str = ""
    missing_fields: List[str] = field(default_factory=list)


@dataclass
class RulesResult:
    """Output of a rules scorer: raw points plus per-category breakdown."""
    score: float
    max_score: float
    breakdown: Dict[RuleCategory, ComponentScore]
    factors: List[Factor] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)
    hard_mismatch: bool = False

    @property
    def fraction(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return max(0.0, min(1.0, self.score / self.max_score))


@dataclass
class SemanticResult:
    similarity: float  # 0-100
    phrases: List[str] = field(default_factory=list)
    provider: Optional[str] = None
    model: Optional[str] = None


@dataclass
class BehaviorResult:
    score: float
    max_score: float
    detail: str
    factors: List[Factor] = field(default_factory=list)
    has_signal: bool = False
    hidden: bool = False

    @property
    def fraction(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return max(0.0, min(1.0, self.score / self.max_score))


@dataclass
class MatchResult:
    """Fused match score for one (subject, object) pair."""
    overall_score: int
    rules_score: float
    semantic_score: Optional[float]
    behavior_score: Optional[float]
    confidence: Confidence
    top_reasons: List[MatchReason]
    cautions: List[MatchReason]
    missing_fields: List[str]
    score_breakdown: Dict[str, ComponentScore]
    degraded_mode: bool
    computed_at: datetime
    semantic_phrases: List[str] = field(default_factory=list)
    provider: Optional[str] = None
    model: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        """Column values for a stored match score row."""
        return {
            "overall_score": self.overall_score,
            "rules_score": self.rules_score,
            "semantic_score": self.semantic_score,
            "behavior_score": self.behavior_score,
            "confidence": self.confidence.value,
            "top_reasons": [r.to_dict() for r in self.top_reasons],
            "cautions": [c.to_dict() for c in self.cautions],
            "missing_fields": list(self.missing_fields),
            "score_breakdown": {k: v.to_dict() for k, v in self.score_breakdown.items()},
            "degraded_mode": self.degraded_mode,
            "provider": self.provider,
            "model": self.model,
            "computed_at": self.computed_at,
        }
