#!/usr/bin/env python3
"""
Behavior Scorer - per-driver signal from feedback and interaction history.

Starts every job at a neutral score and nudges it:
- up for direct interactions (apply/save/click), company/route/freight
  affinity with jobs the driver saved, applied to or marked helpful, and an
  explicit "helpful" mark;
- down for an explicit "not_relevant" mark and for resembling (shared freight
  and/or route) jobs the driver hid or marked not relevant.

The result is clamped to [0, max_score]. Jobs the driver hid are reported as
``hidden`` and excluded from scoring. Only the given driver's history is
ever consulted.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from matching.config_loader import BehaviorConfig
from matching.scorer.models import (
    BehaviorResult,
    Factor,
    FeedbackValue,
    JobFeatures,
    MatchEventType,
    SignalComponent,
)
from matching.scorer.normalize import normalize_freight_type, normalize_route_type
from matching.utils import clamp

POSITIVE_EVENTS = {MatchEventType.SAVE.value, MatchEventType.APPLY.value}
NEGATIVE_FEEDBACK = {FeedbackValue.HIDE.value, FeedbackValue.NOT_RELEVANT.value}


@dataclass(frozen=True)
class JobSignature:
    company_id: Optional[str] = None
    route_type: Optional[str] = None
    freight_type: Optional[str] = None

    @classmethod
    def of(cls, company_id=None, route_type=None, freight_type=None) -> "JobSignature":
        return cls(
            company_id=str(company_id) if company_id else None,
            route_type=normalize_route_type(route_type),
            freight_type=normalize_freight_type(freight_type),
        )


@dataclass(frozen=True)
class FeedbackSnapshot:
    job_id: str
    feedback: str
    job: JobSignature = field(default_factory=JobSignature)


@dataclass(frozen=True)
class EventSnapshot:
    job_id: str
    event_type: str
    job: JobSignature = field(default_factory=JobSignature)


@dataclass
class BehaviorContext:
    """Read-only summary of one driver's history, shared across a batch."""
    driver_id: str
    feedback_by_job: Dict[str, str] = field(default_factory=dict)
    hidden_job_ids: Set[str] = field(default_factory=set)
    job_event_boost: Dict[str, float] = field(default_factory=dict)
    positive_company_ids: Set[str] = field(default_factory=set)
    positive_route_types: Set[str] = field(default_factory=set)
    positive_freight_types: Set[str] = field(default_factory=set)
    negative_signatures: Dict[str, JobSignature] = field(default_factory=dict)


def build_behavior_context(
    driver_id: str,
    feedback: Iterable[FeedbackSnapshot],
    events: Iterable[EventSnapshot],
    config: BehaviorConfig,
) -> BehaviorContext:
    """Summarize feedback and recent events into a BehaviorContext."""
    context = BehaviorContext(driver_id=driver_id)
    event_weights = {
        MatchEventType.APPLY.value: config.apply_weight,
        MatchEventType.SAVE.value: config.save_weight,
        MatchEventType.CLICK.value: config.click_weight,
    }

    def add_positive(signature: JobSignature) -> None:
        if signature.company_id:
            context.positive_company_ids.add(signature.company_id)
        if signature.route_type:
            context.positive_route_types.add(signature.route_type)
        if signature.freight_type:
            context.positive_freight_types.add(signature.freight_type)

    for row in feedback:
        context.feedback_by_job[row.job_id] = row.feedback
        if row.feedback == FeedbackValue.HIDE.value:
            context.hidden_job_ids.add(row.job_id)
        if row.feedback in NEGATIVE_FEEDBACK:
            context.negative_signatures[row.job_id] = row.job
        elif row.feedback == FeedbackValue.HELPFUL.value:
            add_positive(row.job)

    for event in events:
        increment = event_weights.get(event.event_type, 0)
        if increment > 0:
            boost = context.job_event_boost.get(event.job_id, 0) + increment
            context.job_event_boost[event.job_id] = min(config.event_boost_cap, boost)
        if event.event_type in POSITIVE_EVENTS:
            add_positive(event.job)

    return context


def _resemblance(job: JobSignature, other: JobSignature) -> int:
    """Number of shared attributes (freight, route) between two jobs."""
    shared = 0
    if job.freight_type and job.freight_type == other.freight_type:
        shared += 1
    if job.route_type and job.route_type == other.route_type:
        shared += 1
    return shared


def score_behavior(job: JobFeatures, context: BehaviorContext, config: BehaviorConfig) -> BehaviorResult:
    """Score one job for the context's driver."""
    component = SignalComponent.BEHAVIOR
    feedback = context.feedback_by_job.get(job.job_id)

    if feedback == FeedbackValue.HIDE.value:
        return BehaviorResult(
            score=0.0,
            max_score=config.max_score,
            detail="Driver marked this match as hidden",
            has_signal=True,
            hidden=True,
        )

    signature = JobSignature.of(job.company_id, job.route_type, job.freight_type)
    score = config.neutral_score
    details: List[str] = []
    factors: List[Factor] = []

    def nudge(points: float, detail: str, reason: Optional[str] = None) -> None:
        nonlocal score
        score += points
        details.append(f"{detail} {points:+g}")
        if reason:
            factors.append(Factor(component, reason, points > 0, points=abs(points)))

    boost = context.job_event_boost.get(job.job_id, 0)
    if boost > 0:
        nudge(min(config.interaction_cap, boost), "Recent interactions", "You recently interacted with this job")

    if signature.company_id and signature.company_id in context.positive_company_ids:
        nudge(config.company_affinity, "Company affinity", "You've shown interest in this company")

    if signature.route_type and signature.route_type in context.positive_route_types:
        nudge(config.route_affinity, "Route affinity", "Similar route to jobs you saved or applied to")

    if signature.freight_type and signature.freight_type in context.positive_freight_types:
        nudge(config.freight_affinity, "Freight affinity", "Similar freight to jobs you saved or applied to")

    if feedback == FeedbackValue.HELPFUL.value:
        nudge(config.helpful_bonus, "Marked helpful", "You marked this job as helpful before")
    elif feedback == FeedbackValue.NOT_RELEVANT.value:
        nudge(-config.not_relevant_penalty, "Marked not relevant", "You marked this job as not relevant")

    resemblance = max(
        (_resemblance(signature, other)
         for job_id, other in context.negative_signatures.items()
         if job_id != job.job_id),
        default=0,
    )
    if resemblance >= 2:
        nudge(-config.resemblance_full_penalty, "Resembles dismissed jobs",
              "Similar to jobs you hid or marked not relevant")
    elif resemblance == 1:
        nudge(-config.resemblance_partial_penalty, "Partly resembles dismissed jobs")

    return BehaviorResult(
        score=round(clamp(score, 0.0, config.max_score), 2),
        max_score=config.max_score,
        detail="; ".join(details) if details else "No behavior signal yet",
        factors=factors,
        has_signal=bool(details),
    )
