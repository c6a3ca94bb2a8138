#!/usr/bin/env python3
"""
Company -> Candidate Rules Scorer.

Scores an application or imported lead against one of the company's jobs.
Categories (defaults): driverType 20, licenseClass 20, experience 15,
routeFreightTeam 20, location 10, recency 5.

As on the driver side, a candidate with no data in a category earns a
neutral share of its points, and the absent field is surfaced as a
missing-field caution.
"""

from datetime import datetime, timezone
from typing import List, Optional

from matching.config_loader import CompanyRuleMaxima
from matching.errors import InvalidCandidate
from matching.scorer.driver_rules import COMPATIBLE_DRIVER_TYPES, NEUTRAL, PARTIAL_ROUTES, VERSATILE_HAULER_MIN_TYPES
from matching.scorer.models import (
    CandidateFeatures,
    ComponentScore,
    Factor,
    JobFeatures,
    RuleCategory,
    RulesResult,
)
from matching.scorer.normalize import (
    are_neighboring_states,
    experience_ordinal,
    extract_state,
    normalize_driver_type,
    normalize_flags,
    normalize_freight_type,
    normalize_license_class,
    normalize_route_type,
    normalize_team_pref,
)

LICENSE_CLASS_TIERS = {"a": 1.0, "b": 0.7, "c": 0.4, "permit": 0.2}
EXPERIENCE_TIERS = [2 / 15, 4 / 15, 7 / 15, 11 / 15, 1.0]

# Share of the routeFreightTeam maximum for each sub-signal
ROUTE_SHARE = 7 / 20
FREIGHT_SHARE = 7 / 20
TEAM_SHARE = 6 / 20
PARTIAL_SUB_SHARE = 4 / 20
TEAM_UNKNOWN_SHARE = 3 / 20

RECENT_DAYS = 7
MONTH_DAYS = 30
RECENCY_UNKNOWN = 0.4
RECENCY_MONTH = 0.6
RECENCY_OLD = 0.2

# Missing candidate fields surface as cautions on the related category
MISSING_FIELD_CATEGORY = {
    "driver type": RuleCategory.DRIVER_TYPE,
    "license class": RuleCategory.LICENSE_CLASS,
    "experience": RuleCategory.EXPERIENCE,
    "state": RuleCategory.LOCATION,
}


def _component(maximum: float, fraction: float, detail: str) -> ComponentScore:
    return ComponentScore(score=round(maximum * fraction, 2), max_score=maximum, detail=detail)


def _days_since(created_at: Optional[datetime], as_of: datetime) -> Optional[int]:
    if created_at is None:
        return None
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)
    return max(0, (as_of - created_at).days)


def score_candidate_job(
    candidate: CandidateFeatures,
    job: JobFeatures,
    maxima: CompanyRuleMaxima,
    as_of: Optional[datetime] = None,
) -> RulesResult:
    """
    Score one candidate against one job.

    ``as_of`` anchors the recency category so results are reproducible.

    Raises:
        InvalidCandidate: If the candidate id or job id is missing.
    """
    if not candidate.candidate_id or not job.job_id:
        raise InvalidCandidate(
            f"Cannot score pair without identity (candidate={candidate.candidate_id!r}, job={job.job_id!r})"
        )
    as_of = as_of or datetime.now(timezone.utc)

    breakdown = {}
    factors: List[Factor] = []

    # Driver type
    c = normalize_driver_type(candidate.driver_type)
    j = normalize_driver_type(job.driver_type)
    cat = RuleCategory.DRIVER_TYPE
    if not c:
        breakdown[cat] = _component(maxima.driver_type, NEUTRAL, "Driver type unknown")
    elif not j:
        breakdown[cat] = _component(maxima.driver_type, 0.5, "Job driver type not specified")
    elif c == j:
        breakdown[cat] = _component(maxima.driver_type, 1.0, f"Exact match: {c}")
        factors.append(Factor(cat, f"Driver type matches ({c})", True))
    elif frozenset({c, j}) in COMPATIBLE_DRIVER_TYPES:
        breakdown[cat] = _component(maxima.driver_type, 0.6, f"Compatible: {c} / {j}")
        factors.append(Factor(cat, f"Driver type compatible ({c} / {j})", True))
    else:
        breakdown[cat] = _component(maxima.driver_type, 0.0, f"Mismatch: {c} vs {j}")
        factors.append(Factor(cat, f"Driver type mismatch ({c} vs {j})", False))

    # License class
    lic = normalize_license_class(candidate.license_class)
    cat = RuleCategory.LICENSE_CLASS
    if not lic:
        breakdown[cat] = _component(maxima.license_class, NEUTRAL, "License class unknown")
    else:
        breakdown[cat] = _component(
            maxima.license_class, LICENSE_CLASS_TIERS.get(lic, LICENSE_CLASS_TIERS["permit"]),
            "Permit only" if lic == "permit" else f"Class {lic.upper()}",
        )
        if lic in ("a", "b"):
            factors.append(Factor(cat, f"Class {lic.upper()} CDL holder", True))

    # Experience
    ordinal = experience_ordinal(candidate.years_exp)
    cat = RuleCategory.EXPERIENCE
    if ordinal < 0:
        breakdown[cat] = _component(maxima.experience, NEUTRAL, "Experience data unavailable")
    else:
        breakdown[cat] = _component(maxima.experience, EXPERIENCE_TIERS[ordinal], f"Experience: {candidate.years_exp}")
        if ordinal >= 3:
            factors.append(Factor(cat, f"{candidate.years_exp} driving experience", True))

    breakdown[RuleCategory.ROUTE_FREIGHT_TEAM] = _score_route_freight_team(candidate, job, maxima, factors)

    # Location
    c_state = extract_state(candidate.state)
    j_state = extract_state(job.location)
    cat = RuleCategory.LOCATION
    if not c_state or not j_state:
        breakdown[cat] = _component(maxima.location, NEUTRAL, "Location data unavailable")
    elif c_state == j_state:
        breakdown[cat] = _component(maxima.location, 1.0, f"Same state: {c_state}")
        factors.append(Factor(cat, f"Located in same state ({c_state.title()})", True))
    elif are_neighboring_states(c_state, j_state):
        breakdown[cat] = _component(maxima.location, 0.6, f"Neighboring: {c_state} / {j_state}")
    else:
        breakdown[cat] = _component(maxima.location, 0.2, f"Different state: {c_state} vs {j_state}")

    # Recency
    days = _days_since(candidate.created_at, as_of)
    cat = RuleCategory.RECENCY
    if days is None:
        breakdown[cat] = _component(maxima.recency, RECENCY_UNKNOWN, "No activity date")
    elif days <= RECENT_DAYS:
        breakdown[cat] = _component(maxima.recency, 1.0, f"{days}d ago")
        factors.append(Factor(cat, "Applied/submitted recently", True))
    elif days <= MONTH_DAYS:
        breakdown[cat] = _component(maxima.recency, RECENCY_MONTH, f"{days}d ago")
    else:
        breakdown[cat] = _component(maxima.recency, RECENCY_OLD, f"{days}d ago")

    for field_name in candidate.missing_fields:
        factors.append(Factor(
            MISSING_FIELD_CATEGORY.get(field_name, RuleCategory.RECENCY),
            f"Limited data: {field_name} not available",
            False,
        ))

    return RulesResult(
        score=round(sum(c.score for c in breakdown.values()), 2),
        max_score=sum(c.max_score for c in breakdown.values()),
        breakdown=breakdown,
        factors=factors,
        missing_fields=list(candidate.missing_fields),
    )


def _score_route_freight_team(
    candidate: CandidateFeatures,
    job: JobFeatures,
    maxima: CompanyRuleMaxima,
    factors: List[Factor],
) -> ComponentScore:
    cat = RuleCategory.ROUTE_FREIGHT_TEAM
    share = 0.0

    job_route = normalize_route_type(job.route_type)
    prefs = normalize_flags(candidate.route_prefs, normalize_route_type)
    if not job_route:
        share += PARTIAL_SUB_SHARE
    elif prefs.get(job_route):
        share += ROUTE_SHARE
        factors.append(Factor(cat, f"Route preference aligns ({job_route})", True))
    elif any(frozenset({job_route, p}) in PARTIAL_ROUTES for p in prefs):
        share += PARTIAL_SUB_SHARE

    job_freight = normalize_freight_type(job.freight_type)
    hauler = normalize_flags(candidate.hauler_experience, normalize_freight_type)
    if not job_freight:
        share += PARTIAL_SUB_SHARE
    elif hauler.get(job_freight):
        share += FREIGHT_SHARE
        factors.append(Factor(cat, f"Hauler experience matches ({job_freight})", True))
    elif len(hauler) >= VERSATILE_HAULER_MIN_TYPES:
        share += PARTIAL_SUB_SHARE

    c_team = normalize_team_pref(candidate.solo_team)
    j_team = normalize_team_pref(job.team_driving)
    if c_team and j_team:
        if c_team == j_team or "both" in (c_team, j_team):
            share += TEAM_SHARE
    else:
        share += TEAM_UNKNOWN_SHARE

    return _component(maxima.route_freight_team, min(share, 1.0), "Route/freight/team combined")
