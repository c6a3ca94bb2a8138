#!/usr/bin/env python3
"""
Driver -> Job Rules Scorer.

Deterministic attribute scoring of one driver against one job posting.
Seven categories are scored in declaration order, each as a fraction of its
configured maximum (raw max 90 with defaults):

- driverType (20): exact, owner-operator/lease compatible, or hard mismatch
- route (15): preference match, OTR/regional partial, mismatch
- freight (15): hauler experience match, versatile hauler, mismatch
- team (10): solo/team alignment ("both" matches anything)
- location (10): same state, neighboring state, elsewhere
- experience (10): years-of-experience ordinal
- license (10): CDL class plus endorsement bonus

Missing driver or job data yields a neutral partial score, never zero, and
missing driver fields are reported separately. A hard driver-type mismatch
caps the raw total.
"""

import logging
from typing import List, Tuple

from matching.config_loader import DriverRuleMaxima
from matching.errors import InvalidCandidate
from matching.scorer.models import (
    ComponentScore,
    DriverFeatures,
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

logger = logging.getLogger(__name__)

# ----------------------------
# Score tiers (fraction of the category maximum)
# ----------------------------
NEUTRAL = 0.5

DRIVER_TYPE_COMPATIBLE = 0.6
COMPATIBLE_DRIVER_TYPES = {frozenset({"owner-operator", "lease"})}

ROUTE_PARTIAL = 10 / 15
ROUTE_NEUTRAL = 8 / 15
ROUTE_MISMATCH = 3 / 15
PARTIAL_ROUTES = {frozenset({"otr", "regional"})}

FREIGHT_VERSATILE = 10 / 15
FREIGHT_JOB_UNSPECIFIED = 8 / 15
FREIGHT_NO_EXPERIENCE = 5 / 15
FREIGHT_MISMATCH = 3 / 15
VERSATILE_HAULER_MIN_TYPES = 4

LOCATION_NEIGHBOR = 0.6
LOCATION_FAR = 0.2

EXPERIENCE_TIERS = [0.2, 0.4, 0.6, 0.8, 1.0]  # none, <1, 1-3, 3-5, 5+

# License points are expressed out of 10 then scaled to the configured max
LICENSE_BASE = 10.0
LICENSE_CLASS_POINTS = {"a": 6, "b": 4, "c": 2, "permit": 1}
LICENSE_UNKNOWN_POINTS = 3
TANKER_ENDORSEMENT_POINTS = 4
HAZMAT_ENDORSEMENT_POINTS = 2
NO_ENDORSEMENT_POINTS = 1
TANKER_ENDORSEMENTS = ("tankvehicles", "tankerhazmat")

CategoryResult = Tuple[ComponentScore, List[Factor]]


def _component(maximum: float, fraction: float, detail: str) -> ComponentScore:
    return ComponentScore(score=round(maximum * fraction, 2), max_score=maximum, detail=detail)


def _display(value: str) -> str:
    return value.upper() if len(value) <= 3 else value


def score_driver_type(driver: DriverFeatures, job: JobFeatures, maximum: float) -> Tuple[ComponentScore, List[Factor], bool]:
    """Returns the component, its factors and whether it is a hard mismatch."""
    d = normalize_driver_type(driver.driver_type)
    j = normalize_driver_type(job.driver_type)
    cat = RuleCategory.DRIVER_TYPE

    if not d or not j:
        return _component(maximum, NEUTRAL, "Driver type data unavailable"), [], False

    if d == j:
        return (
            _component(maximum, 1.0, f"Exact match: {d}"),
            [Factor(cat, f"Your driver type ({d}) matches this position", True)],
            False,
        )

    if frozenset({d, j}) in COMPATIBLE_DRIVER_TYPES:
        return (
            _component(maximum, DRIVER_TYPE_COMPATIBLE, f"Compatible: {d} / {j}"),
            [Factor(cat, f"{d} is compatible with {j} position", True)],
            False,
        )

    return (
        _component(maximum, 0.0, f"Mismatch: {d} vs {j}"),
        [Factor(cat, f"Position requires {j} but you are {d}", False)],
        True,
    )


def score_route(driver: DriverFeatures, job: JobFeatures, maximum: float) -> CategoryResult:
    job_route = normalize_route_type(job.route_type)
    prefs = normalize_flags(driver.route_prefs, normalize_route_type)
    cat = RuleCategory.ROUTE

    if not job_route:
        return _component(maximum, ROUTE_NEUTRAL, "Job route type not specified"), []
    if not prefs:
        return _component(maximum, ROUTE_NEUTRAL, "No route preferences set"), []

    if prefs.get(job_route):
        return (
            _component(maximum, 1.0, f"Route match: {job_route}"),
            [Factor(cat, f"Your {_display(job_route)} route preference matches", True)],
        )

    if any(frozenset({job_route, pref}) in PARTIAL_ROUTES for pref in prefs):
        return (
            _component(maximum, ROUTE_PARTIAL, "Partial route match"),
            [Factor(cat, f"Your route preference partially aligns ({_display(job_route)})", True)],
        )

    return (
        _component(maximum, ROUTE_MISMATCH, f"Route mismatch: {job_route}"),
        [Factor(cat, f"This job is {_display(job_route)} which doesn't match your route preferences", False)],
    )


def score_freight(driver: DriverFeatures, job: JobFeatures, maximum: float) -> CategoryResult:
    job_freight = normalize_freight_type(job.freight_type)
    hauler = normalize_flags(driver.hauler_experience, normalize_freight_type)
    cat = RuleCategory.FREIGHT

    if not job_freight:
        return _component(maximum, FREIGHT_JOB_UNSPECIFIED, "Job freight type not specified"), []
    if not hauler:
        return _component(maximum, FREIGHT_NO_EXPERIENCE, "No hauler experience data"), []

    if hauler.get(job_freight):
        return (
            _component(maximum, 1.0, f"Freight match: {job_freight}"),
            [Factor(cat, f"You have experience with {job_freight} freight", True)],
        )

    if len(hauler) >= VERSATILE_HAULER_MIN_TYPES:
        return (
            _component(maximum, FREIGHT_VERSATILE, "Versatile hauler, no exact match"),
            [Factor(cat, "Your broad hauler experience may apply", True)],
        )

    return (
        _component(maximum, FREIGHT_MISMATCH, f"No {job_freight} experience"),
        [Factor(cat, f"You have no {job_freight} experience listed", False)],
    )


def score_team(driver: DriverFeatures, job: JobFeatures, maximum: float) -> CategoryResult:
    d = normalize_team_pref(driver.solo_team)
    j = normalize_team_pref(job.team_driving)
    cat = RuleCategory.TEAM

    if not d or not j:
        return _component(maximum, NEUTRAL, "Team preference data unavailable"), []

    if d == j or "both" in (d, j):
        return (
            _component(maximum, 1.0, f"Team match: {d} / {j}"),
            [Factor(cat, f"Team driving preference aligns ({j})", True)],
        )

    return (
        _component(maximum, 0.0, f"Team mismatch: {d} vs {j}"),
        [Factor(cat, f"Job is {j} but you prefer {d}", False)],
    )


def score_location(driver: DriverFeatures, job: JobFeatures, maximum: float) -> CategoryResult:
    driver_state = extract_state(driver.license_state)
    job_state = extract_state(job.location)
    cat = RuleCategory.LOCATION

    if not driver_state or not job_state:
        return _component(maximum, NEUTRAL, "Location data unavailable"), []

    if driver_state == job_state:
        return (
            _component(maximum, 1.0, f"Same state: {driver_state}"),
            [Factor(cat, f"Job is in your state ({driver_state.title()})", True)],
        )

    if are_neighboring_states(driver_state, job_state):
        return (
            _component(maximum, LOCATION_NEIGHBOR, f"Neighboring: {driver_state} / {job_state}"),
            [Factor(cat, f"Job is in a neighboring state ({job_state.title()})", True)],
        )

    return (
        _component(maximum, LOCATION_FAR, f"Different state: {driver_state} vs {job_state}"),
        [Factor(cat, f"Job is in {job_state.title()}, relocation may apply", False)],
    )


def score_experience(driver: DriverFeatures, maximum: float) -> CategoryResult:
    ordinal = experience_ordinal(driver.years_exp)
    cat = RuleCategory.EXPERIENCE

    if ordinal < 0:
        return _component(maximum, NEUTRAL, "Experience data unavailable"), []

    factors = []
    if ordinal >= 3:
        factors.append(Factor(cat, f"Your {driver.years_exp} experience is highly valued", True))
    elif ordinal >= 2:
        factors.append(Factor(cat, f"Your experience level ({driver.years_exp}) meets expectations", True))

    return (
        _component(maximum, EXPERIENCE_TIERS[ordinal], f"Experience: {driver.years_exp} (ordinal {ordinal})"),
        factors,
    )


def score_license(driver: DriverFeatures, job: JobFeatures, maximum: float) -> CategoryResult:
    license_class = normalize_license_class(driver.license_class)
    endorsements = {k.lower() for k, v in (driver.endorsements or {}).items() if v}
    job_freight = normalize_freight_type(job.freight_type)
    cat = RuleCategory.LICENSE
    factors = []

    points = LICENSE_CLASS_POINTS.get(license_class, LICENSE_UNKNOWN_POINTS)
    if license_class == "a":
        factors.append(Factor(cat, "Class A CDL qualifies for this position", True))

    if job_freight == "tanker":
        if any(e in endorsements for e in TANKER_ENDORSEMENTS):
            points += TANKER_ENDORSEMENT_POINTS
            factors.append(Factor(cat, "Your tanker endorsement matches this freight type", True))
        else:
            factors.append(Factor(cat, "Tanker endorsement may be required for this position", False))
    elif "hazmat" in endorsements:
        points += HAZMAT_ENDORSEMENT_POINTS
    else:
        points += NO_ENDORSEMENT_POINTS

    fraction = min(points, LICENSE_BASE) / LICENSE_BASE
    return _component(maximum, fraction, f"License: {license_class or 'unknown'}, endorsements applied"), factors


def derive_missing_fields(driver: DriverFeatures) -> List[str]:
    """Profile fields the driver has not filled in, in display order."""
    missing = []
    if not driver.driver_type:
        missing.append("driver type")
    if not driver.license_class:
        missing.append("license class")
    if not driver.years_exp:
        missing.append("years of experience")
    if not driver.license_state:
        missing.append("license state")
    if not driver.zip_code:
        missing.append("zip code")
    if not (driver.about or "").strip():
        missing.append("about me")
    if not any((driver.route_prefs or {}).values()):
        missing.append("route preferences")
    if not any((driver.hauler_experience or {}).values()):
        missing.append("freight experience")
    if not any((driver.endorsements or {}).values()):
        missing.append("endorsements")
    return missing


def score_driver_job(driver: DriverFeatures, job: JobFeatures, maxima: DriverRuleMaxima) -> RulesResult:
    """
    Score one driver against one job.

    Raises:
        InvalidCandidate: If the driver id or job id is missing.
    """
    if not driver.driver_id or not job.job_id:
        raise InvalidCandidate(
            f"Cannot score pair without identity (driver={driver.driver_id!r}, job={job.job_id!r})"
        )

    breakdown = {}
    factors: List[Factor] = []

    driver_type, type_factors, hard_mismatch = score_driver_type(driver, job, maxima.driver_type)
    breakdown[RuleCategory.DRIVER_TYPE] = driver_type
    factors.extend(type_factors)

    for category, (component, category_factors) in (
        (RuleCategory.ROUTE, score_route(driver, job, maxima.route)),
        (RuleCategory.FREIGHT, score_freight(driver, job, maxima.freight)),
        (RuleCategory.TEAM, score_team(driver, job, maxima.team)),
        (RuleCategory.LOCATION, score_location(driver, job, maxima.location)),
        (RuleCategory.EXPERIENCE, score_experience(driver, maxima.experience)),
        (RuleCategory.LICENSE, score_license(driver, job, maxima.license)),
    ):
        breakdown[category] = component
        factors.extend(category_factors)

    max_score = sum(c.max_score for c in breakdown.values())
    total = sum(c.score for c in breakdown.values())
    if hard_mismatch:
        total = min(total, maxima.hard_mismatch_cap)

    return RulesResult(
        score=round(total, 2),
        max_score=max_score,
        breakdown=breakdown,
        factors=factors,
        missing_fields=derive_missing_fields(driver),
        hard_mismatch=hard_mismatch,
    )
