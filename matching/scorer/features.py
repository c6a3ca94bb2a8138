#!/usr/bin/env python3
"""
Feature extraction - stored rows to scorer inputs.

Works on any object exposing the column attributes (ORM rows, mocks), so the
scorers stay free of database types. Text blocks are PII-free: no names,
contact details or zip codes go into embeddings.
"""

from typing import Any, List, Optional

from matching.scorer.models import CandidateFeatures, CandidateSource, DriverFeatures, JobFeatures
from matching.scorer.normalize import (
    normalize_driver_type,
    normalize_experience,
    normalize_flags,
    normalize_freight_type,
    normalize_license_class,
    normalize_route_type,
    normalize_team_pref,
)
from matching.utils import first_present, truthy_keys


def _get(row: Any, name: str, default=None):
    if row is None:
        return default
    value = getattr(row, name, default)
    return default if value is None else value


def _flags(*rows: Any, name: str) -> dict:
    """First non-empty {label: bool} map among the rows."""
    for row in rows:
        value = _get(row, name)
        if value and any(value.values()):
            return dict(value)
    return {}


def _candidate_missing_fields(driver_type, license_class, years_exp, state) -> List[str]:
    """Attribute labels the candidate row leaves empty, in category order."""
    present = [
        ("driver type", driver_type),
        ("license class", license_class),
        ("experience", years_exp),
        ("state", state),
    ]
    return [label for label, value in present if not value]


def build_driver_text(profile: Any, application: Any = None) -> str:
    parts: List[str] = []
    about = _get(profile, "about")
    if about:
        parts.append(about.strip())

    driver_type = first_present(_get(profile, "driver_type"), _get(application, "driver_type"))
    license_class = first_present(_get(profile, "license_class"), _get(application, "license_class"))
    years_exp = first_present(_get(profile, "years_exp"), _get(application, "years_exp"))
    license_state = first_present(_get(profile, "license_state"), _get(application, "license_state"))
    solo_team = first_present(_get(profile, "solo_team"), _get(application, "solo_team"))

    if driver_type:
        parts.append(f"Driver type: {driver_type}")
    if license_class:
        parts.append(f"License: Class {str(license_class).upper()}")
    if years_exp:
        parts.append(f"Experience: {years_exp}")
    if license_state:
        parts.append(f"State: {license_state}")
    if solo_team:
        parts.append(f"Prefers: {solo_team}")

    endorsements = truthy_keys(_flags(profile, application, name="endorsements"))
    if endorsements:
        parts.append(f"Endorsements: {', '.join(endorsements)}")
    haulers = truthy_keys(_flags(profile, application, name="hauler_experience"))
    if haulers:
        parts.append(f"Hauler experience: {', '.join(haulers)}")
    routes = truthy_keys(_flags(profile, application, name="route_prefs"))
    if routes:
        parts.append(f"Route preferences: {', '.join(routes)}")

    notes = _get(application, "notes")
    if notes:
        parts.append(notes.strip())

    return ". ".join(parts)


def build_job_text(job: Any) -> str:
    parts: List[str] = []
    for attr, label in (
        ("title", None),
        ("description", None),
        ("freight_type", "Freight"),
        ("driver_type", "Driver type"),
        ("route_type", "Route"),
        ("team_driving", "Team"),
        ("location", "Location"),
        ("pay", "Pay"),
    ):
        value = _get(job, attr)
        if value:
            parts.append(f"{label}: {value}" if label else str(value).strip())
    return ". ".join(parts)


def build_lead_text(lead: Any) -> str:
    parts: List[str] = []
    if _get(lead, "state"):
        parts.append(f"State: {lead.state}")
    if _get(lead, "years_exp"):
        parts.append(f"Experience: {lead.years_exp}")
    if _get(lead, "is_owner_op"):
        parts.append("Owner-operator with own truck")
    truck = [str(v) for v in (_get(lead, "truck_year"), _get(lead, "truck_make"), _get(lead, "truck_model")) if v]
    if truck:
        parts.append(f"Truck: {' '.join(truck)}")
    return ". ".join(parts)


def extract_driver_features(profile: Any, application: Optional[Any] = None) -> DriverFeatures:
    """Profile fields win; the driver's latest application fills the gaps."""
    return DriverFeatures(
        driver_id=str(_get(profile, "id", "")),
        driver_type=normalize_driver_type(first_present(_get(profile, "driver_type"), _get(application, "driver_type"))),
        license_class=normalize_license_class(first_present(_get(profile, "license_class"), _get(application, "license_class"))),
        years_exp=normalize_experience(first_present(_get(profile, "years_exp"), _get(application, "years_exp"))),
        license_state=first_present(_get(profile, "license_state"), _get(application, "license_state")),
        zip_code=first_present(_get(profile, "zip_code"), _get(application, "zip_code")),
        about=_get(profile, "about"),
        solo_team=normalize_team_pref(first_present(_get(profile, "solo_team"), _get(application, "solo_team"))),
        endorsements=_flags(profile, application, name="endorsements"),
        hauler_experience=normalize_flags(_flags(profile, application, name="hauler_experience"), normalize_freight_type),
        route_prefs=normalize_flags(_flags(profile, application, name="route_prefs"), normalize_route_type),
        text_block=build_driver_text(profile, application),
    )


def extract_job_features(job: Any) -> JobFeatures:
    return JobFeatures(
        job_id=str(_get(job, "id", "")),
        company_id=_get(job, "company_id"),
        title=_get(job, "title", ""),
        description=_get(job, "description", ""),
        driver_type=normalize_driver_type(_get(job, "driver_type")),
        route_type=normalize_route_type(_get(job, "route_type")),
        freight_type=normalize_freight_type(_get(job, "freight_type")),
        team_driving=normalize_team_pref(_get(job, "team_driving")),
        location=_get(job, "location"),
        pay=_get(job, "pay"),
        status=_get(job, "status", "Active"),
        text_block=build_job_text(job),
    )


def extract_candidate_from_application(application: Any) -> CandidateFeatures:
    name = f"{_get(application, 'first_name', '')} {_get(application, 'last_name', '')}".strip()
    text_profile = {
        "driver_type": _get(application, "driver_type"),
        "license_class": _get(application, "license_class"),
        "years_exp": _get(application, "years_exp"),
        "license_state": _get(application, "license_state"),
    }
    driver_type = normalize_driver_type(_get(application, "driver_type"))
    license_class = normalize_license_class(_get(application, "license_class"))
    years_exp = normalize_experience(_get(application, "years_exp"))
    state = _get(application, "license_state")
    return CandidateFeatures(
        candidate_id=str(_get(application, "id", "")),
        source=CandidateSource.APPLICATION,
        candidate_driver_id=_get(application, "driver_id"),
        name=name,
        driver_type=driver_type,
        license_class=license_class,
        years_exp=years_exp,
        state=state,
        solo_team=normalize_team_pref(_get(application, "solo_team")),
        endorsements=dict(_get(application, "endorsements", {}) or {}),
        hauler_experience=normalize_flags(_get(application, "hauler_experience", {}), normalize_freight_type),
        route_prefs=normalize_flags(_get(application, "route_prefs", {}), normalize_route_type),
        created_at=first_present(_get(application, "submitted_at"), _get(application, "created_at")),
        text_block=build_driver_text(_AttrView(text_profile), application),
        missing_fields=_candidate_missing_fields(driver_type, license_class, years_exp, state),
    )


def extract_candidate_from_lead(lead: Any) -> CandidateFeatures:
    """Leads carry no license or preference data; absent fields become cautions."""
    is_owner_op = _get(lead, "is_owner_op")
    years_exp = normalize_experience(_get(lead, "years_exp"))
    missing = _candidate_missing_fields(is_owner_op is not None, None, years_exp, _get(lead, "state"))

    return CandidateFeatures(
        candidate_id=str(_get(lead, "id", "")),
        source=CandidateSource.LEAD,
        name=_get(lead, "full_name", ""),
        driver_type="owner-operator" if is_owner_op else None,
        years_exp=years_exp,
        state=_get(lead, "state"),
        created_at=_get(lead, "created_at"),
        text_block=build_lead_text(lead),
        missing_fields=missing,
    )


class _AttrView:
    """Attribute access over a dict, for reusing the text builders."""

    def __init__(self, data: dict):
        self._data = data

    def __getattr__(self, name):
        return self._data.get(name)
