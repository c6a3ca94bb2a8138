#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Run only tests that need no database
    python -m pytest tests/ -v -m "not db"

Database tests run against an in-memory SQLite database built from the same
models, so no PostgreSQL server is required. The ON CONFLICT statements used
by the repositories are emitted in SQLite's dialect there.
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database.models import Base
from matching.scorer.models import DriverFeatures, JobFeatures


def make_driver(**overrides) -> DriverFeatures:
    """Owner-operator, Class A, 5+ years, Texas, OTR dry van."""
    driver = DriverFeatures(
        driver_id="driver-1",
        driver_type="owner-operator",
        license_class="a",
        years_exp="5+",
        license_state="TX",
        zip_code="75001",
        about="Fifteen years hauling dry van coast to coast",
        solo_team="solo",
        endorsements={"hazmat": True},
        hauler_experience={"dryVan": True},
        route_prefs={"otr": True},
        text_block="Fifteen years hauling dry van coast to coast. Driver type: owner-operator",
    )
    return replace(driver, **overrides)


def make_job(**overrides) -> JobFeatures:
    """Active OTR dry van owner-operator job in Dallas."""
    job = JobFeatures(
        job_id="job-1",
        company_id="company-1",
        title="OTR Dry Van Owner Operator",
        driver_type="Owner Operator",
        route_type="OTR",
        freight_type="Dry Van",
        team_driving="Solo",
        location="Dallas, TX",
        text_block="OTR Dry Van Owner Operator. Freight: Dry Van",
    )
    return replace(job, **overrides)


def make_session_factory():
    """
    Fresh in-memory database with every table created.

    StaticPool keeps the single connection alive so every session sees the
    same database.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def score_row(overall: int = 70, **overrides) -> Dict[str, Any]:
    """Column values for a stored match row."""
    row = {
        "overall_score": overall,
        "rules_score": 60.0,
        "semantic_score": 55.0,
        "behavior_score": 5.0,
        "confidence": "medium",
        "top_reasons": [{"text": "Your OTR route preference matches", "positive": True}],
        "cautions": [],
        "missing_fields": ["zip code"],
        "score_breakdown": {"rules": {"score": 60.0, "max_score": 90.0, "detail": "Attribute rules"}},
        "degraded_mode": False,
        "provider": "hf",
        "model": "sentence-transformers/all-MiniLM-L6-v2",
        "computed_at": datetime.now(timezone.utc),
    }
    row.update(overrides)
    return row
