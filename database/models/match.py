from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Boolean, Integer, Numeric, UniqueConstraint, Index, func

from .base import Base, JSONType, new_id


class MatchScoreColumns:
    """Score columns shared by driver-side and company-side match rows."""
    overall_score = Column(Integer, nullable=False)
    rules_score = Column(Numeric(6, 2, asdecimal=False), nullable=False)
    semantic_score = Column(Numeric(6, 2, asdecimal=False), nullable=True)  # NULL in degraded mode
    behavior_score = Column(Numeric(6, 2, asdecimal=False), nullable=True)
    confidence = Column(Text, nullable=False, default='low')  # low|medium|high

    top_reasons = Column(JSONType, default=list)
    cautions = Column(JSONType, default=list)
    missing_fields = Column(JSONType, default=list)
    score_breakdown = Column(JSONType, default=dict)

    degraded_mode = Column(Boolean, nullable=False, default=False)
    provider = Column(Text)
    model = Column(Text)
    version = Column(Integer, nullable=False, default=1)

    computed_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())


class DriverJobMatchScore(MatchScoreColumns, Base):
    """
    Stored match between a driver and a job.

    Created and overwritten by the recompute pipeline only. Invariant:
    ``degraded_mode`` is true exactly when ``semantic_score`` is NULL.
    """
    __tablename__ = 'driver_job_match_scores'

    id = Column(Text, primary_key=True, default=new_id)
    driver_id = Column(Text, nullable=False)
    job_id = Column(Text, ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)

    __table_args__ = (
        UniqueConstraint('driver_id', 'job_id', name='uq_driver_job_match'),
        Index('idx_driver_job_match_driver_score', 'driver_id', 'overall_score'),
        Index('idx_driver_job_match_job', 'job_id'),
    )


class CompanyCandidateMatchScore(MatchScoreColumns, Base):
    """Stored match between a company's job and a candidate (application or lead)."""
    __tablename__ = 'company_candidate_match_scores'

    id = Column(Text, primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False)
    job_id = Column(Text, ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    candidate_source = Column(Text, nullable=False)  # application|lead
    candidate_id = Column(Text, nullable=False)
    candidate_driver_id = Column(Text)

    __table_args__ = (
        UniqueConstraint('company_id', 'job_id', 'candidate_source', 'candidate_id',
                         name='uq_company_candidate_match'),
        Index('idx_company_candidate_match_company_score', 'company_id', 'overall_score'),
    )
