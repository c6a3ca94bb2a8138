from sqlalchemy import Column, Text, TIMESTAMP, UniqueConstraint, Index, func

from .base import Base, new_id


class DriverMatchFeedback(Base):
    """A driver's explicit feedback on one job match: helpful|not_relevant|hide."""
    __tablename__ = 'driver_match_feedback'

    id = Column(Text, primary_key=True, default=new_id)
    driver_id = Column(Text, nullable=False)
    job_id = Column(Text, nullable=False)
    feedback = Column(Text, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('driver_id', 'job_id', name='uq_driver_match_feedback'),
    )


class DriverMatchEvent(Base):
    """A driver's interaction with a job (view|click|save|apply)."""
    __tablename__ = 'driver_match_events'

    id = Column(Text, primary_key=True, default=new_id)
    driver_id = Column(Text, nullable=False)
    job_id = Column(Text, nullable=False)
    event_type = Column(Text, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_driver_match_events_driver_created', 'driver_id', 'created_at'),
    )
