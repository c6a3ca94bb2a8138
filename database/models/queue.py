from sqlalchemy import Column, Text, TIMESTAMP, Integer, Index, func
from sqlalchemy.sql import text as sql_text

from .base import Base, new_id


class RecomputeQueueEntry(Base):
    """
    Durable work item asking for an entity's matches to be rescored.

    At most one ``pending`` row may exist per (entity_type, entity_id); the
    partial unique index makes enqueue idempotent under concurrency.
    """
    __tablename__ = 'matching_recompute_queue'

    id = Column(Text, primary_key=True, default=new_id)
    entity_type = Column(Text, nullable=False)  # driver_profile|job|company_profile|application|lead
    entity_id = Column(Text, nullable=False)
    company_id = Column(Text)
    reason = Column(Text, nullable=False, default='unspecified')

    status = Column(Text, nullable=False, default='pending')  # pending|processing|done|failed
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    started_at = Column(TIMESTAMP(timezone=True))
    completed_at = Column(TIMESTAMP(timezone=True))

    __table_args__ = (
        Index(
            'uq_recompute_queue_pending',
            'entity_type', 'entity_id',
            unique=True,
            postgresql_where=sql_text("status = 'pending'"),
            sqlite_where=sql_text("status = 'pending'"),
        ),
        Index('idx_recompute_queue_status_created', 'status', 'created_at'),
    )
