from sqlalchemy import Column, Integer, Boolean, TIMESTAMP, func

from .base import Base, JSONType

ROLLOUT_SINGLETON_ID = 1


class MatchingRolloutConfig(Base):
    """Singleton row gating who may read match scores. Operator-managed."""
    __tablename__ = 'matching_rollout_config'

    id = Column(Integer, primary_key=True, default=ROLLOUT_SINGLETON_ID)
    shadow_mode = Column(Boolean, nullable=False, default=True)
    driver_ui_enabled = Column(Boolean, nullable=False, default=False)
    company_ui_enabled = Column(Boolean, nullable=False, default=False)
    company_beta_ids = Column(JSONType, default=list)

    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
