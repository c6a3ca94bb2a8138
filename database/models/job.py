from sqlalchemy import Column, Text, TIMESTAMP, Index, func

from .base import Base, new_id


class Job(Base):
    """
    A trucking-company job posting.

    Only ``status == 'Active'`` jobs are scored or returned by match reads;
    the status is checked live at read time, not only at scoring time.
    """
    __tablename__ = 'jobs'

    id = Column(Text, primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False)

    title = Column(Text, nullable=False, default='')
    description = Column(Text)
    freight_type = Column(Text)
    driver_type = Column(Text)
    route_type = Column(Text)
    team_driving = Column(Text)
    location = Column(Text)
    pay = Column(Text)

    status = Column(Text, nullable=False, default='Active')  # Draft|Active|Paused|Closed

    posted_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_jobs_company', 'company_id'),
        Index('idx_jobs_status', 'status'),
    )
