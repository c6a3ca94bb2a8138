from sqlalchemy import Column, Text, TIMESTAMP, Boolean, Index, func

from .base import Base, JSONType, new_id


class Application(Base):
    """A driver's application to a company; scored as a company-side candidate."""
    __tablename__ = 'applications'

    id = Column(Text, primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False)
    job_id = Column(Text)
    driver_id = Column(Text)

    first_name = Column(Text)
    last_name = Column(Text)
    driver_type = Column(Text)
    license_class = Column(Text)
    years_exp = Column(Text)
    license_state = Column(Text)
    zip_code = Column(Text)
    solo_team = Column(Text)
    notes = Column(Text)

    route_prefs = Column(JSONType, default=dict)
    hauler_experience = Column(JSONType, default=dict)
    endorsements = Column(JSONType, default=dict)

    submitted_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_applications_company', 'company_id'),
        Index('idx_applications_driver', 'driver_id'),
    )


class Lead(Base):
    """An imported lead; sparse data, scored with missing-field cautions."""
    __tablename__ = 'leads'

    id = Column(Text, primary_key=True, default=new_id)
    company_id = Column(Text, nullable=False)

    full_name = Column(Text)
    state = Column(Text)
    years_exp = Column(Text)
    is_owner_op = Column(Boolean)
    truck_year = Column(Text)
    truck_make = Column(Text)
    truck_model = Column(Text)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('idx_leads_company', 'company_id'),
    )
