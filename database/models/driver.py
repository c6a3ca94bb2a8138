from sqlalchemy import Column, Text, TIMESTAMP, Boolean, func

from .base import Base, JSONType, new_id


class DriverProfile(Base):
    """
    A CDL driver's profile as seen by the matching engine.

    Preference maps (route_prefs, hauler_experience, endorsements) are stored
    as {label: bool}; labels are normalized at scoring time.
    """
    __tablename__ = 'driver_profiles'

    id = Column(Text, primary_key=True, default=new_id)

    driver_type = Column(Text)  # company|owner-operator|lease|student
    license_class = Column(Text)  # a|b|c|permit
    years_exp = Column(Text)  # none|less-1|1-3|3-5|5+
    license_state = Column(Text)
    zip_code = Column(Text)
    about = Column(Text)
    solo_team = Column(Text)  # solo|team|both

    route_prefs = Column(JSONType, default=dict)
    hauler_experience = Column(JSONType, default=dict)
    endorsements = Column(JSONType, default=dict)

    contact_consent = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
