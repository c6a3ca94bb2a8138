from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from database.models import DriverProfile, Application
from database.repositories.base import BaseRepository


class DriverRepository(BaseRepository):
    def get_by_id(self, driver_id: str) -> Optional[DriverProfile]:
        return self.db.get(DriverProfile, driver_id)

    def get_latest_application(self, driver_id: str) -> Optional[Application]:
        """Most recent application by the driver; its notes enrich sparse profiles."""
        stmt = (
            select(Application)
            .where(Application.driver_id == driver_id)
            .order_by(Application.created_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def get_all(self) -> List[DriverProfile]:
        return list(self.db.execute(select(DriverProfile)).scalars().all())

    def list_ids_updated_since(self, since: datetime) -> List[str]:
        stmt = select(DriverProfile.id).where(DriverProfile.updated_at >= since)
        return list(self.db.execute(stmt).scalars().all())
