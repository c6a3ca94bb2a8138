from typing import List, Optional

from sqlalchemy import select

from database.models import Job
from database.repositories.base import BaseRepository

ACTIVE_STATUS = 'Active'


class JobRepository(BaseRepository):
    def get_by_id(self, job_id: str) -> Optional[Job]:
        return self.db.get(Job, job_id)

    def get_active_jobs(self, company_id: Optional[str] = None) -> List[Job]:
        stmt = select(Job).where(Job.status == ACTIVE_STATUS)
        if company_id:
            stmt = stmt.where(Job.company_id == company_id)
        stmt = stmt.order_by(Job.posted_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def list_active_ids(self) -> List[str]:
        stmt = select(Job.id).where(Job.status == ACTIVE_STATUS)
        return list(self.db.execute(stmt).scalars().all())
