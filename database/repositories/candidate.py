from typing import List, Optional

from sqlalchemy import select

from database.models import Application, Lead
from database.repositories.base import BaseRepository


class CandidateRepository(BaseRepository):
    """Company-side candidates: applications and imported leads."""

    def get_application(self, application_id: str) -> Optional[Application]:
        return self.db.get(Application, application_id)

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        return self.db.get(Lead, lead_id)

    def get_applications_for_company(self, company_id: str) -> List[Application]:
        stmt = (
            select(Application)
            .where(Application.company_id == company_id)
            .order_by(Application.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_leads_for_company(self, company_id: str) -> List[Lead]:
        stmt = select(Lead).where(Lead.company_id == company_id).order_by(Lead.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())
