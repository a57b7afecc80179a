from typing import List
from sqlalchemy import select
from sqlalchemy.orm import Session

from social_dashboard.db.models import Campaign


class CampaignsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list(self, client_id: str) -> List[Campaign]:
        stmt = (
            select(Campaign)
            .where(Campaign.client_id == client_id)
            .order_by(Campaign.start_date.desc().nulls_last(), Campaign.name.asc())
        )
        return list(self.session.scalars(stmt).all())
