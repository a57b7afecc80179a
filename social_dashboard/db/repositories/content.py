from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from social_dashboard.db.models import ContentItem


class ContentItemsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    @staticmethod
    def _filtered(
        stmt: Select,
        client_id: str,
        platform: Optional[str] = None,
        campaign_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Select:
        stmt = stmt.where(ContentItem.client_id == client_id)
        if platform:
            stmt = stmt.where(ContentItem.platform == platform)
        if campaign_id:
            stmt = stmt.where(ContentItem.campaign_id == campaign_id)
        if start_date:
            stmt = stmt.where(ContentItem.post_date >= start_date)
        if end_date:
            stmt = stmt.where(ContentItem.post_date <= end_date)
        return stmt

    def list(
        self,
        client_id: str,
        platform: Optional[str] = None,
        campaign_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[ContentItem]:
        stmt = self._filtered(
            select(ContentItem),
            client_id,
            platform=platform,
            campaign_id=campaign_id,
            start_date=start_date,
            end_date=end_date,
        )
        stmt = stmt.order_by(ContentItem.post_date.desc(), ContentItem.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit).offset(offset)
        return list(self.session.scalars(stmt).all())

    def count(
        self,
        client_id: str,
        platform: Optional[str] = None,
        campaign_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        stmt = self._filtered(
            select(func.count(ContentItem.id)),
            client_id,
            platform=platform,
            campaign_id=campaign_id,
            start_date=start_date,
            end_date=end_date,
        )
        return int(self.session.scalar(stmt) or 0)

    def platform_counts(self, client_id: str, start_date: date, end_date: date) -> List[Tuple[str, int]]:
        stmt = self._filtered(
            select(ContentItem.platform, func.count(ContentItem.id).label("count")),
            client_id,
            start_date=start_date,
            end_date=end_date,
        ).group_by(ContentItem.platform)
        return [(row.platform, int(row.count)) for row in self.session.execute(stmt)]

    def platforms(self, client_id: str, start_date: date, end_date: date) -> List[str]:
        stmt = self._filtered(
            select(ContentItem.platform),
            client_id,
            start_date=start_date,
            end_date=end_date,
        )
        return list(self.session.scalars(stmt).all())
