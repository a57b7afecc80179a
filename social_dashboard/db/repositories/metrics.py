from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from social_dashboard.db.models import Metric


class MetricsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_content(self, content_ids: Sequence[str], metric_name: Optional[str] = None) -> List[Metric]:
        if not content_ids:
            return []
        stmt = select(Metric).where(Metric.content_id.in_(list(content_ids)))
        if metric_name:
            stmt = stmt.where(Metric.metric_name == metric_name)
        stmt = stmt.order_by(Metric.recorded_at.asc(), Metric.id.asc())
        return list(self.session.scalars(stmt).all())
