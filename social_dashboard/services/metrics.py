"""
Metric reduction for content items.

Metric rows are stored one per (content item, metric name) with free-form
values, so every reduction goes through ``coerce_metric_value``. Absent metrics
count as zero and a zero view total yields a zero engagement rate.
"""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from social_dashboard.db.models import ContentItem, Metric
from social_dashboard.db.repositories.content import ContentItemsRepository
from social_dashboard.db.repositories.metrics import MetricsRepository
from social_dashboard.schemas.dashboard import PlatformPerformance, SummaryStats

logger = logging.getLogger(__name__)

MetricsMap = Dict[str, Dict[str, Any]]

VIEWS = "views"
LIKES = "likes"
COMMENTS = "comments"


def coerce_metric_value(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(str(raw).strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def engagement_rate(likes: float, comments: float, views: float) -> float:
    if views <= 0:
        return 0.0
    return (likes + comments) / views * 100


def format_rate(value: float) -> str:
    return f"{value:.2f}"


def build_metrics_map(rows: Iterable[Metric]) -> MetricsMap:
    """Index metric rows by content id, then metric name. Later rows win on duplicate names."""
    metrics_map: MetricsMap = {}
    for row in rows:
        metrics_map.setdefault(row.content_id, {})[row.metric_name] = row.metric_value
    return metrics_map


def fetch_content_metrics(session: Session, content_ids: Sequence[str]) -> MetricsMap:
    if not content_ids:
        return {}
    try:
        rows = MetricsRepository(session).list_for_content(content_ids)
    except SQLAlchemyError:
        logger.exception("Metrics fetch failed", extra={"content_ids_len": len(content_ids)})
        session.rollback()
        return {}
    return build_metrics_map(rows)


def _metric_total(metrics: Mapping[str, Any] | None, name: str) -> float:
    if not metrics:
        return 0.0
    return coerce_metric_value(metrics.get(name))


def summarize(items: Sequence[ContentItem], metrics_map: MetricsMap) -> SummaryStats:
    total_views = 0.0
    total_likes = 0.0
    total_comments = 0.0
    for item in items:
        metrics = metrics_map.get(item.id)
        total_views += _metric_total(metrics, VIEWS)
        total_likes += _metric_total(metrics, LIKES)
        total_comments += _metric_total(metrics, COMMENTS)
    rate = engagement_rate(total_likes, total_comments, total_views)
    return SummaryStats(
        totalViews=total_views,
        totalLikes=total_likes,
        totalComments=total_comments,
        averageEngagement=format_rate(rate),
        posts=len(items),
    )


def platform_breakdown(items: Sequence[ContentItem], metrics_map: MetricsMap) -> List[PlatformPerformance]:
    """
    Reduce content items per platform, in order of first appearance.

    ``reach`` is average views per post, rounded half-up to an integer.
    """
    grouped: "OrderedDict[str, list[ContentItem]]" = OrderedDict()
    for item in items:
        grouped.setdefault(item.platform, []).append(item)

    rows: List[PlatformPerformance] = []
    for platform, platform_items in grouped.items():
        stats = summarize(platform_items, metrics_map)
        posts = stats.posts
        reach = int(round_half_up(stats.totalViews / posts)) if posts else 0
        rows.append(
            PlatformPerformance(
                platform=platform,
                posts=posts,
                views=stats.totalViews,
                likes=stats.totalLikes,
                comments=stats.totalComments,
                engagement=stats.averageEngagement,
                reach=reach,
            )
        )
    return rows


def load_period_stats(
    session: Session,
    client_id: str,
    start_date: date,
    end_date: date,
    platform: Optional[str] = None,
    campaign_id: Optional[str] = None,
) -> SummaryStats:
    """Summary reduction for one window. Raises SQLAlchemyError on retrieval failure."""
    items = ContentItemsRepository(session).list(
        client_id,
        platform=platform,
        campaign_id=campaign_id,
        start_date=start_date,
        end_date=end_date,
    )
    if not items:
        return SummaryStats()
    rows = MetricsRepository(session).list_for_content([item.id for item in items])
    return summarize(items, build_metrics_map(rows))


def get_summary_stats(
    session: Session,
    client_id: str,
    start_date: date,
    end_date: date,
    platform: Optional[str] = None,
    campaign_id: Optional[str] = None,
) -> Optional[SummaryStats]:
    try:
        return load_period_stats(
            session,
            client_id,
            start_date,
            end_date,
            platform=platform,
            campaign_id=campaign_id,
        )
    except SQLAlchemyError:
        logger.exception(
            "Summary stats fetch failed",
            extra={"client_id": client_id, "start_date": str(start_date), "end_date": str(end_date)},
        )
        session.rollback()
        return None


def get_platform_performance(
    session: Session,
    client_id: str,
    start_date: date,
    end_date: date,
    platform: Optional[str] = None,
) -> List[PlatformPerformance]:
    try:
        items = ContentItemsRepository(session).list(
            client_id,
            platform=platform,
            start_date=start_date,
            end_date=end_date,
        )
        if not items:
            return []
        rows = MetricsRepository(session).list_for_content([item.id for item in items])
    except SQLAlchemyError:
        logger.exception(
            "Platform performance fetch failed",
            extra={"client_id": client_id, "platform": platform},
        )
        session.rollback()
        return []
    return platform_breakdown(items, build_metrics_map(rows))
