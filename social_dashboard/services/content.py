from __future__ import annotations

import logging
from collections import OrderedDict
from functools import lru_cache
from datetime import date
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence, TypeVar

from pyuca import Collator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from social_dashboard.db.enums import PlatformEnum, SortDirectionEnum
from social_dashboard.db.models import ContentItem
from social_dashboard.db.repositories.campaigns import CampaignsRepository
from social_dashboard.db.repositories.content import ContentItemsRepository
from social_dashboard.db.repositories.metrics import MetricsRepository
from social_dashboard.schemas.dashboard import (
    CampaignOption,
    ContentFilter,
    ContentItemOut,
    ContentPage,
    DailyViewsPoint,
    MetricsRow,
    PlatformShare,
)
from social_dashboard.services.metrics import VIEWS, build_metrics_map, coerce_metric_value, fetch_content_metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

NO_CAMPAIGN = "No Campaign"

PLATFORM_COLORS: Dict[str, str] = {
    PlatformEnum.instagram.value: "#E1306C",
    PlatformEnum.youtube.value: "#FF0000",
    PlatformEnum.tiktok.value: "#000000",
    PlatformEnum.twitch.value: "#6441A4",
    PlatformEnum.kick.value: "#5EAC24",
}
DEFAULT_PLATFORM_COLOR = "#888888"

# Client-facing sort keys mapped to ContentItemOut attributes.
SORT_FIELDS: Dict[str, str] = {
    "content_name": "contentName",
    "contentName": "contentName",
    "name": "contentName",
    "platform": "platform",
    "content_type": "contentType",
    "contentType": "contentType",
    "type": "contentType",
    "post_date": "postDate",
    "postDate": "postDate",
    "date": "postDate",
    "campaign_name": "campaignName",
    "campaignName": "campaignName",
    "campaign": "campaignName",
}


def platform_color(platform: str) -> str:
    return PLATFORM_COLORS.get(platform, DEFAULT_PLATFORM_COLOR)


def campaign_display_name(item: ContentItem) -> str:
    campaign = item.campaign
    if campaign is None or not campaign.name:
        return NO_CAMPAIGN
    return campaign.name


def serialize_content_item(item: ContentItem, metrics: Optional[Dict[str, Any]] = None) -> ContentItemOut:
    return ContentItemOut(
        id=item.id,
        contentName=item.content_name,
        platform=item.platform,
        contentType=item.content_type,
        contentUrl=item.content_url,
        postDate=item.post_date,
        campaignId=item.campaign_id,
        campaignName=campaign_display_name(item),
        metrics=dict(metrics or {}),
    )


def get_client_campaigns(session: Session, client_id: str) -> List[CampaignOption]:
    try:
        campaigns = CampaignsRepository(session).list(client_id)
    except SQLAlchemyError:
        logger.exception("Campaign fetch failed", extra={"client_id": client_id})
        session.rollback()
        return []
    return [
        CampaignOption(id=c.id, name=c.name, startDate=c.start_date, endDate=c.end_date)
        for c in campaigns
    ]


def get_client_content(session: Session, filters: ContentFilter) -> ContentPage:
    """One page of a client's content, newest first, with campaign names resolved."""
    repo = ContentItemsRepository(session)
    predicates = dict(
        platform=filters.platform,
        campaign_id=filters.campaignId,
        start_date=filters.startDate,
        end_date=filters.endDate,
    )
    try:
        items = repo.list(filters.clientId, limit=filters.limit, offset=filters.offset, **predicates)
        count = repo.count(filters.clientId, **predicates)
    except SQLAlchemyError:
        logger.exception(
            "Content fetch failed",
            extra={"client_id": filters.clientId, "page": filters.page, "limit": filters.limit},
        )
        session.rollback()
        return ContentPage()
    return ContentPage(items=[serialize_content_item(item) for item in items], count=count)


def get_client_content_with_metrics(
    session: Session,
    filters: ContentFilter,
    sort_key: Optional[str] = None,
    direction: SortDirectionEnum = SortDirectionEnum.desc,
) -> ContentPage:
    page = get_client_content(session, filters)
    if not page.items:
        return page
    metrics_map = fetch_content_metrics(session, [item.id for item in page.items])
    items = [item.model_copy(update={"metrics": metrics_map.get(item.id, {})}) for item in page.items]
    if sort_key:
        items = sort_content(items, sort_key, direction)
    return ContentPage(items=items, count=page.count)


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


def _string_sort_key(value: str) -> tuple:
    # Unicode collation (DUCET) first, raw value breaks exact-key ties.
    return (_collator().sort_key(value), value)


def _value_sort_key(value: Any) -> tuple:
    if isinstance(value, str):
        return (1, _string_sort_key(value))
    if isinstance(value, date):
        return (0, value.toordinal())
    return (2, value)


def sort_content(
    items: Sequence[ContentItemOut],
    key: str,
    direction: SortDirectionEnum | str = SortDirectionEnum.desc,
) -> List[ContentItemOut]:
    """
    Sort content rows by a client-facing key.

    Strings follow Unicode collation, dates chronologically. Rows whose value is
    missing always go last, whichever direction is requested.
    """
    attr = SORT_FIELDS.get(key)
    if attr is None:
        raise ValueError(f"Unsupported sort key: {key}")
    descending = SortDirectionEnum(direction) == SortDirectionEnum.desc

    present = [item for item in items if getattr(item, attr) is not None]
    missing = [item for item in items if getattr(item, attr) is None]
    ordered = sorted(present, key=lambda item: _value_sort_key(getattr(item, attr)), reverse=descending)
    return ordered + missing


def aggregate(
    rows: Iterable[T],
    group_key: Callable[[T], K],
    weight: Optional[Callable[[T], Any]] = None,
) -> "OrderedDict[K, int]":
    """
    Group rows and sum an integer weight per group (1 per row by default).

    Both the SQL aggregate path and the raw-row fallback of the platform
    distribution reduce through this function.
    """
    totals: "OrderedDict[K, int]" = OrderedDict()
    for row in rows:
        key = group_key(row)
        amount = int(weight(row)) if weight else 1
        totals[key] = totals.get(key, 0) + amount
    return totals


def shape_platform_distribution(counts: Dict[str, int]) -> List[PlatformShare]:
    return [
        PlatformShare(name=platform, value=count, color=platform_color(platform))
        for platform, count in counts.items()
        if count > 0
    ]


def get_platform_distribution(
    session: Session,
    client_id: str,
    start_date: date,
    end_date: date,
) -> List[PlatformShare]:
    repo = ContentItemsRepository(session)
    try:
        grouped = repo.platform_counts(client_id, start_date, end_date)
        return shape_platform_distribution(aggregate(grouped, lambda row: row[0], weight=lambda row: row[1]))
    except SQLAlchemyError:
        logger.warning(
            "Platform aggregate failed; falling back to row grouping",
            exc_info=True,
            extra={"client_id": client_id},
        )
        session.rollback()

    try:
        platforms = repo.platforms(client_id, start_date, end_date)
    except SQLAlchemyError:
        logger.exception("Platform distribution fallback failed", extra={"client_id": client_id})
        session.rollback()
        return []
    return shape_platform_distribution(aggregate(platforms, lambda platform: platform))


def get_daily_views(
    session: Session,
    client_id: str,
    start_date: date,
    end_date: date,
    platform: Optional[str] = None,
) -> List[DailyViewsPoint]:
    """Sum of views per publish date that has content; dates without posts are omitted."""
    try:
        items = ContentItemsRepository(session).list(
            client_id,
            platform=platform,
            start_date=start_date,
            end_date=end_date,
        )
        if not items:
            return []
        rows = MetricsRepository(session).list_for_content([item.id for item in items], metric_name=VIEWS)
    except SQLAlchemyError:
        logger.exception("Daily views fetch failed", extra={"client_id": client_id, "platform": platform})
        session.rollback()
        return []

    views_by_content = {content_id: metrics.get(VIEWS) for content_id, metrics in build_metrics_map(rows).items()}
    per_day = aggregate(
        items,
        lambda item: item.post_date,
        weight=lambda item: coerce_metric_value(views_by_content.get(item.id)),
    )
    return [DailyViewsPoint(date=day, views=total) for day, total in sorted(per_day.items())]


def list_metrics_rows(
    session: Session,
    client_id: str,
    platform: Optional[str] = None,
    campaign_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[MetricsRow]:
    """All matching content with metrics attached. Retrieval errors propagate to the caller."""
    items = ContentItemsRepository(session).list(
        client_id,
        platform=platform,
        campaign_id=campaign_id,
        start_date=start_date,
        end_date=end_date,
    )
    if not items:
        return []
    metrics_map = build_metrics_map(MetricsRepository(session).list_for_content([item.id for item in items]))
    return [
        MetricsRow(
            id=item.id,
            name=item.content_name,
            platform=item.platform,
            type=item.content_type,
            date=item.post_date,
            campaign=campaign_display_name(item),
            metrics=metrics_map.get(item.id, {}),
        )
        for item in items
    ]
