from __future__ import annotations

from datetime import date, timedelta
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from social_dashboard.db.enums import PlatformEnum
from social_dashboard.schemas.dashboard import (
    ContentItemOut,
    ContentRowView,
    DateWindow,
    PlatformPerformance,
    RelevantMetric,
    TopPerformer,
    TopPerformers,
)
from social_dashboard.services.metrics import coerce_metric_value

EMPTY_CONTENT_MESSAGE = "No content found for these filters"
NOT_CONFIGURED_MESSAGE = (
    "Your account is not associated with any client. Please contact your administrator."
)
CLIENT_NOT_FOUND_MESSAGE = "We couldn't find the client information for your account."

DATE_PRESETS: Tuple[str, ...] = ("7d", "30d", "90d", "month", "year", "custom")

_FEED_METRICS = (("views", "Views"), ("likes", "Likes"), ("comments", "Comments"))
_STORY_METRICS = (("views", "Views"), ("clicks", "Link Clicks"))
_VIDEO_METRICS = _FEED_METRICS + (("hours", "Hours Watched"),)
_STREAM_METRICS = (("avgViewers", "Avg Viewers"), ("peakViewers", "Peak Viewers"), ("hours", "Hours Watched"))


def _metric_layout(platform: str, content_type: Optional[str]) -> Tuple[Tuple[str, str], ...]:
    if platform == PlatformEnum.instagram.value:
        if content_type in ("Post", "Reel"):
            return _FEED_METRICS
        if content_type == "Story":
            return _STORY_METRICS
        return ()
    if platform in (PlatformEnum.youtube.value, PlatformEnum.tiktok.value):
        return _VIDEO_METRICS
    if platform in (PlatformEnum.twitch.value, PlatformEnum.kick.value):
        return _STREAM_METRICS
    return ()


def relevant_metrics(platform: str, content_type: Optional[str], metrics: Mapping[str, Any]) -> List[RelevantMetric]:
    """Metrics worth showing for a row, by platform and content type. Zero or absent values are skipped."""
    return [
        RelevantMetric(label=label, value=metrics[name])
        for name, label in _metric_layout(platform, content_type)
        if coerce_metric_value(metrics.get(name)) != 0
    ]


def content_rows(items: Sequence[ContentItemOut]) -> List[ContentRowView]:
    return [
        ContentRowView(
            **item.model_dump(),
            relevantMetrics=relevant_metrics(item.platform, item.contentType, item.metrics),
        )
        for item in items
    ]


def empty_state(items: Sequence[Any]) -> Optional[str]:
    return None if items else EMPTY_CONTENT_MESSAGE


def top_performers(rows: Sequence[PlatformPerformance]) -> TopPerformers:
    if not rows:
        return TopPerformers()
    # max() keeps the first row on ties, so input order decides between equals.
    best = max(rows, key=lambda row: coerce_metric_value(row.engagement))
    most_viewed = max(rows, key=lambda row: row.views)
    most_posts = max(rows, key=lambda row: row.posts)
    return TopPerformers(
        bestEngagement=TopPerformer(platform=best.platform, value=f"{best.engagement}% engagement rate"),
        mostViews=TopPerformer(platform=most_viewed.platform, value=f"{int(most_viewed.views):,} total views"),
        mostPosts=TopPerformer(
            platform=most_posts.platform,
            value=f"{most_posts.posts} {'post' if most_posts.posts == 1 else 'posts'}",
        ),
    )


def sort_by_engagement(rows: Sequence[PlatformPerformance]) -> List[PlatformPerformance]:
    return sorted(rows, key=lambda row: coerce_metric_value(row.engagement), reverse=True)


def default_date_range(today: date, days: int = 30) -> DateWindow:
    return DateWindow(start=today - timedelta(days=days), end=today)


def date_preset_range(preset: str, today: date) -> Optional[DateWindow]:
    """Resolve a filter-bar preset. ``custom`` keeps the current range and returns None."""
    if preset == "custom":
        return None
    if preset == "7d":
        return DateWindow(start=today - timedelta(days=7), end=today)
    if preset == "90d":
        return DateWindow(start=today - timedelta(days=90), end=today)
    if preset == "month":
        return DateWindow(start=today.replace(day=1), end=today)
    if preset == "year":
        return DateWindow(start=today.replace(month=1, day=1), end=today)
    return default_date_range(today)

