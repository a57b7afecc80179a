from social_dashboard.schemas.dashboard import (
    ChangeValue,
    ContentFilter,
    ContentItemOut,
    ContentPage,
    DailyViewsPoint,
    MetricsComparison,
    PlatformPerformance,
    PlatformShare,
    SummaryStats,
)

__all__ = [
    "ChangeValue",
    "ContentFilter",
    "ContentItemOut",
    "ContentPage",
    "DailyViewsPoint",
    "MetricsComparison",
    "PlatformPerformance",
    "PlatformShare",
    "SummaryStats",
]
