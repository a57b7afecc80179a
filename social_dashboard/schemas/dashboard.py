from __future__ import annotations

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from social_dashboard.config import MAX_CONTENT_PAGE_SIZE

ChangeDirectionLiteral = Literal["up", "down", "flat", "new"]
DashboardStatusLiteral = Literal["ready", "not_configured", "client_not_found"]


class ContentFilter(BaseModel):
    """Conjunctive filters for a client's content catalog."""

    model_config = ConfigDict(extra="forbid")

    clientId: str = Field(..., min_length=1)
    platform: Optional[str] = None
    campaignId: Optional[str] = None
    startDate: Optional[datetime.date] = None
    endDate: Optional[datetime.date] = None
    page: int = Field(default=0, ge=0)
    limit: int = Field(default=100, ge=1, le=MAX_CONTENT_PAGE_SIZE)

    @model_validator(mode="after")
    def normalize_all_sentinels(self) -> "ContentFilter":
        # The filter bar sends "all" for "no filter".
        if self.platform == "all":
            self.platform = None
        if self.campaignId == "all":
            self.campaignId = None
        return self

    @property
    def offset(self) -> int:
        return self.page * self.limit


class ContentItemOut(BaseModel):
    id: str
    contentName: Optional[str] = None
    platform: str
    contentType: Optional[str] = None
    contentUrl: Optional[str] = None
    postDate: datetime.date
    campaignId: Optional[str] = None
    campaignName: str
    metrics: dict[str, str | float | int | None] = Field(default_factory=dict)


class ContentPage(BaseModel):
    items: list[ContentItemOut] = Field(default_factory=list)
    count: int = 0


class MetricsRow(BaseModel):
    """Row shape served by GET /api/metrics."""

    id: str
    name: Optional[str] = None
    platform: str
    type: Optional[str] = None
    date: datetime.date
    campaign: str
    metrics: dict[str, str | float | int | None] = Field(default_factory=dict)


class CampaignOption(BaseModel):
    id: str
    name: str
    startDate: Optional[datetime.date] = None
    endDate: Optional[datetime.date] = None


class SummaryStats(BaseModel):
    totalViews: float = 0
    totalLikes: float = 0
    totalComments: float = 0
    averageEngagement: str = "0.00"
    posts: int = 0


class PlatformPerformance(BaseModel):
    platform: str
    posts: int
    views: float
    likes: float
    comments: float
    engagement: str
    reach: int


class PlatformShare(BaseModel):
    name: str
    value: int
    color: str


class DailyViewsPoint(BaseModel):
    date: datetime.date
    views: int


class DateWindow(BaseModel):
    start: datetime.date
    end: datetime.date


class ChangeValue(BaseModel):
    percent: Optional[float] = None
    direction: ChangeDirectionLiteral
    display: str


class MetricsComparison(BaseModel):
    currentPeriod: DateWindow
    previousPeriod: DateWindow
    current: SummaryStats
    previous: SummaryStats
    changes: dict[str, ChangeValue]


class TopPerformer(BaseModel):
    platform: str
    value: str


class TopPerformers(BaseModel):
    bestEngagement: Optional[TopPerformer] = None
    mostViews: Optional[TopPerformer] = None
    mostPosts: Optional[TopPerformer] = None


class OverviewResponse(BaseModel):
    platformDistribution: list[PlatformShare] = Field(default_factory=list)
    dailyViews: list[DailyViewsPoint] = Field(default_factory=list)
    summary: Optional[SummaryStats] = None
    comparison: Optional[MetricsComparison] = None
    requestId: Optional[str] = None


class PerformanceResponse(BaseModel):
    platforms: list[PlatformPerformance] = Field(default_factory=list)
    topPerformers: TopPerformers = Field(default_factory=TopPerformers)
    requestId: Optional[str] = None


class RelevantMetric(BaseModel):
    label: str
    value: str | float | int


class ContentRowView(ContentItemOut):
    relevantMetrics: list[RelevantMetric] = Field(default_factory=list)


class ContentTabResponse(BaseModel):
    items: list[ContentRowView] = Field(default_factory=list)
    count: int = 0
    page: int = 0
    limit: int = 100
    emptyMessage: Optional[str] = None
    requestId: Optional[str] = None


class ClientSummary(BaseModel):
    id: str
    name: str


class DashboardBootstrap(BaseModel):
    status: DashboardStatusLiteral
    client: Optional[ClientSummary] = None
    message: Optional[str] = None
    defaultRange: Optional[DateWindow] = None


class AdminClient(BaseModel):
    id: str
    name: str
    role: str
