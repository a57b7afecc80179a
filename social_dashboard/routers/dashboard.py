from datetime import date, timedelta
from typing import Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from social_dashboard.auth.access import require_client_access
from social_dashboard.auth.dependencies import Identity, get_current_identity
from social_dashboard.config import MAX_CONTENT_PAGE_SIZE, settings
from social_dashboard.db.deps import get_session
from social_dashboard.db.enums import SortDirectionEnum
from social_dashboard.schemas.dashboard import (
    CampaignOption,
    ContentFilter,
    ContentTabResponse,
    OverviewResponse,
    PerformanceResponse,
)
from social_dashboard.services.comparison import get_metrics_comparison
from social_dashboard.services.content import (
    SORT_FIELDS,
    get_client_campaigns,
    get_client_content_with_metrics,
    get_daily_views,
    get_platform_distribution,
)
from social_dashboard.services.metrics import get_platform_performance, get_summary_stats
from social_dashboard.services.presentation import (
    DATE_PRESETS,
    content_rows,
    date_preset_range,
    empty_state,
    sort_by_engagement,
    top_performers,
)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _resolve_range(startDate: date | None, endDate: date | None, preset: str | None = None) -> Tuple[date, date]:
    if preset is not None and preset not in DATE_PRESETS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unsupported preset: {preset}",
        )
    today = date.today()
    # Explicit dates win; "custom" resolves to no window and falls through to them.
    if preset and startDate is None and endDate is None:
        window = date_preset_range(preset, today)
        if window is not None:
            return window.start, window.end
    end = endDate or today
    start = startDate or end - timedelta(days=settings.DEFAULT_DATE_RANGE_DAYS)
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="startDate must be on or before endDate",
        )
    return start, end


def _platform_filter(platform: str | None) -> str | None:
    if not platform or platform == "all":
        return None
    return platform


@router.get("/{client_id}/campaigns")
def list_campaigns(
    client_id: str,
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session),
) -> list[CampaignOption]:
    require_client_access(session, identity.user_id, client_id)
    return get_client_campaigns(session, client_id)


@router.get("/{client_id}/overview")
def get_overview(
    client_id: str,
    startDate: date | None = None,
    endDate: date | None = None,
    preset: str | None = None,
    platform: str | None = None,
    requestId: str | None = None,
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session),
) -> OverviewResponse:
    require_client_access(session, identity.user_id, client_id)
    start, end = _resolve_range(startDate, endDate, preset)
    selected = _platform_filter(platform)

    # Each widget degrades on its own; a failed fetch never blanks its siblings.
    return OverviewResponse(
        platformDistribution=get_platform_distribution(session, client_id, start, end),
        dailyViews=get_daily_views(session, client_id, start, end, platform=selected),
        summary=get_summary_stats(session, client_id, start, end, platform=selected),
        comparison=get_metrics_comparison(session, client_id, start, end, platform=selected),
        requestId=requestId,
    )


@router.get("/{client_id}/performance")
def get_performance(
    client_id: str,
    startDate: date | None = None,
    endDate: date | None = None,
    preset: str | None = None,
    platform: str | None = None,
    requestId: str | None = None,
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session),
) -> PerformanceResponse:
    require_client_access(session, identity.user_id, client_id)
    start, end = _resolve_range(startDate, endDate, preset)
    rows = sort_by_engagement(
        get_platform_performance(session, client_id, start, end, platform=_platform_filter(platform))
    )
    return PerformanceResponse(platforms=rows, topPerformers=top_performers(rows), requestId=requestId)


@router.get("/{client_id}/content")
def get_content(
    client_id: str,
    platform: str | None = None,
    campaign: str | None = None,
    startDate: date | None = None,
    endDate: date | None = None,
    preset: str | None = None,
    page: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=MAX_CONTENT_PAGE_SIZE),
    sortKey: str | None = None,
    sortDirection: SortDirectionEnum = SortDirectionEnum.desc,
    requestId: str | None = None,
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session),
) -> ContentTabResponse:
    require_client_access(session, identity.user_id, client_id)
    if sortKey is not None and sortKey not in SORT_FIELDS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unsupported sortKey: {sortKey}",
        )
    start, end = _resolve_range(startDate, endDate, preset)
    filters = ContentFilter(
        clientId=client_id,
        platform=platform,
        campaignId=campaign,
        startDate=start,
        endDate=end,
        page=page,
        limit=limit or settings.CONTENT_PAGE_SIZE,
    )
    content = get_client_content_with_metrics(session, filters, sort_key=sortKey, direction=sortDirection)
    return ContentTabResponse(
        items=content_rows(content.items),
        count=content.count,
        page=filters.page,
        limit=filters.limit,
        emptyMessage=empty_state(content.items),
        requestId=requestId,
    )
