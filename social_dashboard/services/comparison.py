from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from social_dashboard.schemas.dashboard import ChangeValue, DateWindow, MetricsComparison, SummaryStats
from social_dashboard.services.metrics import load_period_stats, round_half_up

logger = logging.getLogger(__name__)

TRACKED_METRICS: Dict[str, str] = {
    "views": "totalViews",
    "likes": "totalLikes",
    "comments": "totalComments",
    "posts": "posts",
}


def previous_window(start_date: date, end_date: date) -> Tuple[date, date]:
    """
    Return the window of equal length that ends the day before ``start_date``.

    With ``D = end - start`` days the previous window is ``[start - D - 1, start - 1]``.
    """
    if end_date < start_date:
        raise ValueError("end_date must not be before start_date")
    span = end_date - start_date
    previous_end = start_date - timedelta(days=1)
    return previous_end - span, previous_end


def percent_change(current: float, previous: float) -> ChangeValue:
    """
    Percent change rounded to one decimal.

    A zero baseline has no defined ratio: 0 -> 0 reports a flat 0.0%, and
    0 -> positive is reported as ``new`` with no percentage.
    """
    if previous == 0:
        if current == 0:
            return ChangeValue(percent=0.0, direction="flat", display="0.0%")
        return ChangeValue(percent=None, direction="new", display="New")

    percent = round_half_up((current - previous) / previous * 100, 1)
    if percent > 0:
        direction = "up"
    elif percent < 0:
        direction = "down"
    else:
        percent = 0.0
        direction = "flat"
    sign = "+" if percent > 0 else ""
    return ChangeValue(percent=percent, direction=direction, display=f"{sign}{percent:.1f}%")


def compare_totals(current: SummaryStats, previous: SummaryStats) -> Dict[str, ChangeValue]:
    return {
        metric: percent_change(float(getattr(current, field)), float(getattr(previous, field)))
        for metric, field in TRACKED_METRICS.items()
    }


def get_metrics_comparison(
    session: Session,
    client_id: str,
    start_date: date,
    end_date: date,
    platform: Optional[str] = None,
) -> Optional[MetricsComparison]:
    previous_start, previous_end = previous_window(start_date, end_date)
    try:
        current = load_period_stats(session, client_id, start_date, end_date, platform=platform)
        previous = load_period_stats(session, client_id, previous_start, previous_end, platform=platform)
    except SQLAlchemyError:
        logger.exception(
            "Metrics comparison fetch failed",
            extra={
                "client_id": client_id,
                "start_date": str(start_date),
                "end_date": str(end_date),
                "platform": platform,
            },
        )
        session.rollback()
        return None

    return MetricsComparison(
        currentPeriod=DateWindow(start=start_date, end=end_date),
        previousPeriod=DateWindow(start=previous_start, end=previous_end),
        current=current,
        previous=previous,
        changes=compare_totals(current, previous),
    )
