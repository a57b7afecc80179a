from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from social_dashboard.auth.access import resolve_dashboard_access
from social_dashboard.auth.dependencies import Identity, get_current_identity
from social_dashboard.config import settings
from social_dashboard.db.deps import get_session
from social_dashboard.routers.admin import UNKNOWN_CLIENT_NAME
from social_dashboard.schemas.dashboard import ClientSummary, DashboardBootstrap
from social_dashboard.services.presentation import (
    CLIENT_NOT_FOUND_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    default_date_range,
)

router = APIRouter(tags=["pages"])


@router.get("/dashboard")
def dashboard_bootstrap(
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session),
) -> DashboardBootstrap:
    """Resolve which client the signed-in user lands on, or why there is none."""
    access = resolve_dashboard_access(session, identity.user_id)
    if access.status == "not_configured":
        return DashboardBootstrap(status="not_configured", message=NOT_CONFIGURED_MESSAGE)
    if access.status == "client_not_found":
        return DashboardBootstrap(status="client_not_found", message=CLIENT_NOT_FOUND_MESSAGE)

    client = access.client
    return DashboardBootstrap(
        status="ready",
        client=ClientSummary(id=client.id, name=client.name or UNKNOWN_CLIENT_NAME),
        defaultRange=default_date_range(date.today(), settings.DEFAULT_DATE_RANGE_DAYS),
    )
