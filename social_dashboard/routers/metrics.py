from datetime import date
import logging

from fastapi import APIRouter, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from social_dashboard.auth.access import require_client_access
from social_dashboard.auth.dependencies import Identity, get_current_identity
from social_dashboard.db.deps import get_session
from social_dashboard.services.content import list_metrics_rows

router = APIRouter(prefix="/api/metrics", tags=["metrics"])
logger = logging.getLogger(__name__)


def _filter_value(value: str | None) -> str | None:
    if not value or value == "all":
        return None
    return value


@router.get("")
def list_content_metrics(
    clientId: str,
    platform: str | None = None,
    campaign: str | None = None,
    startDate: date | None = None,
    endDate: date | None = None,
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session),
):
    require_client_access(session, identity.user_id, clientId)
    try:
        rows = list_metrics_rows(
            session,
            clientId,
            platform=_filter_value(platform),
            campaign_id=_filter_value(campaign),
            start_date=startDate,
            end_date=endDate,
        )
    except SQLAlchemyError as exc:
        logger.exception("Metrics query failed", extra={"client_id": clientId, "sub": identity.user_id})
        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(getattr(exc, "orig", None) or exc)},
        )
    return jsonable_encoder(rows)
