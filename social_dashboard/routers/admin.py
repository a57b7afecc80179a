from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from social_dashboard.auth.access import get_admin_clients
from social_dashboard.auth.dependencies import Identity, get_current_identity
from social_dashboard.db.deps import get_session
from social_dashboard.db.enums import ClientRoleEnum
from social_dashboard.schemas.dashboard import AdminClient

router = APIRouter(prefix="/api/admin", tags=["admin"])

UNKNOWN_CLIENT_NAME = "Unknown Client"


@router.get("/clients")
def list_admin_clients(
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session),
) -> list[AdminClient]:
    clients = get_admin_clients(session, identity.user_id)
    return [
        AdminClient(id=client.id, name=client.name or UNKNOWN_CLIENT_NAME, role=ClientRoleEnum.admin.value)
        for client in clients
    ]
