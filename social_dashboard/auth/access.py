"""
Tenant access decisions.

Every check reads the client_users table for the current request; nothing is
cached between requests, so revoking an association takes effect immediately.
"""

from dataclasses import dataclass
from typing import List, Literal, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from social_dashboard.db.enums import ClientRoleEnum
from social_dashboard.db.models import Client, ClientUser
from social_dashboard.db.repositories.clients import ClientsRepository, ClientUsersRepository

logger = logging.getLogger(__name__)

DashboardStatus = Literal["ready", "not_configured", "client_not_found"]


@dataclass
class DashboardAccess:
    status: DashboardStatus
    client_id: Optional[str] = None
    client: Optional[Client] = None


def resolve_dashboard_access(session: Session, user_id: str) -> DashboardAccess:
    association = ClientUsersRepository(session).first_for_user(user_id)
    if association is None:
        logger.info("User has no client association", extra={"sub": user_id})
        return DashboardAccess(status="not_configured")

    client = ClientsRepository(session).get(association.client_id)
    if client is None:
        logger.warning(
            "Client association points at a missing client",
            extra={"sub": user_id, "client_id": association.client_id},
        )
        return DashboardAccess(status="client_not_found", client_id=association.client_id)
    return DashboardAccess(status="ready", client_id=client.id, client=client)


def require_client_access(session: Session, user_id: str, client_id: str) -> ClientUser:
    association = ClientUsersRepository(session).get(user_id, client_id)
    if association is None:
        logger.info("Client access denied", extra={"sub": user_id, "client_id": client_id})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No access to this client data")
    return association


def get_admin_clients(session: Session, user_id: str) -> List[Client]:
    associations = ClientUsersRepository(session).list_by_role(user_id, ClientRoleEnum.admin)
    clients = [association.client for association in associations if association.client is not None]
    if not clients:
        logger.info("Admin access denied", extra={"sub": user_id})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to access the admin portal.",
        )
    return clients
