from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from social_dashboard.db.enums import ClientRoleEnum
from social_dashboard.db.models import Client, ClientUser


class ClientsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, client_id: str) -> Optional[Client]:
        stmt = select(Client).where(Client.id == client_id)
        return self.session.scalars(stmt).first()


class ClientUsersRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def first_for_user(self, user_id: str) -> Optional[ClientUser]:
        stmt = (
            select(ClientUser)
            .where(ClientUser.user_id == user_id)
            .order_by(ClientUser.created_at.asc(), ClientUser.id.asc())
        )
        return self.session.scalars(stmt).first()

    def get(self, user_id: str, client_id: str) -> Optional[ClientUser]:
        stmt = select(ClientUser).where(ClientUser.user_id == user_id, ClientUser.client_id == client_id)
        return self.session.scalars(stmt).first()

    def list_by_role(self, user_id: str, role: ClientRoleEnum) -> List[ClientUser]:
        stmt = (
            select(ClientUser)
            .where(ClientUser.user_id == user_id, ClientUser.role == role)
            .order_by(ClientUser.created_at.asc(), ClientUser.id.asc())
        )
        return list(self.session.scalars(stmt).unique().all())
