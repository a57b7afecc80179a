import os
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_JWT_ISSUER", "https://auth.example.test")
os.environ.setdefault("AUTH_JWKS_URL", "https://auth.example.test/.well-known/jwks.json")

import pytest
from fastapi.testclient import TestClient

from social_dashboard.auth.dependencies import Identity, get_current_identity
from social_dashboard.db.base import Base, SessionLocal, engine
from social_dashboard.db.deps import get_session
from social_dashboard.db.enums import ClientRoleEnum
from social_dashboard.db.models import Campaign, Client, ClientUser, ContentItem, Metric
from social_dashboard.main import app

TEST_USER_ID = "user_test_1"


@pytest.fixture(scope="session", autouse=True)
def create_schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture()
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


class Seeder:
    def __init__(self, session) -> None:
        self.session = session

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def client(self, name: Optional[str] = "Acme Media") -> Client:
        return self._save(Client(name=name))

    def membership(
        self,
        client: Client,
        user_id: str = TEST_USER_ID,
        role: ClientRoleEnum = ClientRoleEnum.member,
        created_at: Optional[datetime] = None,
    ) -> ClientUser:
        association = ClientUser(user_id=user_id, client_id=client.id, role=role)
        if created_at is not None:
            association.created_at = created_at
        return self._save(association)

    def campaign(self, client: Client, name: str = "Spring Launch", start_date: Optional[date] = None) -> Campaign:
        return self._save(Campaign(client_id=client.id, name=name, start_date=start_date))

    def content(
        self,
        client: Client,
        platform: str,
        post_date: date,
        metrics: Optional[dict] = None,
        campaign: Optional[Campaign] = None,
        content_type: Optional[str] = "Post",
        name: Optional[str] = None,
    ) -> ContentItem:
        item = self._save(
            ContentItem(
                client_id=client.id,
                campaign_id=campaign.id if campaign else None,
                content_name=name or f"{platform} {post_date.isoformat()}",
                platform=platform,
                content_type=content_type,
                post_date=post_date,
            )
        )
        for metric_name, value in (metrics or {}).items():
            self.metric(item, metric_name, value)
        return item

    def metric(self, item: ContentItem, name: str, value, recorded_at: Optional[datetime] = None) -> Metric:
        row = Metric(
            content_id=item.id,
            metric_name=name,
            metric_value=None if value is None else str(value),
        )
        if recorded_at is not None:
            row.recorded_at = recorded_at
        return self._save(row)


@pytest.fixture()
def seed(db_session) -> Seeder:
    return Seeder(db_session)


@pytest.fixture()
def identity() -> Identity:
    return Identity(user_id=TEST_USER_ID, email="analyst@example.test")


@pytest.fixture()
def override_dependencies(db_session, identity):
    def get_session_override():
        try:
            yield db_session
        finally:
            pass

    def get_identity_override():
        return identity

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_current_identity] = get_identity_override
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def api_client(override_dependencies):
    # The sign-in guard only checks that a credential is present; identity comes from the override.
    with TestClient(app, headers={"Authorization": "Bearer test-token"}) as client:
        yield client

