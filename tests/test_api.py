from datetime import date

from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from social_dashboard.auth import dependencies as auth_dependencies
from social_dashboard.db.deps import get_session
from social_dashboard.db.enums import ClientRoleEnum
from social_dashboard.db.models import ClientUser
from social_dashboard.db.repositories.content import ContentItemsRepository
from social_dashboard.main import app
from social_dashboard.routers import metrics as metrics_router
from social_dashboard.services.presentation import NOT_CONFIGURED_MESSAGE

JANUARY = {"startDate": "2024-01-01", "endDate": "2024-01-31"}


def _seed_two_platforms(seed, client):
    seed.content(client, "Instagram", date(2024, 1, 5), {"views": 100, "likes": 10, "comments": 5})
    seed.content(client, "YouTube", date(2024, 1, 5), {"views": 200, "likes": 20, "comments": 0})


def test_unauthenticated_requests_redirect_to_signin():
    app.dependency_overrides.clear()
    with TestClient(app) as client:
        page = client.get("/dashboard", follow_redirects=False)
        api = client.get("/api/metrics", params={"clientId": "c1"}, follow_redirects=False)

    assert page.status_code == 307
    assert page.headers["location"] == "/auth/signin?redirectedFrom=/dashboard"
    assert api.status_code == 307
    assert api.headers["location"] == "/auth/signin?redirectedFrom=/api/metrics"


def test_health_endpoints_skip_the_guard():
    app.dependency_overrides.clear()
    with TestClient(app) as client:
        health = client.get("/health")
        db_health = client.get("/health/db")

    assert health.status_code == 200
    assert health.json() == {"ok": True}
    assert db_health.json() == {"db": "ok"}


def test_invalid_token_gets_401(db_session, monkeypatch):
    app.dependency_overrides.clear()

    def get_session_override():
        try:
            yield db_session
        finally:
            pass

    def reject(_token):
        raise HTTPException(status_code=401, detail="Invalid token")

    app.dependency_overrides[get_session] = get_session_override
    monkeypatch.setattr(auth_dependencies, "verify_access_token", reject)

    try:
        with TestClient(app) as client:
            resp = client.get("/dashboard", headers={"Authorization": "Bearer bad-token"})
        assert resp.status_code == 401
    finally:
        app.dependency_overrides.clear()


def test_session_cookie_authenticates(seed, db_session, monkeypatch):
    app.dependency_overrides.clear()
    client_row = seed.client(name="Cookie Client")
    seed.membership(client_row, user_id="cookie-user")

    def get_session_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_session] = get_session_override
    monkeypatch.setattr(auth_dependencies, "verify_access_token", lambda _token: {"sub": "cookie-user"})

    try:
        with TestClient(app, cookies={"sb-access-token": "cookie-token"}) as client:
            resp = client.get("/dashboard")
        assert resp.status_code == 200
        assert resp.json()["client"] == {"id": client_row.id, "name": "Cookie Client"}
    finally:
        app.dependency_overrides.clear()


def test_dashboard_not_configured(api_client):
    resp = api_client.get("/dashboard")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "not_configured"
    assert body["message"] == NOT_CONFIGURED_MESSAGE
    assert body["client"] is None


def test_dashboard_client_not_found(api_client, db_session, identity):
    db_session.add(ClientUser(user_id=identity.user_id, client_id="deleted-client"))
    db_session.commit()

    resp = api_client.get("/dashboard")

    assert resp.json()["status"] == "client_not_found"


def test_dashboard_ready_with_unnamed_client(api_client, seed):
    client_row = seed.client(name=None)
    seed.membership(client_row)

    body = api_client.get("/dashboard").json()

    assert body["status"] == "ready"
    assert body["client"] == {"id": client_row.id, "name": "Unknown Client"}
    assert body["defaultRange"]["end"] == date.today().isoformat()


def test_other_tenant_data_is_forbidden(api_client, seed):
    own = seed.client(name="Own")
    other = seed.client(name="Other")
    seed.membership(own)

    overview = api_client.get(f"/api/dashboard/{other.id}/overview", params=JANUARY)
    metrics = api_client.get("/api/metrics", params={"clientId": other.id})

    assert overview.status_code == 403
    assert overview.json()["detail"] == "No access to this client data"
    assert metrics.status_code == 403


def test_admin_clients_require_admin_role(api_client, seed):
    managed = seed.client(name="Managed")
    viewed = seed.client(name="Viewed")
    seed.membership(viewed, role=ClientRoleEnum.member)

    denied = api_client.get("/api/admin/clients")
    assert denied.status_code == 403

    seed.membership(managed, role=ClientRoleEnum.admin)
    allowed = api_client.get("/api/admin/clients")

    assert allowed.status_code == 200
    assert allowed.json() == [{"id": managed.id, "name": "Managed", "role": "admin"}]


def test_metrics_endpoint_rows(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)
    campaign = seed.campaign(client_row, name="Launch")
    seed.content(client_row, "Instagram", date(2024, 1, 5), {"views": 100}, campaign=campaign, name="Reel one")
    seed.content(client_row, "YouTube", date(2023, 6, 1), {"views": 50})

    resp = api_client.get("/api/metrics", params={"clientId": client_row.id, "platform": "all", **JANUARY})

    assert resp.status_code == 200
    rows = resp.json()
    assert len(rows) == 1
    row = rows[0]
    assert set(row) == {"id", "name", "platform", "type", "date", "campaign", "metrics"}
    assert row["name"] == "Reel one"
    assert row["date"] == "2024-01-05"
    assert row["campaign"] == "Launch"
    assert row["metrics"] == {"views": "100"}


def test_metrics_endpoint_reports_retrieval_failure(api_client, seed, monkeypatch):
    client_row = seed.client()
    seed.membership(client_row)

    def _boom(*_args, **_kwargs):
        raise OperationalError("SELECT", {}, Exception("boom"))

    monkeypatch.setattr(metrics_router, "list_metrics_rows", _boom)

    resp = api_client.get("/api/metrics", params={"clientId": client_row.id})

    assert resp.status_code == 500
    assert resp.json() == {"error": "boom"}


def test_metrics_endpoint_requires_client_id(api_client):
    assert api_client.get("/api/metrics").status_code == 422


def test_overview_widgets(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)
    _seed_two_platforms(seed, client_row)

    resp = api_client.get(f"/api/dashboard/{client_row.id}/overview", params={**JANUARY, "requestId": "r-7"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["requestId"] == "r-7"
    assert body["summary"]["totalViews"] == 300
    assert body["summary"]["averageEngagement"] == "11.67"
    assert {share["name"] for share in body["platformDistribution"]} == {"Instagram", "YouTube"}
    assert body["dailyViews"] == [{"date": "2024-01-05", "views": 300}]
    assert body["comparison"]["previousPeriod"] == {"start": "2023-12-01", "end": "2023-12-31"}
    assert body["comparison"]["changes"]["views"]["direction"] == "new"


def test_overview_rejects_inverted_range(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)

    resp = api_client.get(
        f"/api/dashboard/{client_row.id}/overview",
        params={"startDate": "2024-02-01", "endDate": "2024-01-01"},
    )

    assert resp.status_code == 422


def test_performance_tab(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)
    _seed_two_platforms(seed, client_row)

    body = api_client.get(f"/api/dashboard/{client_row.id}/performance", params=JANUARY).json()

    assert [row["platform"] for row in body["platforms"]] == ["Instagram", "YouTube"]
    assert body["platforms"][1]["reach"] == 200
    assert body["topPerformers"]["bestEngagement"] == {
        "platform": "Instagram",
        "value": "15.00% engagement rate",
    }
    assert body["topPerformers"]["mostViews"]["value"] == "200 total views"


def test_content_tab(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)
    _seed_two_platforms(seed, client_row)

    resp = api_client.get(
        f"/api/dashboard/{client_row.id}/content",
        params={**JANUARY, "sortKey": "platform", "sortDirection": "asc", "limit": 10},
    )

    body = resp.json()
    assert resp.status_code == 200
    assert body["count"] == 2
    assert body["limit"] == 10
    assert body["emptyMessage"] is None
    assert [item["platform"] for item in body["items"]] == ["Instagram", "YouTube"]
    assert [metric["label"] for metric in body["items"][0]["relevantMetrics"]] == ["Views", "Likes", "Comments"]


def test_content_tab_empty_and_bad_sort(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)

    empty = api_client.get(f"/api/dashboard/{client_row.id}/content", params={**JANUARY, "platform": "Kick"})
    bad_sort = api_client.get(f"/api/dashboard/{client_row.id}/content", params={"sortKey": "views"})

    assert empty.json()["items"] == []
    assert empty.json()["emptyMessage"] == "No content found for these filters"
    assert bad_sort.status_code == 422


def test_campaigns_listing(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)
    seed.campaign(client_row, name="Launch", start_date=date(2024, 1, 1))

    resp = api_client.get(f"/api/dashboard/{client_row.id}/campaigns")

    assert resp.status_code == 200
    assert [campaign["name"] for campaign in resp.json()] == ["Launch"]


def test_failed_widget_leaves_siblings_populated(api_client, seed, monkeypatch):
    client_row = seed.client()
    seed.membership(client_row)
    seed.content(client_row, "Instagram", date(2024, 1, 5), {"views": 100, "likes": 4})

    def _boom(*_args, **_kwargs):
        raise OperationalError("SELECT", {}, Exception("boom"))

    monkeypatch.setattr(ContentItemsRepository, "platform_counts", _boom)
    monkeypatch.setattr(ContentItemsRepository, "platforms", _boom)

    body = api_client.get(f"/api/dashboard/{client_row.id}/overview", params=JANUARY).json()

    assert body["platformDistribution"] == []
    assert body["dailyViews"] == [{"date": "2024-01-05", "views": 100}]
    assert body["summary"]["totalViews"] == 100
    assert body["comparison"]["current"]["totalLikes"] == 4
    assert body["comparison"]["changes"]["views"]["display"] == "New"


def test_preset_sets_the_window(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)
    today = date.today()

    body = api_client.get(f"/api/dashboard/{client_row.id}/overview", params={"preset": "month"}).json()

    assert body["comparison"]["currentPeriod"] == {
        "start": today.replace(day=1).isoformat(),
        "end": today.isoformat(),
    }


def test_explicit_dates_win_over_preset(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)

    body = api_client.get(
        f"/api/dashboard/{client_row.id}/overview",
        params={**JANUARY, "preset": "7d"},
    ).json()

    assert body["comparison"]["currentPeriod"] == {"start": "2024-01-01", "end": "2024-01-31"}


def test_custom_preset_keeps_explicit_range_and_unknown_preset_is_rejected(api_client, seed):
    client_row = seed.client()
    seed.membership(client_row)

    custom = api_client.get(
        f"/api/dashboard/{client_row.id}/performance",
        params={**JANUARY, "preset": "custom"},
    )
    unknown = api_client.get(f"/api/dashboard/{client_row.id}/content", params={"preset": "fortnight"})

    assert custom.status_code == 200
    assert unknown.status_code == 422
