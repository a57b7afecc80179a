import logging
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, RedirectResponse

from sqlalchemy import text

from social_dashboard.config import settings
from social_dashboard.db.base import engine
from social_dashboard.routers import admin, dashboard, metrics, pages

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/dashboard", "/api/")


def _is_protected(path: str) -> bool:
    return path.startswith(PROTECTED_PREFIXES)


def _has_credentials(request: Request) -> bool:
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer ") and authorization[7:].strip():
        return True
    return bool(request.cookies.get(settings.SESSION_COOKIE_NAME))


def signin_redirect_url(path: str) -> str:
    return f"{settings.SIGNIN_PATH}?redirectedFrom={quote(path, safe='/')}"


def create_app() -> FastAPI:
    app = FastAPI(title="Social Dashboard API", default_response_class=ORJSONResponse)

    allow_origins = sorted(set(settings.BACKEND_CORS_ORIGINS))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def signin_guard(request: Request, call_next):
        # Only requests with no credential at all are redirected; bad tokens reach the handler and get 401.
        if request.method != "OPTIONS" and _is_protected(request.url.path) and not _has_credentials(request):
            logger.info("Redirecting unauthenticated request", extra={"path": request.url.path})
            return RedirectResponse(url=signin_redirect_url(request.url.path), status_code=307)
        return await call_next(request)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unhandled server exception", exc_info=exc)
        return ORJSONResponse(status_code=500, content={"detail": "Internal server error."})

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/health/db")
    def health_db() -> dict[str, str]:
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return {"db": "ok"}
        except Exception as exc:  # pragma: no cover - simple runtime check
            return {"db": f"error: {exc}"}

    app.include_router(pages.router)
    app.include_router(dashboard.router)
    app.include_router(metrics.router)
    app.include_router(admin.router)

    return app


app = create_app()
