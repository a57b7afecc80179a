from social_dashboard.routers import admin, dashboard, metrics, pages

__all__ = [
    "admin",
    "dashboard",
    "metrics",
    "pages",
]
