from social_dashboard.db.repositories.clients import ClientsRepository, ClientUsersRepository
from social_dashboard.db.repositories.campaigns import CampaignsRepository
from social_dashboard.db.repositories.content import ContentItemsRepository
from social_dashboard.db.repositories.metrics import MetricsRepository

__all__ = [
    "ClientsRepository",
    "ClientUsersRepository",
    "CampaignsRepository",
    "ContentItemsRepository",
    "MetricsRepository",
]
