from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Load env values for components that read os.environ directly.
_project_root = Path(__file__).resolve().parents[1]
load_dotenv(_project_root / ".env", override=False)

MAX_CONTENT_PAGE_SIZE = 1000


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"

    DATABASE_URL: str
    AUTH_JWT_ISSUER: str
    AUTH_JWKS_URL: str
    AUTH_AUDIENCE: Annotated[list[str], NoDecode] = ["authenticated"]

    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30

    SESSION_COOKIE_NAME: str = "sb-access-token"
    SIGNIN_PATH: str = "/auth/signin"

    CONTENT_PAGE_SIZE: int = 100
    DEFAULT_DATE_RANGE_DAYS: int = 30

    BACKEND_CORS_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", "AUTH_AUDIENCE", mode="before")
    @classmethod
    def split_csv(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("CONTENT_PAGE_SIZE", "DEFAULT_DATE_RANGE_DAYS")
    @classmethod
    def require_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("CONTENT_PAGE_SIZE")
    @classmethod
    def cap_page_size(cls, value: int) -> int:
        if value > MAX_CONTENT_PAGE_SIZE:
            raise ValueError(f"must not exceed {MAX_CONTENT_PAGE_SIZE}")
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
