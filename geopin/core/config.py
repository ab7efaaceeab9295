from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ENVIRONMENT: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str | None = None
    GRACEFUL_SHUTDOWN_TIMEOUT: int | None = None

    # Static content
    STATIC_DIR: Path = PROJECT_ROOT / "frontend"
    INDEX_FILE: str = "index.html"
    STATIC_MAX_AGE: int = 31536000  # 1 year

    # Rate limiting
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_MESSAGE: str = "Too many requests from this IP, please try again after 15 minutes"
    TRUST_PROXY: bool = False

    # Security
    CROSS_ORIGIN_ISOLATION: bool | None = None

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cross_origin_isolation(self) -> bool:
        if self.CROSS_ORIGIN_ISOLATION is None:
            return self.is_production
        return self.CROSS_ORIGIN_ISOLATION

    @property
    def index_path(self) -> Path:
        return Path(self.STATIC_DIR) / self.INDEX_FILE


@lru_cache
def get_settings() -> Settings:
    return Settings()
