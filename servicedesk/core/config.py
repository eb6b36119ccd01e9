from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_TECHNICIANS = ["Quang", "Nhựt", "Nhật", "Hiếu", "An"]


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    env: str = Field(default="development", alias="APP_ENV")
    host: str = Field(default="0.0.0.0", alias="APP_HOST")
    port: int = Field(default=8000, alias="APP_PORT")
    # None means "use the host's local zone"
    timezone: str | None = Field(default=None, alias="PRIMARY_TIMEZONE")

    database_url: str = Field(default="sqlite:///./data/servicedesk.db", alias="DATABASE_URL")
    storage_key: str = Field(default="ticketManagementData", alias="STORAGE_KEY")
    seed_demo_data: bool = Field(default=True, alias="SEED_DEMO_DATA")

    technicians: list[str] = Field(default_factory=lambda: list(DEFAULT_TECHNICIANS), alias="TECHNICIANS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> AppConfig:
    return AppConfig()
