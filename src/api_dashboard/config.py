from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_DASHBOARD_", case_sensitive=False, extra="ignore")

    base_url: str = Field(default="http://localhost:8000")
    session_file: Path = Field(default=Path.home() / ".config" / "api-dashboard" / "session.json")
    catalog_file: Path | None = Field(default=None)
    request_timeout: float | None = Field(default=None, gt=0)
    log_level: str = Field(default="WARNING")

    def api_base(self) -> str:
        return self.base_url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
