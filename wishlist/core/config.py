from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/128.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application configuration pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="", env_file=(".env", ".env.local"), extra="ignore"
    )

    app_name: str = Field(default="Wishlist")
    environment: Literal["local", "staging", "production", "test"] = Field(
        default="local"
    )
    debug: bool = Field(default=True)
    log_level: str | None = Field(default=None)

    redis_url: str | None = Field(default=None)
    redis_host: str = Field(default="127.0.0.1")
    redis_port: int = Field(default=6379)
    redis_username: str | None = Field(default=None)
    redis_password: str | None = Field(default=None)
    redis_db: int = Field(default=0)
    redis_socket_timeout: float = Field(default=5.0, gt=0.0)
    redis_max_retries: int = Field(default=10, ge=0)
    redis_backoff_base: float = Field(default=0.1, gt=0.0)
    redis_backoff_cap: float = Field(default=3.0, gt=0.0)

    preview_timeout: float = Field(default=10.0, gt=0.0)
    preview_fallback_timeout: float = Field(default=8.0, gt=0.0)
    preview_user_agent: str = Field(default=DEFAULT_USER_AGENT)

    api_base_url: str = Field(default="http://localhost:8000")
    sync_debounce_seconds: float = Field(default=1.0, ge=0.0)
    local_cache_path: str = Field(default=".wishlist-cache.json")

    cors_origins: list[str] = Field(default_factory=list)

    @property
    def redis_uri(self) -> str:
        """Return the Redis URI used by the shared wishlist store."""

        if self.redis_url:
            return self.redis_url
        auth = ""
        if self.redis_username and self.redis_password:
            auth = f"{self.redis_username}:{self.redis_password}@"
        elif self.redis_password:
            auth = f":{self.redis_password}@"
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
