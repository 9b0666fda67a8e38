"""Application settings for backend runtime and tests."""

from __future__ import annotations

from pydantic import Field
from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Typed settings loaded from environment variables or explicit kwargs."""

    revelax_app_env: str = "dev"
    revelax_app_host: str = "127.0.0.1"
    revelax_app_port: int = Field(default=8000, ge=1)
    revelax_log_level: str = "INFO"

    revelax_sqlite_path: str = "revelax.db"
    revelax_store_timeout_seconds: float = Field(default=5.0, gt=0)

    revelax_room_code_max_attempts: int = Field(default=10, ge=1)
    revelax_max_room_players: int = Field(default=8, ge=1)

    revelax_ws_heartbeat_interval_seconds: float = Field(default=30.0, gt=0)
    revelax_ws_pong_timeout_seconds: float = Field(default=10.0, gt=0)
    revelax_ws_max_missed_pongs: int = Field(default=2, ge=1)

    @model_validator(mode="after")
    def validate_heartbeat_window(self) -> "Settings":
        """Ensure a pong can arrive before the next ping is due."""
        if self.revelax_ws_pong_timeout_seconds >= self.revelax_ws_heartbeat_interval_seconds:
            raise ValueError(
                "REVELAX_WS_PONG_TIMEOUT_SECONDS must be less than "
                "REVELAX_WS_HEARTBEAT_INTERVAL_SECONDS"
            )
        return self


def load_settings() -> Settings:
    """Load settings from process environment."""
    return Settings()
