"""Application settings loaded from environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Laborobo core settings.

    Values are read from the environment (prefix ``LABOROBO_``) or a local
    ``.env`` file.
    """

    model_config = SettingsConfigDict(env_prefix="LABOROBO_", env_file=".env", extra="ignore")

    # Database
    database_url: str = "sqlite:///./laborobo.db"

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    # Capacity defaults used when a user has no explicit weekly capacity
    default_capacity_hours: float = 40.0

    # MCP client configuration
    api_base_url: str = "http://localhost:8000/api/v1"
    api_key: str = ""  # Shared X-API-Key; empty disables the check
    mcp_user_id: int = 0  # Caller identity forwarded to the API
    mcp_team_id: int = 0
    mcp_agent_id: int = 0

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
