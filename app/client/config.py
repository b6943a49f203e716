from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Client settings loaded from MARKETPLACE_* environment variables"""

    base_url: str = "http://localhost:8000/api/v1"
    timeout: float = 10.0

    # Seconds a cached query is served without refetching
    stale_time: float = 30.0

    # Seconds a transient notification stays visible
    notification_ttl: float = 5.0

    default_page_size: int = 20

    model_config = SettingsConfigDict(env_prefix="MARKETPLACE_", env_file=".env", extra="ignore")
