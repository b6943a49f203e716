from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Union
from pydantic import field_validator
import json


def _parse_list(v: Union[List[str], str]) -> List[str]:
    """Parse a list setting from a JSON string or a comma-separated string"""
    if isinstance(v, str):
        try:
            return json.loads(v)
        except json.JSONDecodeError:
            # If not valid JSON, split by comma
            return [item.strip() for item in v.split(",") if item.strip()]
    return v


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Job Marketplace API"

    # Database Settings
    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "marketplace_db"

    # Full URL override (e.g. sqlite:///./dev.db for local runs)
    DATABASE_URL_OVERRIDE: Optional[str] = None

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Identity provider tokens (decoded only, never issued in production)
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Roles allowed to create/update/delete catalog resources such as skills
    ELEVATED_ROLES: Union[List[str], str] = ["employer"]

    # Pagination
    DEFAULT_PAGE_SIZE: int = 100
    MAX_PAGE_SIZE: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # File storage (profile photos and resumes)
    USE_S3: bool = False
    S3_BUCKET_NAME: str = ""
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE_MB: int = 10

    # CORS Settings - can be set as JSON string in .env
    BACKEND_CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8000"]

    @field_validator("BACKEND_CORS_ORIGINS", "ELEVATED_ROLES", mode="before")
    @classmethod
    def parse_list_settings(cls, v: Union[List[str], str]) -> List[str]:
        """Parse list settings from JSON string or list"""
        return _parse_list(v)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()
