"""Application configuration using Pydantic settings."""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    sql_echo: bool = False

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    environment: str = "development"

    # Dashboard auth (X-Auth-Token)
    auth_token: Optional[str] = None

    # CORS
    allowed_origins: str = (
        "http://localhost:3000,http://localhost:5000,"
        "http://127.0.0.1:3000,http://127.0.0.1:5000"
    )

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
