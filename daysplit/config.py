"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Central configuration for the daysplit application."""

    # Storage
    models_dir: str = Field(default="files", description="Root directory holding one folder per model")

    # Public links
    base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL encoded into QR codes (download links are <base_url>/api/download/<token>)",
    )
    default_qr_days: int = Field(
        default=24, description="Days rendered on a QR sheet when no token mapping is available"
    )

    # Basic auth for management routes
    basic_auth_enabled: bool = Field(default=True, description="Protect /api/models routes with basic auth")
    basic_auth_username: str = Field(default="admin", description="Basic auth username")
    basic_auth_password: str = Field(default="admin", description="Basic auth password")

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    log_level: str = Field(default="INFO", description="Root log level")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False}


# Singleton instance
settings = Settings()
