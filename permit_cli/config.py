"""Configuration management for Permit CLI."""

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


def _find_env_file() -> Optional[str]:
    """Find .env file in multiple locations.

    Search order:
    1. Current working directory
    2. ~/.permit-cli/.env
    3. Package directory (where this file is located)
    """
    # Current directory
    if os.path.exists(".env"):
        return ".env"

    # User config directory
    user_env = Path.home() / ".permit-cli" / ".env"
    if user_env.exists():
        return str(user_env)

    # Package directory
    package_dir = Path(__file__).parent.parent
    package_env = package_dir / ".env"
    if package_env.exists():
        return str(package_env)

    return None


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Permit API configuration
    permit_api_url: str = Field(
        default="https://api.permit.io",
        description="Permit API base URL"
    )
    permit_api_key: Optional[str] = Field(
        default=None,
        description="Permit API key (environment or project scoped)"
    )
    permit_request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for Permit API requests"
    )
    permit_max_retries: int = Field(
        default=3,
        description="Retries for transient Permit API failures (429, 5xx, timeouts)"
    )
    permit_page_size: int = Field(
        default=100,
        description="Page size used when listing Permit objects"
    )

    # Terraform output
    terraform_provider_version: str = Field(
        default="~> 0.0.14",
        description="Version constraint written into the required_providers block"
    )

    # Trino configuration
    trino_host: Optional[str] = Field(
        default=None,
        description="Trino coordinator host"
    )
    trino_port: int = Field(
        default=8080,
        description="Trino coordinator port"
    )
    trino_user: str = Field(
        default="admin",
        description="User name sent to Trino"
    )
    trino_http_scheme: str = Field(
        default="http",
        description="Scheme used to reach Trino ('http' or 'https')"
    )

    class Config:
        env_file = _find_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
