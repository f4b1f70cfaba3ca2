"""
Configuration management for services.
"""

import json
import os
from typing import Any

from dotenv import load_dotenv

GOOGLE_SLIDES_SCOPES = [
    "https://www.googleapis.com/auth/presentations",
    "https://www.googleapis.com/auth/presentations.readonly",
]


class ServiceConfig:
    """Configuration management for services using environment variables."""

    def __init__(self) -> None:
        """Initialize configuration by loading environment variables."""
        # .env lives next to app.py
        env_path = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.env"))
        load_dotenv(dotenv_path=env_path, override=False)
        self.config: dict[str, Any] = {}
        self.load_from_env()

    def load_from_env(self) -> None:
        """Load configuration from environment variables."""
        self.config = {
            "database_url": os.getenv("DATABASE_URL"),
            "debug": os.getenv("DEBUG", "false").lower() == "true",
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "allowed_origins": json.loads(os.getenv("ALLOWED_ORIGINS", '["*"]')),
            "auth_jwt_secret": os.getenv("AUTH_JWT_SECRET"),
            "auth_jwt_public_key": os.getenv("AUTH_JWT_PUBLIC_KEY"),
            "auth_jwt_algorithms": [
                alg.strip()
                for alg in os.getenv("AUTH_JWT_ALGORITHMS", "RS256").split(",")
                if alg.strip()
            ],
            "auth_jwt_issuer": os.getenv("AUTH_JWT_ISSUER"),
            "auth_jwt_audience": os.getenv("AUTH_JWT_AUDIENCE"),
            "google_slides_api_base": os.getenv(
                "GOOGLE_SLIDES_API_BASE", "https://slides.googleapis.com/v1"
            ),
            "google_oauth_authorize_url": os.getenv(
                "GOOGLE_OAUTH_AUTHORIZE_URL", "https://accounts.google.com/o/oauth2/v2/auth"
            ),
            "google_oauth_token_url": os.getenv(
                "GOOGLE_OAUTH_TOKEN_URL", "https://oauth2.googleapis.com/token"
            ),
            "google_client_id": os.getenv("GOOGLE_CLIENT_ID"),
            "google_client_secret": os.getenv("GOOGLE_CLIENT_SECRET"),
            "google_oauth_redirect_uri": os.getenv("GOOGLE_OAUTH_REDIRECT_URI"),
            "google_oauth_scopes": os.getenv(
                "GOOGLE_OAUTH_SCOPES", " ".join(GOOGLE_SLIDES_SCOPES)
            ).split(),
            "google_token_refresh_enabled": os.getenv(
                "GOOGLE_TOKEN_REFRESH_ENABLED", "false"
            ).lower()
            == "true",
            "http_timeout_seconds": int(os.getenv("HTTP_TIMEOUT_SECONDS", "30")),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self.config.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value

    def reload(self) -> None:
        """Reload configuration from environment variables."""
        self.load_from_env()


# Global configuration instance
config = ServiceConfig()
