# Environment-driven configuration for the admin client
import os
from dataclasses import dataclass

DEVELOPMENT_BASE_URL = "http://localhost:3000/api"
PRODUCTION_BASE_URL = "https://module-funturine.vercel.app/api"

DEFAULT_TIMEOUT = 30.0
DEFAULT_CREDENTIALS_FILE = os.path.join(os.path.expanduser("~"), ".furniture_admin", "credentials.json")


@dataclass
class ClientConfig:
    """Settings shared by the API client, the session manager and the CLI"""
    base_url: str = DEVELOPMENT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    credentials_file: str = DEFAULT_CREDENTIALS_FILE
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """
        Build the configuration from environment variables.

        ADMIN_API_BASE_URL wins when set. Otherwise ADMIN_APP_ENV picks the
        local development proxy ("development", the default) or the
        production API origin ("production").
        """
        base_url = os.getenv("ADMIN_API_BASE_URL")
        if not base_url:
            app_env = os.getenv("ADMIN_APP_ENV", "development").strip().lower()
            base_url = PRODUCTION_BASE_URL if app_env == "production" else DEVELOPMENT_BASE_URL

        return cls(
            base_url=base_url.rstrip("/"),
            timeout=float(os.getenv("ADMIN_API_TIMEOUT", str(DEFAULT_TIMEOUT))),
            credentials_file=os.getenv("ADMIN_CREDENTIALS_FILE", DEFAULT_CREDENTIALS_FILE),
            log_level=os.getenv("ADMIN_LOG_LEVEL", "WARNING").upper(),
        )
