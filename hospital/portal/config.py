"""
Portal client settings loaded from environment variables.

Separate from the API settings so the client never needs the server secret.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict

class PortalSettings(BaseSettings):
    """
    Portal settings class with environment variable validation.

    Attributes:
        api_base_url: Base URL of the hospital API (including the /api prefix)
        storage_path: File used by FileStorage to persist the session
        timeout: HTTP timeout in seconds
    """
    model_config = SettingsConfigDict(env_prefix="PORTAL_", env_file=".env", case_sensitive=False, extra="ignore")

    api_base_url: str = "http://localhost:8000/api"
    storage_path: str = ".portal_session.json"
    timeout: float = 10.0

# Create settings instance
portal_settings = PortalSettings()
