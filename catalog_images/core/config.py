from datetime import datetime
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from catalog_images.constants.tiendanube import TNDefaults


class Settings(BaseSettings):
    # Tiendanube
    access_token: str = ""
    store_id: str = Field("", validation_alias="USER_ID")
    api_base_url: str = "https://api.tiendanube.com/v1"
    # Tiendanube asks for an app name plus contact email; no usable default
    user_agent: str = ""
    per_page: int = TNDefaults.PER_PAGE
    concurrency_limit: int = TNDefaults.CONCURRENCY_LIMIT
    max_retries: int = TNDefaults.MAX_RETRIES
    retry_initial_delay: float = TNDefaults.RETRY_INITIAL_DELAY
    request_timeout: float = 30.0

    # Google Drive
    google_client_id: str = ""
    google_client_secret: str = ""
    google_access_token: Optional[str] = None
    google_refresh_token: Optional[str] = None
    google_token_expiry: Optional[datetime] = None
    google_token_uri: str = "https://oauth2.googleapis.com/token"
    # unset keeps whatever scopes the refresh token was granted
    google_scopes: Optional[List[str]] = None
    drive_folder_id: str = "1-R_zY7rBbem5DmHclokxLZF-wYsdvjep"

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True
        env_ignore_empty = True

    @property
    def store_base_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/{self.store_id}"


def get_settings() -> Settings:
    """Build the settings once per process, at the entry point."""
    return Settings()
