"""
OAuth2 user credentials for Google Drive.

Only builds and refreshes the client; it never reads the environment.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from catalog_images.core.config import Settings

logger = logging.getLogger(__name__)


def _naive_utc(expiry: Optional[datetime]) -> Optional[datetime]:
    # google-auth compares expiry against a naive UTC now
    if expiry is None or expiry.tzinfo is None:
        return expiry
    return expiry.astimezone(timezone.utc).replace(tzinfo=None)


def build_drive_credentials(settings: Settings) -> Credentials:
    """Credentials from the configured client id/secret and tokens."""
    return Credentials(
        token=settings.google_access_token,
        refresh_token=settings.google_refresh_token,
        token_uri=settings.google_token_uri,
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        scopes=settings.google_scopes or None,
        expiry=_naive_utc(settings.google_token_expiry),
    )


class DriveTokenProvider:
    """Hands out a valid access token, refreshing it when expired."""

    def __init__(self, credentials: Credentials, request_factory: Callable[[], Request] = Request):
        self.credentials = credentials
        self._request_factory = request_factory
        self._lock = asyncio.Lock()

    async def get_token(self) -> str:
        """
        Return a valid bearer token.

        Concurrent callers share one refresh. The blocking refresh call runs
        in a worker thread.

        Raises:
            google.auth.exceptions.GoogleAuthError: Refresh failed
        """
        async with self._lock:
            if not self.credentials.valid:
                logger.info("Refreshing Google Drive access token")
                await asyncio.to_thread(self.credentials.refresh, self._request_factory())
        return self.credentials.token
