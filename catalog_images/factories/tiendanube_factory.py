"""Factory for creating Tiendanube API clients."""

from typing import Dict, Optional

import httpx

from catalog_images.constants.tiendanube import TNHeader
from catalog_images.core.config import Settings


class TiendanubeClientFactory:
    """Factory class for creating Tiendanube API clients."""

    @staticmethod
    def default_headers(access_token: str, user_agent: str) -> Dict[str, str]:
        return {
            TNHeader.AUTHENTICATION: f"bearer {access_token}",
            TNHeader.USER_AGENT: user_agent,
            TNHeader.CONTENT_TYPE: "application/json",
        }

    @staticmethod
    def from_settings(
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> httpx.AsyncClient:
        """
        Create an async client bound to the configured store.

        Args:
            settings: Process settings (token, store id, timeouts)
            transport: Optional transport override, used by tests

        Returns:
            httpx.AsyncClient whose base URL is ``{api_base_url}/{store_id}``
        """
        return TiendanubeClientFactory.from_credentials(
            base_url=settings.store_base_url,
            access_token=settings.access_token,
            user_agent=settings.user_agent,
            timeout=settings.request_timeout,
            transport=transport,
        )

    @staticmethod
    def from_credentials(
        base_url: str,
        access_token: str,
        user_agent: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> httpx.AsyncClient:
        """
        Create an async client from individual credentials.

        Args:
            base_url: Store base URL, e.g. https://api.tiendanube.com/v1/123
            access_token: Tiendanube access token
            user_agent: User-Agent the API requires for app identification
            timeout: Per-request timeout in seconds
            transport: Optional transport override

        Returns:
            httpx.AsyncClient: Configured client
        """
        return httpx.AsyncClient(
            base_url=base_url,
            headers=TiendanubeClientFactory.default_headers(access_token, user_agent),
            timeout=timeout,
            transport=transport,
        )
