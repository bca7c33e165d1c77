"""Error taxonomy for catalog and Drive operations."""

from typing import Any, Optional


class CatalogImagesError(Exception):
    """Base error for the catalog images sync."""


class ConfigurationError(CatalogImagesError):
    """Mandatory settings are missing at startup."""


class CatalogAPIError(CatalogImagesError):
    """Base error for Tiendanube catalog API calls."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class RateLimitExhausted(CatalogAPIError):
    """Every attempt was answered with 429."""

    def __init__(self, url: str, attempts: int):
        super().__init__(f"Rate limited after {attempts} attempts: {url}", url=url)
        self.attempts = attempts


class RequestFailed(CatalogAPIError):
    """Non-429 error response. Never retried."""

    def __init__(self, status_code: int, body: Any = None, url: Optional[str] = None):
        super().__init__(f"Catalog API error ({status_code}): {body}", url=url)
        self.status_code = status_code
        self.body = body if body is not None else {}


class NetworkError(CatalogAPIError):
    """Transport-level failure (connection, timeout, protocol)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Network error on {url}: {reason}", url=url)
        self.reason = reason


class PageFetchFailed(CatalogAPIError):
    """A catalog page answered with a non-success status."""

    def __init__(self, page: int, status_code: int, url: Optional[str] = None):
        super().__init__(f"Error fetching page {page}: {status_code}", url=url)
        self.page = page
        self.status_code = status_code


class ResolutionFailed(CatalogImagesError):
    """Drive lookup for one SKU failed (auth or query)."""

    def __init__(self, sku: str, reason: str):
        super().__init__(f"Could not resolve images for SKU {sku}: {reason}")
        self.sku = sku
        self.reason = reason
