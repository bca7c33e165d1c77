"""Finds the Drive images that belong to a SKU and returns their public URLs."""

import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx
from google.auth.exceptions import GoogleAuthError

from catalog_images.constants.drive import (
    DRIVE_FILES_URL,
    DRIVE_PAGE_SIZE,
    DRIVE_VIEW_URL,
    IMAGE_MIME_PREFIX,
)
from catalog_images.core.exceptions import ResolutionFailed

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    async def get_token(self) -> str:
        ...


def escape_query_value(value: str) -> str:
    """Escape a literal for a Drive ``q`` expression."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def view_url(file_id: str) -> str:
    return DRIVE_VIEW_URL.format(file_id=file_id)


class DriveImageResolver:
    """
    Looks up image files in one Drive folder by SKU substring.

    Files are filtered to image MIME types, trashed files are excluded and
    results come ordered by name, which fixes the upload position of each
    image.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        folder_id: str,
        client: httpx.AsyncClient,
        files_url: str = DRIVE_FILES_URL
    ):
        self.token_provider = token_provider
        self.folder_id = folder_id
        self.client = client
        self.files_url = files_url

    def build_query(self, sku: str) -> str:
        return (
            f"'{escape_query_value(self.folder_id)}' in parents"
            f" and name contains '{escape_query_value(sku)}'"
            f" and mimeType contains '{IMAGE_MIME_PREFIX}'"
            f" and trashed = false"
        )

    async def _list_page(self, sku: str, page_token: Optional[str]) -> Dict[str, Any]:
        token = await self.token_provider.get_token()
        params = {
            "q": self.build_query(sku),
            "fields": "nextPageToken, files(id, name)",
            "orderBy": "name",
            "pageSize": DRIVE_PAGE_SIZE,
        }
        if page_token:
            params["pageToken"] = page_token
        response = await self.client.get(
            self.files_url,
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        response.raise_for_status()
        return response.json()

    async def list_files(self, sku: str) -> List[Dict[str, Any]]:
        """
        All matching files as ``{"id", "name"}`` dicts, in name order.

        Raises:
            ResolutionFailed: Authentication or query failure
        """
        files: List[Dict[str, Any]] = []
        page_token = None
        try:
            while True:
                data = await self._list_page(sku, page_token)
                files.extend(data.get("files") or [])
                page_token = data.get("nextPageToken")
                if not page_token:
                    return files
        except GoogleAuthError as e:
            raise ResolutionFailed(sku, f"authentication failed: {e}") from e
        except httpx.HTTPStatusError as e:
            raise ResolutionFailed(
                sku, f"Drive query failed ({e.response.status_code}): {e.response.text}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ResolutionFailed(sku, str(e) or e.__class__.__name__) from e

    async def resolve_images(self, sku: str) -> List[str]:
        """
        Public view URLs of every image whose name contains ``sku``.

        Args:
            sku: Variant SKU

        Returns:
            URLs ordered by file name; empty when nothing matches

        Raises:
            ResolutionFailed: Authentication or query failure
        """
        files = await self.list_files(sku)
        logger.debug(f"Drive files for SKU {sku}: {[f.get('name') for f in files]}")
        return [view_url(f["id"]) for f in files if f.get("id")]
