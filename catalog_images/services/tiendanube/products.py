"""Tiendanube product catalog: paging and image mutations."""

import logging
from typing import Any, AsyncIterator, Dict, List, Tuple

import httpx
from pydantic import ValidationError

from catalog_images.constants.tiendanube import TNDefaults
from catalog_images.core.exceptions import NetworkError, PageFetchFailed
from catalog_images.models.product_models import ImageUploadRequest, Product, ResourceId
from catalog_images.services.tiendanube.client import request_with_retry

__logger__ = logging.getLogger(__name__)


class CatalogPager:
    """Walks GET /products one page at a time, never in parallel."""

    def __init__(self, client: httpx.AsyncClient, per_page: int = TNDefaults.PER_PAGE):
        self.client = client
        self.per_page = per_page

    async def _get_page(self, page: int) -> List[Dict[str, Any]]:
        url = "products"
        try:
            response = await self.client.get(
                url, params={"per_page": self.per_page, "page": page}
            )
        except httpx.TransportError as e:
            raise NetworkError(url, str(e) or e.__class__.__name__) from e

        if not response.is_success:
            raise PageFetchFailed(page, response.status_code, url=url)
        return response.json() or []

    async def _fetch(self, page: int) -> Tuple[int, List[Product]]:
        try:
            raw_products = await self._get_page(page)
        except PageFetchFailed as e:
            __logger__.warning(f"Error on page {page}: {e.status_code}")
            return 0, []
        return len(raw_products), parse_products(raw_products)

    async def fetch_page(self, page: int) -> List[Product]:
        """
        Fetch one catalog page.

        A non-success response is logged and reported as an empty page,
        which also ends paging. That is indistinguishable from the real end
        of the catalog.

        Args:
            page: 1-based page number

        Returns:
            List of products, empty at the end of the catalog
        """
        _, products = await self._fetch(page)
        return products

    async def iter_pages(self, start: int = 1) -> AsyncIterator[Tuple[int, List[Product]]]:
        """
        Yield ``(page, products)`` for start, start+1, ... until an empty page.

        A page is empty when the API returned no entries at all; a page whose
        entries were all malformed is yielded with no products and paging
        goes on.

        The following page is requested only when the consumer asks for it,
        i.e. after it has finished with the current one.
        """
        page = start
        while True:
            raw_count, products = await self._fetch(page)
            if not raw_count:
                __logger__.info(f"End of products. Pages walked: {page - start}")
                return
            yield page, products
            page += 1


async def delete_product_image(
    client: httpx.AsyncClient,
    product_id: ResourceId,
    image_id: ResourceId,
    **retry_options: Any
) -> Any:
    """
    DELETE /products/{product_id}/images/{image_id}, retried on 429.

    Raises:
        RequestFailed, RateLimitExhausted, NetworkError
    """
    return await request_with_retry(
        client, "DELETE", f"products/{product_id}/images/{image_id}", **retry_options
    )


async def upload_product_image(
    client: httpx.AsyncClient,
    product_id: ResourceId,
    image: ImageUploadRequest,
    **retry_options: Any
) -> Dict[str, Any]:
    """
    POST /products/{product_id}/images with ``{src, position, alt}``.

    Returns:
        Parsed response body; it carries ``id`` when the image was created

    Raises:
        RequestFailed, RateLimitExhausted, NetworkError
    """
    result = await request_with_retry(
        client, "POST", f"products/{product_id}/images",
        json=image.model_dump(), **retry_options
    )
    return result if isinstance(result, dict) else {}


def parse_products(raw_products: List[Dict[str, Any]]) -> List[Product]:
    """Parse a page payload, dropping entries that are not products."""
    products = []
    for raw in raw_products:
        try:
            products.append(Product.model_validate(raw))
        except ValidationError as e:
            __logger__.warning(f"Skipping malformed product payload: {e}")
    return products
