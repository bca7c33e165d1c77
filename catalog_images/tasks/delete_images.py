"""
Bulk removal of every image attached to every catalog product.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from catalog_images.constants.sync import SyncAction
from catalog_images.core.exceptions import CatalogAPIError
from catalog_images.models.product_models import (
    ImageSyncResult,
    Product,
    ProductImage,
    ResourceId,
    SyncRunSummary,
)
from catalog_images.services.tiendanube import CatalogPager, delete_product_image
from catalog_images.tasks.sync_helpers import error_result, flatten, log_page_tally
from catalog_images.utils.task_pool import BoundedTaskPool

logger = logging.getLogger(__name__)


async def delete_image(
    client: httpx.AsyncClient,
    pool: BoundedTaskPool,
    product_id: ResourceId,
    image: ProductImage,
    retry_options: Optional[Dict[str, Any]] = None
) -> ImageSyncResult:
    """Delete one image through the pool. Failures are logged, never raised."""
    retry_options = retry_options or {}
    try:
        await pool.submit(
            lambda: delete_product_image(client, product_id, image.id, **retry_options)
        )
    except CatalogAPIError as e:
        logger.warning(f"Could not delete image {image.id} from product {product_id}: {e}")
        return error_result(
            product_id, "Image could not be deleted", exc=e, image_id=image.id
        )

    logger.info(f"Image {image.id} deleted from product {product_id}")
    return ImageSyncResult(
        product_id=product_id,
        image_id=image.id,
        action=SyncAction.DELETED,
        success=True,
        message="Image deleted",
    )


async def delete_product_images(
    client: httpx.AsyncClient,
    pool: BoundedTaskPool,
    product: Product,
    retry_options: Optional[Dict[str, Any]] = None
) -> List[ImageSyncResult]:
    """Delete every image of one product concurrently."""
    if not product.images:
        return []

    return list(await asyncio.gather(*(
        delete_image(client, pool, product.id, image, retry_options)
        for image in product.images
    )))


async def delete_all_product_images(
    client: httpx.AsyncClient,
    pager: CatalogPager,
    pool: BoundedTaskPool,
    retry_options: Optional[Dict[str, Any]] = None
) -> SyncRunSummary:
    """
    Walk the catalog and delete every product image.

    Products of a page are handled concurrently, image deletes are capped
    by ``pool``, and the next page is fetched only once the whole page has
    settled.

    Args:
        client: Configured Tiendanube client
        pager: Catalog pager bound to the same client
        pool: Pool shared by every delete of the run
        retry_options: Keyword arguments for request_with_retry

    Returns:
        SyncRunSummary with pages walked and products processed
    """
    summary = SyncRunSummary()

    async for page, products in pager.iter_pages():
        logger.info(f"Processing page {page} with {len(products)} products")
        results = await asyncio.gather(*(
            delete_product_images(client, pool, product, retry_options)
            for product in products
        ))
        log_page_tally(page, flatten(results))
        summary.pages = page
        summary.products += len(products)

    logger.info(f"Total products processed: {summary.products}")
    return summary
