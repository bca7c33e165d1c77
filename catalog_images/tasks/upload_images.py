"""
Uploads the Drive images of each variant SKU to its catalog product.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from catalog_images.constants.sync import SyncAction
from catalog_images.core.exceptions import CatalogAPIError, ResolutionFailed
from catalog_images.models.product_models import (
    ImageSyncResult,
    ImageUploadRequest,
    Product,
    ProductVariant,
    ResourceId,
    SyncRunSummary,
)
from catalog_images.services.drive_service import DriveImageResolver
from catalog_images.services.tiendanube import CatalogPager, upload_product_image
from catalog_images.tasks.sync_helpers import error_result, flatten, log_page_tally
from catalog_images.utils.task_pool import BoundedTaskPool

logger = logging.getLogger(__name__)


def skipped_result(product_id: ResourceId, message: str, sku: Optional[str] = None) -> ImageSyncResult:
    return ImageSyncResult(
        product_id=product_id,
        sku=sku,
        action=SyncAction.SKIPPED,
        success=True,
        message=message,
    )


async def upload_image(
    client: httpx.AsyncClient,
    pool: BoundedTaskPool,
    product_id: ResourceId,
    sku: str,
    image: ImageUploadRequest,
    retry_options: Optional[Dict[str, Any]] = None
) -> ImageSyncResult:
    """Upload one image through the pool. Failures are logged, never raised."""
    retry_options = retry_options or {}
    try:
        created = await pool.submit(
            lambda: upload_product_image(client, product_id, image, **retry_options)
        )
    except CatalogAPIError as e:
        logger.warning(f"Upload of image {image.position} for SKU {sku} failed: {e}")
        return error_result(
            product_id, "Image upload failed", exc=e, sku=sku, position=image.position
        )

    if not created.get("id"):
        logger.warning(f"Upload of image {image.position} for SKU {sku} failed: {created}")
        return error_result(
            product_id, "Response carried no image id",
            sku=sku, position=image.position, details=str(created),
        )

    logger.info(f"Image {image.position} uploaded for SKU {sku} on product {product_id}")
    return ImageSyncResult(
        product_id=product_id,
        sku=sku,
        image_id=created["id"],
        position=image.position,
        action=SyncAction.CREATED,
        success=True,
        message="Image uploaded",
    )


async def upload_variant_images(
    client: httpx.AsyncClient,
    pool: BoundedTaskPool,
    resolver: DriveImageResolver,
    product_id: ResourceId,
    variant: ProductVariant,
    retry_options: Optional[Dict[str, Any]] = None
) -> List[ImageSyncResult]:
    """
    Resolve the Drive images of one variant and upload them in name order.

    Position ``n`` goes to the n-th resolved URL no matter which upload
    finishes first.
    """
    sku = variant.sku
    if not sku:
        logger.info(f"Variant without SKU in product {product_id}")
        return [skipped_result(product_id, "Variant has no SKU")]

    logger.info(f"Searching Drive images for SKU: {sku}")
    try:
        image_urls = await resolver.resolve_images(sku)
    except ResolutionFailed as e:
        logger.warning(f"Skipping SKU {sku}: {e.reason}")
        return [skipped_result(product_id, f"Drive lookup failed: {e.reason}", sku=sku)]

    if not image_urls:
        logger.info(f"No image found for SKU {sku}")
        return [skipped_result(product_id, "No images in Drive", sku=sku)]

    return list(await asyncio.gather(*(
        upload_image(
            client, pool, product_id, sku,
            ImageUploadRequest.for_sku(url, index, sku),
            retry_options,
        )
        for index, url in enumerate(image_urls)
    )))


async def upload_product_images(
    client: httpx.AsyncClient,
    pool: BoundedTaskPool,
    resolver: DriveImageResolver,
    product: Product,
    retry_options: Optional[Dict[str, Any]] = None
) -> List[ImageSyncResult]:
    """Handle every variant of one product concurrently."""
    results = await asyncio.gather(*(
        upload_variant_images(client, pool, resolver, product.id, variant, retry_options)
        for variant in product.variants
    ))
    return flatten(results)


async def upload_drive_images(
    client: httpx.AsyncClient,
    pager: CatalogPager,
    pool: BoundedTaskPool,
    resolver: DriveImageResolver,
    retry_options: Optional[Dict[str, Any]] = None
) -> SyncRunSummary:
    """
    Walk the catalog and upload the Drive images of every variant SKU.

    Args:
        client: Configured Tiendanube client
        pager: Catalog pager bound to the same client
        pool: Pool shared by every upload of the run
        resolver: Drive image resolver
        retry_options: Keyword arguments for request_with_retry

    Returns:
        SyncRunSummary with pages walked and products processed
    """
    summary = SyncRunSummary()

    async for page, products in pager.iter_pages():
        logger.info(f"Processing page {page} with {len(products)} products")
        results = await asyncio.gather(*(
            upload_product_images(client, pool, resolver, product, retry_options)
            for product in products
        ))
        log_page_tally(page, flatten(results))
        summary.pages = page
        summary.products += len(products)

    logger.info(f"Total products processed: {summary.products}")
    return summary
