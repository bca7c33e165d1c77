"""Tiendanube services package."""

from catalog_images.services.tiendanube.client import (
    RetryDecision,
    RetryKind,
    next_action,
    request_with_retry,
)

from catalog_images.services.tiendanube.products import (
    CatalogPager,
    delete_product_image,
    upload_product_image,
)

__all__ = [
    # Client
    'RetryDecision',
    'RetryKind',
    'next_action',
    'request_with_retry',
    # Products
    'CatalogPager',
    'delete_product_image',
    'upload_product_image',
]
