"""
Helper functions shared by the delete and upload runs.
"""
import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from catalog_images.constants.sync import SyncAction
from catalog_images.core.config import Settings
from catalog_images.models.product_models import ImageSyncResult, ResourceId

logger = logging.getLogger(__name__)


def retry_options_from_settings(settings: Settings) -> Dict[str, Any]:
    """Keyword arguments for request_with_retry built from settings."""
    return {
        "max_retries": settings.max_retries,
        "initial_delay": settings.retry_initial_delay,
    }


def error_result(
    product_id: ResourceId,
    message: str,
    exc: Optional[Exception] = None,
    details: Optional[str] = None,
    **fields: Any
) -> ImageSyncResult:
    if details is None and exc is not None:
        details = str(exc)
    return ImageSyncResult(
        product_id=product_id,
        action=SyncAction.ERROR,
        success=False,
        message=message,
        error_details=details,
        **fields,
    )


def flatten(results: Iterable[List[ImageSyncResult]]) -> List[ImageSyncResult]:
    return [result for group in results for result in group]


def log_page_tally(page: int, results: List[ImageSyncResult]) -> None:
    tally = Counter(result.action for result in results)
    logger.info(f"Page {page} done: {dict(tally) or 'nothing to do'}")
