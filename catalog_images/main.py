"""
Process entry points.

``catalog-images-delete`` removes every catalog image,
``catalog-images-upload`` uploads the Drive images of every variant SKU.
"""
import asyncio
import logging
import sys
from typing import Awaitable, Callable, List

import httpx
from pydantic import ValidationError

from catalog_images.auth.google_oauth import DriveTokenProvider, build_drive_credentials
from catalog_images.constants.sync import SyncMode
from catalog_images.core.config import Settings, get_settings
from catalog_images.core.exceptions import ConfigurationError
from catalog_images.factories.tiendanube_factory import TiendanubeClientFactory
from catalog_images.models.product_models import SyncRunSummary
from catalog_images.services.drive_service import DriveImageResolver
from catalog_images.services.tiendanube import CatalogPager
from catalog_images.tasks.delete_images import delete_all_product_images
from catalog_images.tasks.sync_helpers import retry_options_from_settings
from catalog_images.tasks.upload_images import upload_drive_images
from catalog_images.utils.task_pool import BoundedTaskPool

_logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
    # per-request lines from httpx drown the progress output
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _require(settings: Settings, fields: List[str]) -> None:
    missing = [name for name in fields if not getattr(settings, name)]
    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")


def check_catalog_settings(settings: Settings) -> None:
    _require(settings, ["access_token", "store_id", "user_agent"])


def check_drive_settings(settings: Settings) -> None:
    _require(settings, [
        "google_client_id",
        "google_client_secret",
        "google_refresh_token",
        "drive_folder_id",
    ])


async def delete_images(settings: Settings) -> SyncRunSummary:
    async with TiendanubeClientFactory.from_settings(settings) as client:
        return await delete_all_product_images(
            client,
            CatalogPager(client, per_page=settings.per_page),
            BoundedTaskPool(settings.concurrency_limit),
            retry_options_from_settings(settings),
        )


async def upload_images(settings: Settings) -> SyncRunSummary:
    token_provider = DriveTokenProvider(build_drive_credentials(settings))
    async with TiendanubeClientFactory.from_settings(settings) as client, \
            httpx.AsyncClient(timeout=settings.request_timeout) as drive_client:
        resolver = DriveImageResolver(token_provider, settings.drive_folder_id, drive_client)
        return await upload_drive_images(
            client,
            CatalogPager(client, per_page=settings.per_page),
            BoundedTaskPool(settings.concurrency_limit),
            resolver,
            retry_options_from_settings(settings),
        )


def run(mode: str, runner: Callable[[Settings], Awaitable[SyncRunSummary]]) -> int:
    """
    Load settings, run one orchestrator and map the outcome to an exit code.

    Returns:
        0 on completion, 1 on bad configuration or any uncaught error
    """
    configure_logging()
    try:
        settings = get_settings()
    except ValidationError as e:
        _logger.error(f"Invalid configuration: {e}")
        return 1
    configure_logging(settings.log_level)

    try:
        check_catalog_settings(settings)
        if mode == SyncMode.UPLOAD:
            check_drive_settings(settings)
    except ConfigurationError as e:
        _logger.error(str(e))
        return 1

    _logger.info(f"Starting {mode} run for store {settings.store_id}")
    try:
        summary = asyncio.run(runner(settings))
    except Exception:
        _logger.exception("General error, run aborted")
        return 1

    _logger.info(
        f"Run finished: {summary.products} products over {summary.pages} pages"
    )
    return 0


def run_delete() -> None:
    sys.exit(run(SyncMode.DELETE, delete_images))


def run_upload() -> None:
    sys.exit(run(SyncMode.UPLOAD, upload_images))
