"""Assemble the reconciliation engine from settings."""

import logging
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine

from catalog_sync.constants.woocommerce import WC_MAX_BATCH_SIZE
from catalog_sync.core.alerts import AlertManager
from catalog_sync.core.config import Settings, settings
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.factories.woocommerce_factory import (
    MediaClientFactory,
    WooCommerceClientFactory,
)
from catalog_sync.services.batch_uploader import BatchUploader
from catalog_sync.services.cache_manager import CacheManager
from catalog_sync.services.diff_engine import DiffEngine
from catalog_sync.services.image_attachment import ImageAttachmentWorkflow
from catalog_sync.services.reconciliation import ReconciliationCycle
from catalog_sync.services.source_reader import SourceCatalogReader
from catalog_sync.tasks.scheduler import SyncScheduler

logger = logging.getLogger(__name__)


def build_reporter(config: Settings = settings) -> SyncReporter:
    alert_manager = AlertManager(config) if config.alerts_enabled else None
    return SyncReporter(alert_manager=alert_manager)


def build_reconciliation_cycle(
    config: Settings = settings,
    reporter: Optional[SyncReporter] = None,
) -> ReconciliationCycle:
    """Wire the collaborators and engine components configured in ``config``."""
    reporter = reporter or build_reporter(config)

    engine = create_engine(config.source_database_url, pool_pre_ping=True)
    source = SourceCatalogReader(
        engine,
        reporter,
        web_flag=config.source_web_flag,
        sale_flag=config.source_sale_flag,
        markup=config.price_markup_factor,
    )
    catalog = WooCommerceClientFactory.catalog_client(reporter, config)
    media = MediaClientFactory.from_settings(config)

    return ReconciliationCycle(
        source=source,
        catalog=catalog,
        media=media,
        cache=CacheManager(config.cache_lifespan, reporter),
        diff_engine=DiffEngine(reporter),
        uploader=BatchUploader(
            catalog, reporter, max_batch_size=min(config.wc_batch_size, WC_MAX_BATCH_SIZE)),
        image_workflow=ImageAttachmentWorkflow(media, catalog, reporter),
        reporter=reporter,
    )


@lru_cache()
def get_sync_scheduler() -> SyncScheduler:
    """Process-wide scheduler; the cache it owns lives as long as the process."""
    logger.info("Building reconciliation engine")
    cycle = build_reconciliation_cycle(settings)
    return SyncScheduler(cycle, settings.sync_interval_minutes, cycle.reporter)
