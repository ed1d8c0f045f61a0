"""
Reconciliation cycle: one pass from the source catalog to the remote store.

    connectivity -> cache decision -> source fetch -> diff -> upload
                 -> image attachment -> cache merge

Each step may short-circuit the cycle; a cycle that stops early leaves the
cache exactly as it was (apart from the lifetime bookkeeping of the cache
decision).
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from catalog_sync.constants.sync import CycleStatus, SyncMode
from catalog_sync.core.exceptions import (
    ConnectivityFault,
    FetchFault,
    ImageFault,
    SkippableRowError,
    UploadFault,
)
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.models.product_models import BatchResult, Product
from catalog_sync.models.sync_models import CycleReport
from catalog_sync.services.batch_uploader import BatchUploader
from catalog_sync.services.cache_manager import CacheManager
from catalog_sync.services.diff_engine import DiffEngine
from catalog_sync.services.image_attachment import ImageAttachmentWorkflow

logger = logging.getLogger(__name__)


class ReconciliationCycle:
    """Owns the cache and runs reconciliation cycles against it."""

    def __init__(
        self,
        source,
        catalog,
        media,
        cache: CacheManager,
        diff_engine: DiffEngine,
        uploader: BatchUploader,
        image_workflow: ImageAttachmentWorkflow,
        reporter: SyncReporter,
    ):
        self.source = source
        self.catalog = catalog
        self.media = media
        self.cache = cache
        self.diff_engine = diff_engine
        self.uploader = uploader
        self.image_workflow = image_workflow
        self.reporter = reporter
        self._connections_checked = False

    @property
    def connections_checked(self) -> bool:
        return self._connections_checked

    def reset_connectivity(self) -> None:
        """Force the collaborators to be probed again on the next cycle."""
        self._connections_checked = False
        logger.info("Connectivity check reset, collaborators will be probed on the next cycle")

    def check_connections(self, force: bool = False) -> bool:
        """
        Probe the source database, the media host and the store.

        A positive result is remembered until reset_connectivity() or a
        forced check; a negative result is never remembered.
        """
        if self._connections_checked and not force:
            return True

        logger.info("Testing connections")
        results = {
            "source_database": self._probe(self.source),
            "media_host": self._probe(self.media),
            "store": self._probe(self.catalog),
        }
        for name, ok in results.items():
            logger.info(f"  {name} connection: {'OK' if ok else 'Failed'}")

        self._connections_checked = all(results.values())
        if not self._connections_checked:
            failed = [name for name, ok in results.items() if not ok]
            self.reporter.fault(ConnectivityFault(
                f"Connection test failed: {', '.join(failed)}",
                {"failed": failed},
            ))
        return self._connections_checked

    @staticmethod
    def _probe(collaborator) -> bool:
        try:
            return bool(collaborator.probe_connectivity())
        except Exception as e:
            logger.error(f"Connection probe of {type(collaborator).__name__} raised: {e}")
            return False

    def run(self, trigger: str = SyncMode.SCHEDULED) -> CycleReport:
        """Run one cycle and return its report, including every record it emitted."""
        report = CycleReport(status=CycleStatus.COMPLETED, trigger=trigger)
        with self.reporter.capture() as records:
            self.reporter.info(f"Update started ({trigger})")
            report.status = self._run(report)
            report.cache_size = len(self.cache)
            self.reporter.info(f"Update finished: {report.status.value}")
        report.records = list(records)
        report.finished_at = datetime.now(timezone.utc)
        return report

    def _run(self, report: CycleReport) -> CycleStatus:
        if not self.check_connections():
            return CycleStatus.ABORTED_CONNECTIVITY

        if self.cache.should_refresh():
            self.reporter.info("Cache is empty or outdated, downloading products from the store")
            try:
                remote_products = self.catalog.fetch_all_products()
            except Exception as e:
                self.reporter.fault(FetchFault(f"Could not retrieve products from the store: {e}"))
                return CycleStatus.ABORTED_FETCH
            self.cache.refresh(remote_products)
            report.cache_refreshed = True
            self.reporter.info(f"Downloaded {len(self.cache)} products from the store")
        else:
            self.cache.decrement_lifetime()
            self.reporter.info(
                f"Using cache ({len(self.cache)} products) for updating. "
                f"({self.cache.lifetime} left)"
            )

        try:
            source_rows = self.source.fetch_all_products()
        except Exception as e:
            fault = e if isinstance(e, FetchFault) else FetchFault(
                f"Could not retrieve products from the source catalog: {e}")
            self.reporter.fault(fault)
            return CycleStatus.ABORTED_FETCH
        report.source_rows = len(source_rows)
        self.reporter.info(f"Downloaded {len(source_rows)} products from the source catalog")

        batch = self.diff_engine.diff(source_rows, self.cache.snapshot())
        if batch.is_empty:
            self.reporter.info("No changes were found since last update")
            return CycleStatus.NO_CHANGES

        self.reporter.info(
            f"{len(batch.create or [])} new products were found, "
            f"{len(batch.update or [])} products changed"
        )
        try:
            result = self.uploader.upload(batch)
        except UploadFault as fault:
            self.reporter.fault(fault)
            return CycleStatus.ABORTED_UPLOAD
        self.reporter.info("Upload was successful")
        self._report_rejected(result)

        created = self._attach_images(result.create, report)
        self.cache.merge(created, result.update)

        report.created = len(result.create)
        report.updated = len(result.update)
        report.rejected = len(result.rejected)
        return CycleStatus.COMPLETED

    def _report_rejected(self, result: BatchResult) -> None:
        for error in result.rejected:
            self.reporter.fault(SkippableRowError(
                f"Store rejected product: {error.message}",
                {"sku": error.sku, "remote_id": error.remote_id, "code": error.code},
            ))

    def _attach_images(self, created: List[Product], report: CycleReport) -> List[Product]:
        """Return the created products, with server-confirmed images where attached."""
        if not created:
            return []

        self.reporter.info("Uploading images")
        products: List[Product] = []
        for product in created:
            confirmed = self._attach_product_images(product)
            if confirmed is not None:
                report.images_attached += len(confirmed.images)
                product = product.model_copy(update={"images": confirmed.images})
            products.append(product)
        return products

    def _attach_product_images(self, product: Product) -> Optional[Product]:
        try:
            images = self.source.fetch_images(product.sku)
        except Exception as e:
            self.reporter.fault(ImageFault(
                f"Could not read images of {product.sku}: {e}",
                {"sku": product.sku, "remote_id": product.remote_id},
            ))
            return None
        if not images:
            return None
        return self.image_workflow.attach(product, images)
