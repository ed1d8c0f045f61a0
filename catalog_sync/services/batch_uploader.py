"""Split oversized batches into calls the remote batch endpoint accepts."""

import logging
from typing import Iterator, List, Sequence, TypeVar

from catalog_sync.constants.woocommerce import WC_MAX_BATCH_SIZE
from catalog_sync.core.exceptions import UploadFault
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.models.product_models import BatchResult, ProductBatch

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield contiguous runs of at most ``size`` items, preserving order."""
    if size < 1:
        raise ValueError("Chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


class BatchUploader:
    """
    Upload a ProductBatch through the catalog client.

    A batch that fits the limit on both sides goes out in one call. Otherwise
    the create side is uploaded first, then the update side, each in chunks.
    The first failing call abandons the whole upload: confirmations of
    earlier chunks are discarded and an UploadFault is raised.
    """

    def __init__(self, catalog_client, reporter: SyncReporter,
                 max_batch_size: int = WC_MAX_BATCH_SIZE):
        self.catalog_client = catalog_client
        self.reporter = reporter
        self.max_batch_size = max_batch_size

    def upload(self, batch: ProductBatch) -> BatchResult:
        create = batch.create or []
        update = batch.update or []

        if len(create) <= self.max_batch_size and len(update) <= self.max_batch_size:
            logger.info(f"Uploading batch: {len(create)} new, {len(update)} changed products")
            return self._send(batch, "batch")

        result = BatchResult()
        for side, items in (("create", create), ("update", update)):
            total = len(items)
            for number, chunk in enumerate(chunked(items, self.max_batch_size), start=1):
                logger.info(f"Uploading {side} chunk {number} ({len(chunk)} of {total} products)")
                part = self._send(ProductBatch(**{side: chunk}), f"{side} chunk {number}")
                result.create.extend(part.create)
                result.update.extend(part.update)
                result.rejected.extend(part.rejected)
        return result

    def _send(self, batch: ProductBatch, label: str) -> BatchResult:
        try:
            return self.catalog_client.upload_batch(batch)
        except Exception as e:
            raise UploadFault(f"Upload of {label} failed: {e}", {"part": label}) from e
