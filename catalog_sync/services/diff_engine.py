"""Classify source rows against the cache into creations and updates."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Set

from catalog_sync.constants.woocommerce import WCProductStatus
from catalog_sync.core.exceptions import SkippableRowError
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.models.product_models import (
    Product,
    ProductBatch,
    ProductCreate,
    ProductUpdate,
)
from catalog_sync.services.cache_manager import CacheView
from catalog_sync.services.woocommerce.converters import stock_to_stock_status

logger = logging.getLogger(__name__)


class DiffEngine:
    """
    Pure comparison of source rows with the cached remote state.

    Given the same rows and cache content the engine always returns the same
    batch; its only side effect is reporting skipped rows and detected changes.
    """

    def __init__(self, reporter: SyncReporter):
        self.reporter = reporter

    def diff(self, source_rows: Iterable[Optional[Product]], cache: CacheView) -> ProductBatch:
        create: List[ProductCreate] = []
        update: List[ProductUpdate] = []
        seen: Set[str] = set()

        for row in source_rows:
            if row is None or not row.sku:
                self.reporter.fault(SkippableRowError(
                    "Source product without SKU skipped",
                    {"name": row.name if row is not None else None},
                ))
                continue
            if row.sku in seen:
                self.reporter.fault(SkippableRowError(
                    f"Duplicate source SKU {row.sku} skipped",
                    {"sku": row.sku},
                ))
                continue
            seen.add(row.sku)

            cached = cache.get(row.sku)
            if cached is None:
                self.reporter.info(f"New product: (sku:{row.sku}) {row.name}", sku=row.sku)
                create.append(self.build_create(row))
                continue

            if cached.remote_id is None or cached.sku is None:
                self.reporter.fault(SkippableRowError(
                    f"Missing product id:{cached.remote_id} or sku:{cached.sku}",
                    {"sku": row.sku, "remote_id": cached.remote_id},
                ))
                continue

            payload = self.build_update(row, cached)
            if payload is not None:
                self.reporter.info(self._describe_change(cached, payload), sku=row.sku,
                                   remote_id=cached.remote_id)
                update.append(payload)

        return ProductBatch(create=create or None, update=update or None)

    @staticmethod
    def build_create(row: Product) -> ProductCreate:
        """New products stay hidden and unorderable until curated."""
        data = row.model_dump(exclude={"remote_id", "images"})
        data.update(
            status=WCProductStatus.DRAFT,
            manage_stock=True,
            backorders_allowed=False,
        )
        return ProductCreate(**data)

    @staticmethod
    def build_update(row: Product, cached: Product) -> Optional[ProductUpdate]:
        """Return a payload holding only the changed fields, or None."""
        changes: Dict[str, Any] = {}

        if cached.stock_quantity != row.stock_quantity:
            changes["stock_quantity"] = row.stock_quantity
            changes["stock_status"] = stock_to_stock_status(row.stock_quantity)

        if cached.price != row.price or cached.regular_price != row.regular_price:
            changes["regular_price"] = row.regular_price
            changes["price"] = row.price
            changes["sale_price"] = row.sale_price

        if not changes:
            return None
        return ProductUpdate(remote_id=cached.remote_id, **changes)

    @staticmethod
    def _describe_change(cached: Product, payload: ProductUpdate) -> str:
        parts = []
        if "stock_quantity" in payload.changed_fields:
            parts.append(f"stock:{cached.stock_quantity}->{payload.stock_quantity}")
        if "price" in payload.changed_fields:
            parts.append(f"price:{cached.price}->{payload.price}")
        return (
            f"Product changed (id:{cached.remote_id};sku:{cached.sku}) {cached.name} | "
            + " ".join(parts)
        )
