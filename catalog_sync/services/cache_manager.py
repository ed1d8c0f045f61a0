"""
In-memory mirror of the remote catalog.

The cache is owned by one CacheManager, which is held by the cycle
orchestrator. Every other component reads a snapshot.
"""
import logging
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from catalog_sync.core.exceptions import ConsistencyFault, SkippableRowError
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.models.product_models import Product

logger = logging.getLogger(__name__)

CacheView = Mapping[str, Product]


class CacheManager:
    """Products keyed by SKU plus a lifetime counted in reused cycles."""

    def __init__(self, lifespan: int, reporter: SyncReporter):
        self.lifespan = lifespan
        self.reporter = reporter
        self._products: Dict[str, Product] = {}
        self._lifetime = 0

    def __len__(self) -> int:
        return len(self._products)

    @property
    def lifetime(self) -> int:
        return self._lifetime

    def get(self, sku: str) -> Optional[Product]:
        return self._products.get(sku)

    def snapshot(self) -> CacheView:
        """Read-only copy of the current content."""
        return MappingProxyType(dict(self._products))

    def should_refresh(self) -> bool:
        return self._lifetime <= 0 or not self._products

    def refresh(self, rows: Iterable[Product]) -> None:
        """Replace the whole content with ``rows`` and reset the lifetime."""
        products: Dict[str, Product] = {}
        for product in rows:
            if product.sku is None:
                self.reporter.fault(SkippableRowError(
                    "Remote product without SKU left out of the cache",
                    {"remote_id": product.remote_id},
                ))
                continue
            if product.sku in products:
                self.reporter.fault(SkippableRowError(
                    f"Duplicate remote SKU {product.sku}, keeping the last one",
                    {"sku": product.sku, "remote_id": product.remote_id},
                ))
            products[product.sku] = product

        self._products = products
        self._lifetime = self.lifespan
        logger.info(f"Cache refreshed with {len(products)} products ({self._lifetime} cycles left)")

    def decrement_lifetime(self) -> None:
        self._lifetime -= 1

    def merge(self, created: Iterable[Product], updated: Iterable[Product]) -> None:
        """
        Fold server-confirmed products into the cache.

        Created products are inserted under their SKU, updated products
        replace the entry with the same remote ID. Items that contradict the
        cache are reported as ConsistencyFault and skipped.
        """
        for product in created:
            if product.sku is None:
                self.reporter.fault(ConsistencyFault(
                    "Created product confirmed without SKU",
                    {"remote_id": product.remote_id},
                ))
                continue
            if product.sku in self._products:
                self.reporter.fault(ConsistencyFault(
                    f"New product already exists in cache: {product.sku}",
                    {"sku": product.sku, "remote_id": product.remote_id},
                ))
                continue
            self._products[product.sku] = product

        index_by_id = {
            cached.remote_id: sku
            for sku, cached in self._products.items()
            if cached.remote_id is not None
        }
        for product in updated:
            sku = index_by_id.get(product.remote_id) if product.remote_id is not None else None
            if sku is None:
                self.reporter.fault(ConsistencyFault(
                    f"Missing product ID {product.remote_id} in cache for updated product",
                    {"sku": product.sku, "remote_id": product.remote_id},
                ))
                continue
            self._products[sku] = product
