"""WooCommerce API client utilities."""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from woocommerce import API

from catalog_sync.constants.woocommerce import WC_MAX_BATCH_SIZE, WCEndpoint
from catalog_sync.core.exceptions import SkippableRowError, WooCommerceAPIError
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.models.product_models import (
    BatchResult,
    Product,
    ProductBatch,
    ProductUpdate,
)
from catalog_sync.services.woocommerce.converters import (
    woocommerce_batch_error,
    woocommerce_to_product,
)

__logger__ = logging.getLogger(__name__)


def _raise_for_response(method: str, path: str, r) -> None:
    if not r.ok:
        __logger__.error(f"WooCommerce {method} error on {path}: {r.status_code} - {r.text}")
        raise WooCommerceAPIError(
            f"WooCommerce API error ({r.status_code}) on {method} {path}: {r.text}",
            status_code=r.status_code,
        )


def wc_get(wcapi: API, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """Execute GET request to WooCommerce API."""
    r = wcapi.get(path, params=params) if params else wcapi.get(path)
    _raise_for_response("GET", path, r)
    return r.json()


def wc_post(wcapi: API, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
    """Execute POST request to WooCommerce API."""
    r = wcapi.post(path, data or {})
    _raise_for_response("POST", path, r)
    return r.json()


def wc_put(wcapi: API, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
    """Execute PUT request to WooCommerce API."""
    r = wcapi.put(path, data or {})
    _raise_for_response("PUT", path, r)
    return r.json()


class WooCommerceCatalogClient:
    """Remote catalog operations needed by the reconciliation engine."""

    def __init__(self, wcapi: API, reporter: SyncReporter, page_size: int = 100):
        self.wcapi = wcapi
        self.reporter = reporter
        self.page_size = page_size

    def fetch_all_products(self) -> List[Product]:
        """
        Fetch every product of the store, page by page.

        Returns:
            Fully materialized list of remote products

        Raises:
            WooCommerceAPIError: If any page request fails
        """
        products: List[Product] = []
        page = 1
        while True:
            batch = wc_get(
                self.wcapi,
                WCEndpoint.PRODUCTS,
                params={"page": page, "per_page": self.page_size},
            )
            if not batch:
                break
            __logger__.info(f"Got {len(batch)} products from page {page}")
            for item in batch:
                try:
                    products.append(woocommerce_to_product(item))
                except ValidationError as e:
                    self.reporter.fault(SkippableRowError(
                        f"Unreadable remote product: {e}",
                        {"remote_id": item.get("id"), "sku": item.get("sku")},
                    ))
            if len(batch) < self.page_size:
                break
            page += 1
        return products

    def upload_batch(self, batch: ProductBatch) -> BatchResult:
        """
        Submit one products/batch call.

        Args:
            batch: At most WC_MAX_BATCH_SIZE items per side

        Returns:
            BatchResult with confirmed products and per-item rejections
        """
        for side in (batch.create, batch.update):
            if side and len(side) > WC_MAX_BATCH_SIZE:
                raise ValueError(
                    f"Batch side of {len(side)} items exceeds the limit of {WC_MAX_BATCH_SIZE}"
                )

        response = wc_post(self.wcapi, WCEndpoint.PRODUCTS_BATCH, batch.to_payload())
        result = BatchResult()

        for index, item in enumerate(response.get("create") or []):
            if item.get("error"):
                error = woocommerce_batch_error(item)
                if error.sku is None and batch.create and index < len(batch.create):
                    error.sku = batch.create[index].sku
                result.rejected.append(error)
                continue
            result.create.append(woocommerce_to_product(item))

        for index, item in enumerate(response.get("update") or []):
            if item.get("error"):
                error = woocommerce_batch_error(item)
                if error.remote_id is None and batch.update and index < len(batch.update):
                    error.remote_id = batch.update[index].remote_id
                result.rejected.append(error)
                continue
            result.update.append(woocommerce_to_product(item))

        return result

    def update_product(self, update: ProductUpdate) -> Product:
        """Update a single product with the fields set on ``update``."""
        data = wc_put(
            self.wcapi,
            f"{WCEndpoint.PRODUCTS}/{update.remote_id}",
            update.to_payload(),
        )
        return woocommerce_to_product(data)

    def probe_connectivity(self) -> bool:
        """The store is reachable when it returns its settings groups."""
        try:
            groups = wc_get(self.wcapi, WCEndpoint.SETTINGS)
        except Exception as e:
            __logger__.error(f"WooCommerce connection test failed: {e}")
            return False
        return isinstance(groups, list) and len(groups) > 0
