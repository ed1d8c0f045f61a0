from decimal import Decimal
from typing import Dict, List, Optional

import pytest

from catalog_sync.constants.woocommerce import StockStatus
from catalog_sync.core.exceptions import MediaHostError, WooCommerceAPIError
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.models.product_models import (
    BatchItemError,
    BatchResult,
    MediaObject,
    Product,
    ProductBatch,
    ProductUpdate,
)
from catalog_sync.services.batch_uploader import BatchUploader
from catalog_sync.services.cache_manager import CacheManager
from catalog_sync.services.diff_engine import DiffEngine
from catalog_sync.services.image_attachment import ImageAttachmentWorkflow
from catalog_sync.services.reconciliation import ReconciliationCycle
from catalog_sync.services.woocommerce.converters import source_row_to_product


def make_source_product(sku: str, price="10.00", stock: int = 5, on_sale: bool = False,
                        name: Optional[str] = None) -> Product:
    return source_row_to_product(
        sku=sku,
        name=name or f"Product {sku}",
        price=price,
        stock=stock,
        on_sale=on_sale,
        markup=Decimal("1.2"),
    )


def make_remote_product(sku: str, remote_id: int, price="10.00", regular_price="12.00",
                        stock: int = 5) -> Product:
    return Product(
        remote_id=remote_id,
        sku=sku,
        name=f"Product {sku}",
        price=Decimal(price),
        regular_price=Decimal(regular_price),
        stock_quantity=stock,
        stock_status=StockStatus.IN_STOCK if stock > 0 else StockStatus.OUT_OF_STOCK,
        status="publish",
    )


class FakeSourceReader:
    """Source catalog held in memory."""

    def __init__(self, products: Optional[List[Product]] = None,
                 images: Optional[Dict[str, List[bytes]]] = None):
        self.products = list(products or [])
        self.images = dict(images or {})
        self.reachable = True
        self.fetch_error: Optional[Exception] = None
        self.image_errors: Dict[str, Exception] = {}
        self.fetch_calls = 0
        self.probe_calls = 0

    def fetch_all_products(self) -> List[Product]:
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.products)

    def fetch_images(self, sku: str) -> List[bytes]:
        if sku in self.image_errors:
            raise self.image_errors[sku]
        return list(self.images.get(sku, []))

    def probe_connectivity(self) -> bool:
        self.probe_calls += 1
        return self.reachable


class FakeCatalogClient:
    """WooCommerce store that applies batches to an in-memory product table."""

    def __init__(self, products: Optional[List[Product]] = None):
        self.products: Dict[int, Product] = {p.remote_id: p for p in products or []}
        self.next_id = max(self.products, default=100)
        self.reachable = True
        self.fetch_error: Optional[Exception] = None
        self.fail_on_call: Optional[int] = None
        self.reject_skus: set = set()
        self.drop_images = False
        self.batch_calls: List[ProductBatch] = []
        self.update_calls: List[ProductUpdate] = []
        self.fetch_calls = 0
        self.probe_calls = 0

    def fetch_all_products(self) -> List[Product]:
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.products.values())

    def _apply(self, update: ProductUpdate) -> Product:
        current = self.products[update.remote_id]
        changes = {name: getattr(update, name) for name in update.changed_fields}
        product = current.model_copy(update=changes)
        self.products[product.remote_id] = product
        return product

    def upload_batch(self, batch: ProductBatch) -> BatchResult:
        self.batch_calls.append(batch)
        if self.fail_on_call == len(self.batch_calls):
            raise WooCommerceAPIError("Internal Server Error", status_code=500)

        result = BatchResult()
        for item in batch.create or []:
            if item.sku in self.reject_skus:
                result.rejected.append(BatchItemError(
                    sku=item.sku, code="product_invalid_sku", message="Invalid or duplicated SKU."))
                continue
            self.next_id += 1
            product = Product(remote_id=self.next_id, **item.model_dump(exclude={"images"}))
            self.products[product.remote_id] = product
            result.create.append(product)
        for item in batch.update or []:
            result.update.append(self._apply(item))
        return result

    def update_product(self, update: ProductUpdate) -> Product:
        self.update_calls.append(update)
        product = self._apply(update)
        if self.drop_images:
            return product.model_copy(update={"images": []})
        return product

    def probe_connectivity(self) -> bool:
        self.probe_calls += 1
        return self.reachable


class FakeMediaClient:
    """Media library that records uploads and bindings."""

    def __init__(self, failing_uploads=(), failing_binds=()):
        self.failing_uploads = set(failing_uploads)
        self.failing_binds = set(failing_binds)
        self.uploads: List[tuple] = []
        self.binds: List[tuple] = []
        self.next_id = 500
        self.reachable = True
        self.probe_calls = 0

    def upload_image(self, sku: str, data: bytes) -> MediaObject:
        self.uploads.append((sku, data))
        if data in self.failing_uploads:
            raise MediaHostError("Upload failed (500): internal error", status_code=500)
        self.next_id += 1
        return MediaObject(
            id=self.next_id,
            source_url=f"https://shop.test/wp-content/uploads/{sku}-{self.next_id}.jpg",
        )

    def bind_image(self, media_id: int, remote_id: int) -> MediaObject:
        self.binds.append((media_id, remote_id))
        if media_id in self.failing_binds:
            raise MediaHostError("Binding failed (403): forbidden", status_code=403)
        return MediaObject(id=media_id, source_url=f"https://shop.test/media/{media_id}.jpg")

    def probe_connectivity(self) -> bool:
        self.probe_calls += 1
        return self.reachable


@pytest.fixture
def records():
    return []


@pytest.fixture
def reporter(records):
    return SyncReporter(sinks=[records.append])


@pytest.fixture
def source():
    return FakeSourceReader()


@pytest.fixture
def catalog():
    return FakeCatalogClient()


@pytest.fixture
def media():
    return FakeMediaClient()


@pytest.fixture
def make_cycle(reporter):
    def _make(source, catalog, media, lifespan: int = 20, max_batch_size: int = 100):
        return ReconciliationCycle(
            source=source,
            catalog=catalog,
            media=media,
            cache=CacheManager(lifespan, reporter),
            diff_engine=DiffEngine(reporter),
            uploader=BatchUploader(catalog, reporter, max_batch_size=max_batch_size),
            image_workflow=ImageAttachmentWorkflow(media, catalog, reporter),
            reporter=reporter,
        )
    return _make
