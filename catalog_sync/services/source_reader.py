"""Read access to the authoritative source catalog."""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from catalog_sync.core.exceptions import FetchFault, SkippableRowError
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.models.product_models import Product
from catalog_sync.models.source_tables import (
    catalog_image_links,
    catalog_images,
    catalog_items,
)
from catalog_sync.services.woocommerce.converters import source_row_to_product

logger = logging.getLogger(__name__)


class SourceCatalogReader:
    """Fetch catalog rows and product images from the source database."""

    def __init__(
        self,
        engine: Engine,
        reporter: SyncReporter,
        web_flag: str = "I",
        sale_flag: str = "I",
        markup: Optional[Decimal] = None,
    ):
        self.engine = engine
        self.reporter = reporter
        self.web_flag = web_flag
        self.sale_flag = sale_flag
        self.markup = markup

    def fetch_all_products(self) -> List[Product]:
        """
        Read every product published to the web shop, ordered by SKU.

        Rows with a missing column are reported and skipped.

        Raises:
            FetchFault: If the query cannot be executed
        """
        query = (
            select(
                catalog_items.c.sku.label("sku"),
                catalog_items.c.name.label("name"),
                catalog_items.c.price.label("price"),
                catalog_items.c.stock.label("stock"),
                catalog_items.c.on_sale.label("on_sale"),
            )
            .where(catalog_items.c.web_flag == self.web_flag)
            .order_by(catalog_items.c.sku)
        )

        logger.info("Executing source catalog query")
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(query).all()
        except SQLAlchemyError as e:
            raise FetchFault(f"Could not execute source catalog query: {e}") from e

        products: List[Product] = []
        for row in rows:
            if any(value is None for value in row):
                self.reporter.fault(SkippableRowError(
                    f"Converting source product {row.sku} failed: missing column value",
                    {"sku": row.sku},
                ))
                continue
            products.append(source_row_to_product(
                sku=row.sku,
                name=row.name,
                price=row.price,
                stock=row.stock,
                on_sale=row.on_sale == self.sale_flag,
                markup=self.markup,
            ))
        return products

    def fetch_images(self, sku: str) -> List[bytes]:
        """Return the stored images of ``sku`` in image ID order."""
        query = (
            select(catalog_images.c.data.label("data"))
            .select_from(
                catalog_image_links.join(
                    catalog_images,
                    catalog_image_links.c.image_id == catalog_images.c.image_id,
                )
            )
            .where(catalog_image_links.c.sku == sku)
            .order_by(catalog_images.c.image_id)
        )
        try:
            with self.engine.connect() as conn:
                blobs = conn.execute(query).scalars().all()
        except SQLAlchemyError as e:
            raise FetchFault(f"Could not read images of {sku}: {e}", {"sku": sku}) from e
        return [bytes(blob) for blob in blobs if blob is not None]

    def probe_connectivity(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(select(catalog_items).limit(0)).all()
        except SQLAlchemyError as e:
            logger.error(f"Source database connection test failed: {e}")
            return False
        return True
