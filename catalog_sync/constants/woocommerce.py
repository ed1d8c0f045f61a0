"""Constants for WooCommerce operations."""

from enum import Enum


class WCProductStatus:
    """WooCommerce product status constants."""
    DRAFT = "draft"
    PENDING = "pending"
    PRIVATE = "private"
    PUBLISH = "publish"


class StockStatus(str, Enum):
    """WooCommerce stock status values."""
    IN_STOCK = "instock"
    OUT_OF_STOCK = "outofstock"
    ON_BACKORDER = "onbackorder"


class WCEndpoint:
    """REST paths used by the catalog client."""
    PRODUCTS = "products"
    PRODUCTS_BATCH = "products/batch"
    SETTINGS = "settings"


# Maximum number of items accepted per side by products/batch
WC_MAX_BATCH_SIZE = 100
