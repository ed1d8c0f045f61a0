"""WooCommerce and WordPress services package."""

from catalog_sync.services.woocommerce.client import (
    WooCommerceCatalogClient,
    wc_get,
    wc_post,
    wc_put,
)

from catalog_sync.services.woocommerce.converters import (
    price_to_regular_price,
    source_row_to_product,
    stock_to_stock_status,
    woocommerce_batch_error,
    woocommerce_to_product,
)

from catalog_sync.services.woocommerce.media import WordPressMediaClient

__all__ = [
    "WooCommerceCatalogClient",
    "WordPressMediaClient",
    "wc_get",
    "wc_post",
    "wc_put",
    "price_to_regular_price",
    "source_row_to_product",
    "stock_to_stock_status",
    "woocommerce_batch_error",
    "woocommerce_to_product",
]
