"""Data converters between the source catalog and WooCommerce formats."""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from catalog_sync.constants.woocommerce import StockStatus
from catalog_sync.core.config import settings
from catalog_sync.models.product_models import BatchItemError, Product

__logger__ = logging.getLogger(__name__)


def stock_to_stock_status(stock: Optional[int]) -> StockStatus:
    """A product is in stock exactly when its quantity is positive."""
    return StockStatus.IN_STOCK if stock is not None and stock > 0 else StockStatus.OUT_OF_STOCK


def price_to_regular_price(
    price: Decimal,
    on_sale: bool,
    markup: Optional[Decimal] = None
) -> Decimal:
    """
    Derive the regular price of a source row.

    Args:
        price: Price read from the source catalog
        on_sale: Whether the source flags the item as on sale
        markup: Markup factor (defaults to settings.price_markup_factor)

    Returns:
        ``round(price * markup, 4)`` for regular items, ``price`` for items
        on sale (the source price is already the discounted one)
    """
    if on_sale:
        return price
    factor = Decimal(str(markup if markup is not None else settings.price_markup_factor))
    return round(price * factor, 4)


def source_row_to_product(
    sku: str,
    name: str,
    price: Any,
    stock: int,
    on_sale: bool,
    markup: Optional[Decimal] = None
) -> Product:
    """
    Convert one source catalog row to a Product.

    Returns:
        Product without remote ID, with derived regular price and stock status
    """
    price = Decimal(str(price))
    stock = int(stock)
    return Product(
        sku=sku,
        name=name,
        price=price,
        regular_price=price_to_regular_price(price, on_sale, markup),
        sale_price=price if on_sale else None,
        stock_quantity=stock,
        stock_status=stock_to_stock_status(stock),
    )


def woocommerce_to_product(data: Dict[str, Any]) -> Product:
    """Parse a WooCommerce product JSON object."""
    return Product.model_validate(data)


def woocommerce_batch_error(item: Dict[str, Any]) -> BatchItemError:
    """Parse a per-item error entry of a products/batch response."""
    error = item.get("error") or {}
    return BatchItemError(
        sku=item.get("sku") or None,
        remote_id=item.get("id") or None,
        code=error.get("code"),
        message=error.get("message") or "Unknown batch item error",
    )
