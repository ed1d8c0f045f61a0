from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from catalog_sync.constants.woocommerce import StockStatus
from catalog_sync.core.exceptions import FetchFault
from catalog_sync.models.source_tables import (
    catalog_image_links,
    catalog_images,
    catalog_items,
    metadata,
)
from catalog_sync.services.source_reader import SourceCatalogReader


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", poolclass=StaticPool,
                           connect_args={"check_same_thread": False})
    metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(catalog_items.insert(), [
            {"sku": "B200", "name": "Bolt", "price": Decimal("10.00"), "stock": 0,
             "on_sale": "N", "web_flag": "I"},
            {"sku": "A100", "name": "Anchor", "price": Decimal("8.50"), "stock": 4,
             "on_sale": "I", "web_flag": "I"},
            {"sku": "C300", "name": "Clamp", "price": Decimal("3.00"), "stock": None,
             "on_sale": "N", "web_flag": "I"},
            {"sku": "D400", "name": "Hidden", "price": Decimal("1.00"), "stock": 1,
             "on_sale": "N", "web_flag": "N"},
        ])
        conn.execute(catalog_images.insert(), [
            {"image_id": 2, "data": b"second"},
            {"image_id": 1, "data": b"first"},
            {"image_id": 3, "data": None},
        ])
        conn.execute(catalog_image_links.insert(), [
            {"sku": "A100", "image_id": 2},
            {"sku": "A100", "image_id": 1},
            {"sku": "A100", "image_id": 3},
        ])
    yield engine
    engine.dispose()


@pytest.fixture
def reader(engine, reporter):
    return SourceCatalogReader(engine, reporter, markup=Decimal("1.2"))


def test_fetch_reads_web_products_ordered_by_sku(reader, records):
    products = reader.fetch_all_products()

    assert [p.sku for p in products] == ["A100", "B200"]
    assert [r.fault for r in records] == ["SkippableRowError"]
    assert records[0].context["sku"] == "C300"


def test_fetch_derives_prices_and_stock_status(reader):
    anchor, bolt = reader.fetch_all_products()

    assert anchor.sale_price == Decimal("8.50")
    assert anchor.regular_price == Decimal("8.50")
    assert anchor.stock_status == StockStatus.IN_STOCK

    assert bolt.sale_price is None
    assert bolt.regular_price == Decimal("12.0000")
    assert bolt.stock_status == StockStatus.OUT_OF_STOCK


def test_fetch_images_in_image_id_order(reader):
    assert reader.fetch_images("A100") == [b"first", b"second"]
    assert reader.fetch_images("B200") == []


def test_probe_connectivity(reader):
    assert reader.probe_connectivity()


def test_missing_table_raises_fetch_fault(reporter):
    engine = create_engine("sqlite://")
    reader = SourceCatalogReader(engine, reporter)

    with pytest.raises(FetchFault):
        reader.fetch_all_products()
    assert reader.probe_connectivity() is False
