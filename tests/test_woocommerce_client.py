from unittest.mock import MagicMock

import pytest

from catalog_sync.core.exceptions import WooCommerceAPIError
from catalog_sync.models.product_models import ProductBatch, ProductCreate, ProductUpdate
from catalog_sync.services.woocommerce.client import WooCommerceCatalogClient


def response(payload, status_code=200):
    r = MagicMock()
    r.ok = status_code < 400
    r.status_code = status_code
    r.json.return_value = payload
    r.text = str(payload)
    return r


def remote(remote_id, sku):
    return {"id": remote_id, "sku": sku, "name": sku, "price": "10", "regular_price": "12",
            "sale_price": "", "stock_quantity": 1, "stock_status": "instock", "images": []}


@pytest.fixture
def wcapi():
    return MagicMock()


def test_fetch_all_products_paginates_until_empty_page(wcapi, reporter):
    wcapi.get.side_effect = [
        response([remote(1, "A"), remote(2, "B")]),
        response([remote(3, "C"), remote(4, "D")]),
        response([]),
    ]
    client = WooCommerceCatalogClient(wcapi, reporter, page_size=2)

    products = client.fetch_all_products()

    assert [p.remote_id for p in products] == [1, 2, 3, 4]
    pages = [call.kwargs["params"]["page"] for call in wcapi.get.call_args_list]
    assert pages == [1, 2, 3]


def test_fetch_stops_on_short_page(wcapi, reporter):
    wcapi.get.return_value = response([remote(1, "A")])
    client = WooCommerceCatalogClient(wcapi, reporter, page_size=100)

    assert len(client.fetch_all_products()) == 1
    assert wcapi.get.call_count == 1


def test_fetch_reports_unreadable_items(wcapi, reporter, records):
    broken = remote(2, "B")
    broken["stock_quantity"] = "many"
    wcapi.get.return_value = response([remote(1, "A"), broken])
    client = WooCommerceCatalogClient(wcapi, reporter)

    products = client.fetch_all_products()

    assert [p.sku for p in products] == ["A"]
    assert records[0].fault == "SkippableRowError"
    assert records[0].context["remote_id"] == 2


def test_fetch_error_raises(wcapi, reporter):
    wcapi.get.return_value = response({"message": "Unauthorized"}, status_code=401)
    client = WooCommerceCatalogClient(wcapi, reporter)

    with pytest.raises(WooCommerceAPIError) as exc_info:
        client.fetch_all_products()
    assert exc_info.value.status_code == 401


def test_upload_batch_parses_confirmations_and_item_errors(wcapi, reporter):
    wcapi.post.return_value = response({
        "create": [
            remote(10, "NEW1"),
            {"id": 0, "error": {"code": "product_invalid_sku", "message": "Invalid or duplicated SKU."}},
        ],
        "update": [remote(7, "A100")],
    })
    batch = ProductBatch(
        create=[ProductCreate(sku="NEW1"), ProductCreate(sku="DUP")],
        update=[ProductUpdate(remote_id=7, stock_quantity=1)],
    )
    client = WooCommerceCatalogClient(wcapi, reporter)

    result = client.upload_batch(batch)

    path, payload = wcapi.post.call_args.args
    assert path == "products/batch"
    assert payload["update"] == [{"id": 7, "stock_quantity": 1}]
    assert [p.remote_id for p in result.create] == [10]
    assert [p.sku for p in result.update] == ["A100"]
    assert result.rejected[0].sku == "DUP"
    assert result.rejected[0].code == "product_invalid_sku"


def test_upload_batch_refuses_oversized_side(wcapi, reporter):
    client = WooCommerceCatalogClient(wcapi, reporter)
    batch = ProductBatch(create=[ProductCreate(sku=str(i)) for i in range(101)])

    with pytest.raises(ValueError):
        client.upload_batch(batch)
    wcapi.post.assert_not_called()


def test_update_product_puts_changed_fields(wcapi, reporter):
    wcapi.put.return_value = response(remote(7, "A100"))
    client = WooCommerceCatalogClient(wcapi, reporter)

    product = client.update_product(ProductUpdate(remote_id=7, stock_quantity=1))

    wcapi.put.assert_called_once_with("products/7", {"id": 7, "stock_quantity": 1})
    assert product.remote_id == 7


@pytest.mark.parametrize("payload, status_code, expected", [
    ([{"id": "general"}], 200, True),
    ([], 200, False),
    ({"code": "woocommerce_rest_cannot_view"}, 403, False),
])
def test_probe_connectivity(wcapi, reporter, payload, status_code, expected):
    wcapi.get.return_value = response(payload, status_code)

    assert WooCommerceCatalogClient(wcapi, reporter).probe_connectivity() is expected
