from fastapi.testclient import TestClient

from storefront.db import SessionLocal
from storefront.main import app
from storefront.models.system_log import SystemLog
from support import reset_catalog

client = TestClient(app)
ids = {}


def setup_module(module):
    ids.update(reset_catalog())


def test_get_product_wraps_in_product_key():
    res = client.get(f"/api/admin/products/{ids['product']}")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    p = body["product"]
    assert p["name"] == "Linen Shirt"
    assert p["price"] == 199.9
    assert p["original_price"] == 249.9
    assert p["is_active"] is True


def test_get_missing_product_is_404_envelope():
    res = client.get("/api/admin/products/99999")
    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Product not found"}


def test_list_products_with_search():
    res = client.get("/api/admin/products", params={"search": "dress"})
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["total"] == 1
    assert [p["name"] for p in data["products"]] == ["Midi Dress"]


def test_patch_updates_only_sent_fields_and_audits():
    pid = ids["product"]
    res = client.patch(
        f"/api/admin/products/{pid}",
        json={"price": 179.5, "stock_quantity": 20},
        headers={"X-Actor": "maria"},
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["price"] == 179.5
    assert data["stock_quantity"] == 20
    assert data["name"] == "Linen Shirt"

    db = SessionLocal()
    try:
        row = (
            db.query(SystemLog)
            .filter(SystemLog.context == "products")
            .order_by(SystemLog.id.desc())
            .first()
        )
        assert row is not None
        assert row.user_name == "maria"
        assert row.details["fields"] == ["price", "stock_quantity"]
    finally:
        db.close()


def test_patch_clears_original_price_with_null():
    pid = ids["product"]
    res = client.patch(f"/api/admin/products/{pid}", json={"original_price": None})
    assert res.status_code == 200
    assert res.json()["data"]["original_price"] is None


def test_patch_rejects_negative_price():
    res = client.patch(f"/api/admin/products/{ids['product']}", json={"price": -1})
    assert res.status_code == 422
    body = res.json()
    assert body["success"] is False
    assert body["error"].startswith("price:")


def test_patch_rejects_blank_name():
    res = client.patch(f"/api/admin/products/{ids['product']}", json={"name": "   "})
    assert res.status_code == 422
    assert res.json()["success"] is False
