from fastapi.testclient import TestClient

from storefront.main import app
from support import reset_catalog

client = TestClient(app)
ids = {}


def setup_module(module):
    ids.update(reset_catalog())


def _path(pid=None):
    return f"/api/admin/products/{pid or ids['product']}/sizes"


def _labels(body):
    return [s["size"] for s in body["data"]["sizes"]]


def test_list_sizes():
    res = client.get(_path())
    assert res.status_code == 200
    body = res.json()
    assert _labels(body) == ["P", "M"]
    m = body["data"]["sizes"][1]
    assert m["stock_quantity"] == 0
    assert m["is_active"] is False


def test_list_sizes_of_missing_product():
    res = client.get(_path(9999))
    assert res.status_code == 404
    assert res.json()["error"] == "Product not found"


def test_add_size_returns_201_and_full_list():
    res = client.post(_path(), json={"size": " G ", "stock_quantity": 5})
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["data"]["size"]["size"] == "G"
    assert body["data"]["size"]["is_active"] is True
    assert _labels(body) == ["P", "M", "G"]


def test_add_duplicate_size_is_409():
    res = client.post(_path(), json={"size": "P", "stock_quantity": 1})
    assert res.status_code == 409
    assert res.json() == {"success": False, "error": "Size 'P' already exists for this product"}


def test_add_size_validation():
    res = client.post(_path(), json={"size": "   ", "stock_quantity": 1})
    assert res.status_code == 422
    res = client.post(_path(), json={"size": "XL", "stock_quantity": -2})
    assert res.status_code == 422
    res = client.post(_path(), json={"size": "X" * 11, "stock_quantity": 1})
    assert res.status_code == 422
    assert res.json()["error"].startswith("size:")


def test_update_stock_by_label():
    res = client.put(_path(), json={"size": "P", "stock_quantity": 9, "is_active": True})
    assert res.status_code == 200
    row = res.json()["data"]["size"]
    assert row["size"] == "P"
    assert row["stock_quantity"] == 9


def test_rename_by_id_and_original_size():
    sizes = client.get(_path()).json()["data"]["sizes"]
    g = next(s for s in sizes if s["size"] == "G")
    res = client.put(
        _path(),
        json={
            "id": g["id"],
            "original_size": "G",
            "size": "GG",
            "stock_quantity": 2,
            "is_active": False,
        },
    )
    assert res.status_code == 200
    assert res.json()["data"]["size"]["id"] == g["id"]
    assert _labels(res.json()) == ["P", "M", "GG"]


def test_rename_onto_existing_label_is_409():
    res = client.put(
        _path(), json={"original_size": "GG", "size": "P", "stock_quantity": 2, "is_active": True}
    )
    assert res.status_code == 409
    assert res.json()["error"] == "Size 'P' already exists for this product"


def test_update_unknown_size_is_404():
    res = client.put(_path(), json={"size": "XXL", "stock_quantity": 1, "is_active": True})
    assert res.status_code == 404
    assert res.json()["error"] == "Size not found"


def test_delete_by_label():
    res = client.delete(_path(), params={"size": "GG"})
    assert res.status_code == 200
    assert _labels(res.json()) == ["P", "M"]

    res = client.delete(_path(), params={"size": "GG"})
    assert res.status_code == 404
    assert res.json()["success"] is False


def test_sizes_are_scoped_per_product():
    res = client.post(_path(ids["other_product"]), json={"size": "P", "stock_quantity": 1})
    assert res.status_code == 201
    assert _labels(res.json()) == ["P"]


def test_label_is_trimmed_before_length_check():
    res = client.post(_path(), json={"size": " XL        ", "stock_quantity": 1})
    assert res.status_code == 201
    assert res.json()["data"]["size"]["size"] == "XL"

    res = client.put(_path(), json={"size": "  XL          ", "stock_quantity": 3, "is_active": True})
    assert res.status_code == 200
    assert res.json()["data"]["size"]["stock_quantity"] == 3
