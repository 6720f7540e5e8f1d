import pytest
from fastapi.testclient import TestClient

from storefront.adapters.blob_storage import (
    BlobStorage,
    LocalBlobStore,
    StorageError,
    with_random_suffix,
)
from storefront.main import app
from support import reset_catalog

client = TestClient(app)
ids = {}


def setup_module(module):
    ids.update(reset_catalog())


class BrokenBackend:
    def put(self, pathname, data, content_type):
        raise OSError("disk full")

    def head(self, pathname):
        raise OSError("unreachable")

    def delete(self, pathname):
        raise OSError("unreachable")

    def list(self, prefix):
        raise OSError("unreachable")

    def ping(self):
        raise OSError("unreachable")


def test_random_suffix_keeps_directory_and_extension():
    out = with_random_suffix("products/1/photo.jpg")
    assert out.startswith("products/1/photo-")
    assert out.endswith(".jpg")
    assert len(out) == len("products/1/photo.jpg") + 9


def test_storage_roundtrip(tmp_path):
    storage = BlobStorage(LocalBlobStore(str(tmp_path), "http://cdn.local"))
    result = storage.upload(b"abc", "products/7/front.png", add_random_suffix=False)
    assert result.pathname == "products/7/front.png"
    assert result.url == "http://cdn.local/products/7/front.png"
    assert result.size == 3
    assert set(result.to_dict()) == {"url", "pathname", "size", "uploadedAt"}

    assert storage.exists("products/7/front.png")
    assert storage.list("products/7/") == ["products/7/front.png"]
    assert storage.delete("products/7/front.png") is True
    assert storage.exists("products/7/front.png") is False
    assert storage.delete("products/7/front.png") is False


def test_storage_rejects_path_escape(tmp_path):
    storage = BlobStorage(LocalBlobStore(str(tmp_path), "http://cdn.local"))
    with pytest.raises(StorageError):
        storage.upload(b"x", "../outside.txt", add_random_suffix=False)


def test_backend_failures_are_contained():
    storage = BlobStorage(BrokenBackend())
    with pytest.raises(StorageError) as exc:
        storage.upload(b"data", "products/1/a.jpg")
    assert str(exc.value) == "Failed to upload file"
    assert storage.delete("products/1/a.jpg") is False
    assert storage.exists("products/1/a.jpg") is False
    assert storage.list("products/") == []
    assert storage.health_check() is False


def test_upload_list_and_delete_through_api():
    pid = ids["product"]
    base = f"/api/admin/products/{pid}/media"
    res = client.post(base, files={"file": ("front.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")})
    assert res.status_code == 200, res.text
    data = res.json()["data"]
    assert data["pathname"].startswith(f"products/{pid}/front-")
    assert data["pathname"].endswith(".jpg")
    assert data["size"] == len(b"\xff\xd8\xff fake jpeg")

    listed = client.get(base).json()["data"]["files"]
    assert data["pathname"] in listed

    served = client.get(f"/uploads/{data['pathname']}")
    assert served.status_code == 200
    assert served.content == b"\xff\xd8\xff fake jpeg"

    res = client.delete(base, params={"pathname": data["pathname"]})
    assert res.status_code == 200
    assert data["pathname"] not in client.get(base).json()["data"]["files"]

    res = client.delete(base, params={"pathname": data["pathname"]})
    assert res.status_code == 404


def test_upload_rejects_unsupported_type():
    res = client.post(
        f"/api/admin/products/{ids['product']}/media",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Unsupported file type: text/plain"


def test_delete_outside_product_prefix_is_400():
    res = client.delete(
        f"/api/admin/products/{ids['product']}/media",
        params={"pathname": f"products/{ids['other_product']}/x.jpg"},
    )
    assert res.status_code == 400


def test_upload_filename_cannot_leave_product_prefix():
    pid, other = ids["product"], ids["other_product"]
    res = client.post(
        f"/api/admin/products/{pid}/media",
        files={"file": ("../2/planted.jpg", b"jpeg bytes", "image/jpeg")},
    )
    assert res.status_code == 200, res.text
    assert res.json()["data"]["pathname"].startswith(f"products/{pid}/planted-")
    assert client.get(f"/api/admin/products/{other}/media").json()["data"]["files"] == []


def test_delete_with_relative_segments_is_rejected():
    pid, other = ids["product"], ids["other_product"]
    res = client.post(
        f"/api/admin/products/{other}/media",
        files={"file": ("back.jpg", b"jpeg bytes", "image/jpeg")},
    )
    victim = res.json()["data"]["pathname"]
    sneaky = f"products/{pid}/../{victim.split('/', 1)[1]}"

    res = client.delete(f"/api/admin/products/{pid}/media", params={"pathname": sneaky})
    assert res.status_code == 400
    assert victim in client.get(f"/api/admin/products/{other}/media").json()["data"]["files"]


def test_storage_refuses_relative_segments(tmp_path):
    storage = BlobStorage(LocalBlobStore(str(tmp_path), "http://cdn.local"))
    storage.upload(b"x", "products/2/a.jpg", add_random_suffix=False)
    assert storage.delete("products/1/../2/a.jpg") is False
    assert storage.exists("products/2/a.jpg")
    with pytest.raises(StorageError):
        storage.upload(b"x", "products/1/../2/b.jpg", add_random_suffix=False)
