"""Shared seeding and fake transports for the test modules."""

from storefront.db import SessionLocal, init_db
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.product_size import ProductSize


def reset_catalog():
    """
    Fresh schema plus a small clothing catalog. Returns the ids:
    {"product": .., "other_product": .., "categories": {slug: id}}
    """
    init_db(reset=True)
    db = SessionLocal()
    try:
        shirt = Product(
            name="Linen Shirt",
            slug="linen-shirt",
            description="Loose fit linen shirt",
            price=199.9,
            original_price=249.9,
            stock_quantity=12,
            is_active=True,
        )
        dress = Product(name="Midi Dress", slug="midi-dress", price=329.0, stock_quantity=3)
        db.add_all([shirt, dress])
        cats = [
            Category(name="Shirts", slug="shirts"),
            Category(name="Summer", slug="summer"),
            Category(name="Sale", slug="sale"),
            Category(name="Dresses", slug="dresses"),
        ]
        db.add_all(cats)
        db.flush()
        shirt.categories.append(cats[1])  # Summer
        shirt.categories.append(cats[2])  # Sale
        db.add(ProductSize(product_id=shirt.id, size="P", stock_quantity=4, is_active=True))
        db.add(ProductSize(product_id=shirt.id, size="M", stock_quantity=0, is_active=False))
        db.commit()
        return {
            "product": shirt.id,
            "other_product": dress.id,
            "categories": {c.slug: c.id for c in cats},
        }
    finally:
        db.close()


class FakeResponse:
    def __init__(self, body):
        self._body = body

    def json(self):
        return self._body


class RecordingSession:
    """Delegates to a real session (e.g. TestClient) and records every call."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def _do(self, method, url, **kwargs):
        self.calls.append((method.upper(), url, kwargs.get("params"), kwargs.get("json")))
        return getattr(self.inner, method)(url, **kwargs)

    def get(self, url, **kwargs):
        return self._do("get", url, **kwargs)

    def post(self, url, **kwargs):
        return self._do("post", url, **kwargs)

    def put(self, url, **kwargs):
        return self._do("put", url, **kwargs)

    def patch(self, url, **kwargs):
        return self._do("patch", url, **kwargs)

    def delete(self, url, **kwargs):
        return self._do("delete", url, **kwargs)

    def writes(self):
        return [c for c in self.calls if c[0] != "GET"]


class FailingSession(RecordingSession):
    """Raises `error` for calls whose (method, path suffix) is listed; delegates the rest."""

    def __init__(self, inner, error, fail_on):
        super().__init__(inner)
        self.error = error
        self.fail_on = fail_on

    def _do(self, method, url, **kwargs):
        for m, suffix in self.fail_on:
            if m == method.upper() and url.endswith(suffix):
                self.calls.append((method.upper(), url, kwargs.get("params"), kwargs.get("json")))
                raise self.error
        return super()._do(method, url, **kwargs)


def seed_logs(entries):
    """entries: iterables of (level, message, age: timedelta | None, extra kwargs)."""
    from datetime import datetime, timezone

    from storefront.models.system_log import SystemLog

    now = datetime.now(timezone.utc)
    db = SessionLocal()
    try:
        for level, message, age, extra in entries:
            created = now - age if age is not None else now
            db.add(SystemLog(level=level, message=message, created_at=created, **extra))
        db.commit()
    finally:
        db.close()
