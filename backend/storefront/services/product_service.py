import logging
from typing import Optional

from sqlalchemy.orm import Session

from storefront.models.product import Product
from storefront.repositories.product_repo import ProductRepository
from storefront.services.audit import AuditTrail

logger = logging.getLogger(__name__)

# columns a PATCH may touch; original_price is the only nullable one
EDITABLE_FIELDS = ("name", "description", "price", "original_price", "stock_quantity", "is_active")
NULLABLE_FIELDS = ("description", "original_price")


class ProductServiceException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class ProductService:
    def __init__(self, db: Session, actor: Optional[dict] = None):
        self.db = db
        self.repo = ProductRepository(db)
        self.audit = AuditTrail(db, actor)

    def get(self, product_id: int) -> Product:
        p = self.repo.get(product_id)
        if not p:
            raise ProductServiceException("Product not found", status_code=404)
        return p

    def list(self, search: Optional[str] = None, page: int = 1, size: int = 20):
        return self.repo.list(q=search, page=page, size=size)

    def update(self, product_id: int, changes: dict) -> Product:
        """
        Partial update. `changes` holds only the keys the caller sent;
        an explicit None clears a nullable column and is ignored otherwise.
        """
        p = self.get(product_id)
        applied = {}
        for field, value in changes.items():
            if field not in EDITABLE_FIELDS:
                continue
            if value is None and field not in NULLABLE_FIELDS:
                continue
            applied[field] = value
        if not applied:
            return p

        self.repo.apply_changes(p, applied)
        self.audit.write(
            "info",
            f"Product {p.id} updated",
            "products",
            product_id=p.id,
            fields=sorted(applied.keys()),
        )
        self.db.commit()
        self.db.refresh(p)
        logger.info("product %s updated fields=%s", p.id, sorted(applied.keys()))
        return p
