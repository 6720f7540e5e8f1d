import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.models.product_size import SIZE_LABEL_MAX_LENGTH, ProductSize
from storefront.repositories.product_repo import ProductRepository
from storefront.repositories.size_repo import ProductSizeRepository
from storefront.services.audit import AuditTrail

logger = logging.getLogger(__name__)


class SizeServiceException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def duplicate_size_message(size: str) -> str:
    return f"Size '{size}' already exists for this product"


class ProductSizeService:
    """Size/stock variants of one product, keyed by (product_id, size label)."""

    def __init__(self, db: Session, actor: Optional[dict] = None):
        self.db = db
        self.repo = ProductSizeRepository(db)
        self.products = ProductRepository(db)
        self.audit = AuditTrail(db, actor)

    def _require_product(self, product_id: int):
        p = self.products.get(product_id)
        if not p:
            raise SizeServiceException("Product not found", status_code=404)
        return p

    @staticmethod
    def _validate(size: str, stock_quantity: int) -> str:
        label = (size or "").strip()
        if not label:
            raise SizeServiceException("Size is required")
        if len(label) > SIZE_LABEL_MAX_LENGTH:
            raise SizeServiceException(
                f"Size must be at most {SIZE_LABEL_MAX_LENGTH} characters"
            )
        if stock_quantity is None or stock_quantity < 0:
            raise SizeServiceException("Stock must be greater than or equal to zero")
        return label

    def list(self, product_id: int) -> List[ProductSize]:
        self._require_product(product_id)
        return self.repo.list_for_product(product_id)

    def add(self, product_id: int, size: str, stock_quantity: int) -> ProductSize:
        self._require_product(product_id)
        label = self._validate(size, stock_quantity)
        if self.repo.get_by_label(product_id, label):
            raise SizeServiceException(duplicate_size_message(label), status_code=409)
        try:
            row = self.repo.add(product_id, label, stock_quantity)
            self.audit.write(
                "success",
                f"Size {label} added to product {product_id}",
                "product_sizes",
                product_id=product_id,
                size=label,
                stock_quantity=stock_quantity,
            )
            self.db.commit()
        except IntegrityError:
            # concurrent add of the same label won the unique constraint
            self.db.rollback()
            raise SizeServiceException(duplicate_size_message(label), status_code=409)
        self.db.refresh(row)
        logger.info("size %s added to product %s (stock=%s)", label, product_id, stock_quantity)
        return row

    def _resolve(
        self,
        product_id: int,
        size_id: Optional[int],
        original_size: Optional[str],
        size: str,
    ) -> Optional[ProductSize]:
        """Find the row being edited: by id, then by original label, then by label."""
        if size_id is not None:
            row = self.repo.get_by_id(product_id, size_id)
            if row:
                return row
        if original_size:
            row = self.repo.get_by_label(product_id, original_size.strip())
            if row:
                return row
        return self.repo.get_by_label(product_id, size)

    def update(
        self,
        product_id: int,
        size: str,
        stock_quantity: int,
        is_active: bool = True,
        size_id: Optional[int] = None,
        original_size: Optional[str] = None,
    ) -> ProductSize:
        self._require_product(product_id)
        label = self._validate(size, stock_quantity)
        row = self._resolve(product_id, size_id, original_size, label)
        if not row:
            raise SizeServiceException("Size not found", status_code=404)

        previous = {"size": row.size, "stock_quantity": row.stock_quantity, "is_active": row.is_active}
        if label != row.size:
            clash = self.repo.get_by_label(product_id, label)
            if clash and clash.id != row.id:
                raise SizeServiceException(duplicate_size_message(label), status_code=409)
        try:
            row.size = label
            row.stock_quantity = stock_quantity
            row.is_active = bool(is_active)
            self.db.flush()
            self.audit.write(
                "info",
                f"Size {label} of product {product_id} updated",
                "product_sizes",
                product_id=product_id,
                size_id=row.id,
                before=previous,
                after={"size": label, "stock_quantity": stock_quantity, "is_active": bool(is_active)},
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise SizeServiceException(duplicate_size_message(label), status_code=409)
        self.db.refresh(row)
        return row

    def delete(self, product_id: int, size: str) -> None:
        self._require_product(product_id)
        label = (size or "").strip()
        if not label:
            raise SizeServiceException("Size is required")
        row = self.repo.get_by_label(product_id, label)
        if not row:
            raise SizeServiceException("Size not found", status_code=404)
        self.repo.remove(row)
        self.audit.write(
            "warning",
            f"Size {label} removed from product {product_id}",
            "product_sizes",
            product_id=product_id,
            size=label,
        )
        self.db.commit()
        logger.info("size %s removed from product %s", label, product_id)
