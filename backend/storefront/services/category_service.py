import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from storefront.models.category import Category
from storefront.repositories.category_repo import CategoryRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.services.audit import AuditTrail

logger = logging.getLogger(__name__)


class CategoryServiceException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class CategoryService:
    def __init__(self, db: Session, actor: Optional[dict] = None):
        self.db = db
        self.repo = CategoryRepository(db)
        self.products = ProductRepository(db)
        self.audit = AuditTrail(db, actor)

    def _require_product(self, product_id: int):
        p = self.products.get(product_id)
        if not p:
            raise CategoryServiceException("Product not found", status_code=404)
        return p

    def list_all(self) -> List[Category]:
        return self.repo.list()

    def list_for_product(self, product_id: int) -> List[Category]:
        self._require_product(product_id)
        return self.repo.list_for_product(product_id)

    def available_for_product(self, product_id: int, search: Optional[str] = None) -> List[Dict]:
        """Every active category matching `search`, flagged with is_associated."""
        self._require_product(product_id)
        associated = self.repo.associated_ids(product_id)
        return [
            {"id": c.id, "name": c.name, "slug": c.slug, "is_associated": c.id in associated}
            for c in self.repo.list(search=search)
        ]

    def associate(self, product_id: int, category_id: int) -> bool:
        """Idempotent: returns False (and writes nothing) when already associated."""
        self._require_product(product_id)
        category = self.repo.get(category_id)
        if not category:
            raise CategoryServiceException("Category not found", status_code=404)
        created = self.repo.link(product_id, category_id)
        if created:
            self.audit.write(
                "info",
                f"Category '{category.name}' added to product {product_id}",
                "product_categories",
                product_id=product_id,
                category_id=category_id,
            )
            self.db.commit()
            logger.info("product %s linked to category %s", product_id, category_id)
        return created

    def dissociate(self, product_id: int, category_id: int) -> bool:
        """Idempotent: returns False when there was nothing to remove."""
        self._require_product(product_id)
        removed = self.repo.unlink(product_id, category_id)
        if removed:
            self.audit.write(
                "info",
                f"Category {category_id} removed from product {product_id}",
                "product_categories",
                product_id=product_id,
                category_id=category_id,
            )
            self.db.commit()
            logger.info("product %s unlinked from category %s", product_id, category_id)
        return removed
