from typing import List, Optional, Set

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from storefront.models.category import Category, product_categories


class CategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, category_id: int) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def get_by_slug(self, slug: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.slug == slug).first()

    def list(self, search: Optional[str] = None) -> List[Category]:
        query = self.db.query(Category).filter(Category.is_active == True)
        if search:
            like = f"%{search}%"
            query = query.filter((Category.name.ilike(like)) | (Category.slug.ilike(like)))
        return query.order_by(Category.name).all()

    def associated_ids(self, product_id: int) -> Set[int]:
        rows = self.db.execute(
            select(product_categories.c.category_id).where(
                product_categories.c.product_id == product_id
            )
        )
        return {r[0] for r in rows}

    def list_for_product(self, product_id: int) -> List[Category]:
        return (
            self.db.query(Category)
            .join(product_categories, product_categories.c.category_id == Category.id)
            .filter(product_categories.c.product_id == product_id)
            .order_by(Category.name)
            .all()
        )

    def link(self, product_id: int, category_id: int) -> bool:
        """Insert the association row. Returns False when it already existed."""
        if category_id in self.associated_ids(product_id):
            return False
        self.db.execute(
            insert(product_categories).values(product_id=product_id, category_id=category_id)
        )
        self.db.flush()
        return True

    def unlink(self, product_id: int, category_id: int) -> bool:
        """Delete the association row. Returns False when there was none."""
        result = self.db.execute(
            delete(product_categories).where(
                product_categories.c.product_id == product_id,
                product_categories.c.category_id == category_id,
            )
        )
        self.db.flush()
        return (result.rowcount or 0) > 0

    def create(self, name: str, slug: str) -> Category:
        c = Category(name=name, slug=slug)
        self.db.add(c)
        self.db.flush()
        return c
