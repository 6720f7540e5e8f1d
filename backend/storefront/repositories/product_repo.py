from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.models.product import Product


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def list(
        self, q: Optional[str] = None, page: int = 1, size: int = 20
    ) -> Tuple[List[Product], int]:
        query = self.db.query(Product)
        if q:
            like = f"%{q}%"
            query = query.filter(
                (Product.name.ilike(like)) | (Product.description.ilike(like))
            )
        total = query.with_entities(func.count()).scalar() or 0
        items = query.order_by(Product.name).offset((page - 1) * size).limit(size).all()
        return items, total

    def apply_changes(self, product: Product, changes: dict) -> Product:
        for field, value in changes.items():
            setattr(product, field, value)
        self.db.flush()
        return product

    def create(
        self,
        name: str,
        price: float,
        stock_quantity: int = 0,
        description: str = None,
        original_price: float = None,
        slug: str = None,
        is_active: bool = True,
    ) -> Product:
        p = Product(
            name=name,
            slug=slug,
            price=price,
            original_price=original_price,
            stock_quantity=stock_quantity,
            description=description,
            is_active=is_active,
        )
        self.db.add(p)
        self.db.flush()
        return p
