from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.models.product_size import ProductSize


class ProductSizeRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_for_product(self, product_id: int) -> List[ProductSize]:
        return (
            self.db.query(ProductSize)
            .filter(ProductSize.product_id == product_id)
            .order_by(ProductSize.id)
            .all()
        )

    def get_by_id(self, product_id: int, size_id: int) -> Optional[ProductSize]:
        return (
            self.db.query(ProductSize)
            .filter(ProductSize.product_id == product_id, ProductSize.id == size_id)
            .first()
        )

    def get_by_label(self, product_id: int, size: str) -> Optional[ProductSize]:
        return (
            self.db.query(ProductSize)
            .filter(ProductSize.product_id == product_id, ProductSize.size == size)
            .first()
        )

    def add(self, product_id: int, size: str, stock_quantity: int) -> ProductSize:
        row = ProductSize(
            product_id=product_id,
            size=size,
            stock_quantity=stock_quantity,
            is_active=True,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def remove(self, row: ProductSize):
        self.db.delete(row)
        self.db.flush()
