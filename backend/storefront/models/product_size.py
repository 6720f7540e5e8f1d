from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from storefront.db import Base

SIZE_LABEL_MAX_LENGTH = 10


class ProductSize(Base):
    __tablename__ = "product_sizes"

    __table_args__ = (
        UniqueConstraint("product_id", "size", name="uq_product_sizes_product_size"),
        CheckConstraint("stock_quantity >= 0", name="ck_product_sizes_stock_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    size = Column(String(SIZE_LABEL_MAX_LENGTH), nullable=False)  # free text: 38, P, M, G...
    stock_quantity = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    product = relationship("Product", back_populates="sizes")

    def is_available(self) -> bool:
        return bool(self.is_active) and (self.stock_quantity or 0) > 0
