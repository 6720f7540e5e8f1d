# backend/storefront/schemas/product_schema.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.models.product_size import SIZE_LABEL_MAX_LENGTH


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    price: float
    original_price: Optional[float] = None
    stock_quantity: int
    is_active: bool


class ProductUpdate(BaseModel):
    """PATCH body: every field optional, only the ones sent are applied."""

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Product name cannot be empty")
        return v


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    slug: str


class AvailableCategoryOut(CategoryOut):
    is_associated: bool = False


class CategoryLink(BaseModel):
    categoryId: int


class ProductSizeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    size: str
    stock_quantity: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductSizeCreate(BaseModel):
    size: str = Field(..., max_length=SIZE_LABEL_MAX_LENGTH)
    stock_quantity: int = Field(0, ge=0)

    @field_validator("size", mode="before")
    @classmethod
    def size_not_blank(cls, v):
        # trim before the length check
        if not isinstance(v, str):
            return v
        v = v.strip()
        if not v:
            raise ValueError("Size is required")
        return v


class ProductSizeUpdate(BaseModel):
    id: Optional[int] = None
    original_size: Optional[str] = None
    size: str = Field(..., max_length=SIZE_LABEL_MAX_LENGTH)
    stock_quantity: int = Field(..., ge=0)
    is_active: bool = True

    @field_validator("size", mode="before")
    @classmethod
    def size_not_blank(cls, v):
        # trim before the length check
        if not isinstance(v, str):
            return v
        v = v.strip()
        if not v:
            raise ValueError("Size is required")
        return v


class LogEntryOut(BaseModel):
    """Wire shape of a log row (camelCase, as the log viewer expects)."""

    id: str
    level: str
    message: str
    context: Optional[str] = None
    userId: Optional[str] = None
    userName: Optional[str] = None
    ip: Optional[str] = None
    userAgent: Optional[str] = None
    createdAt: datetime
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_row(cls, row) -> "LogEntryOut":
        return cls(
            id=str(row.id),
            level=row.level,
            message=row.message,
            context=row.context,
            userId=row.user_id,
            userName=row.user_name,
            ip=row.ip,
            userAgent=row.user_agent,
            createdAt=row.created_at,
            metadata=row.details or {},
        )


class LogStats(BaseModel):
    total: int = 0
    error: int = 0
    warning: int = 0
    info: int = 0
    success: int = 0
    debug: int = 0


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class LogPage(BaseModel):
    logs: List[LogEntryOut]
    pagination: Pagination
    stats: LogStats
