from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_actor, ok
from storefront.db import get_db
from storefront.schemas.product_schema import ProductOut, ProductUpdate
from storefront.services.product_service import ProductService, ProductServiceException

router = APIRouter(prefix="/api/admin/products", tags=["products"])


@router.get("", summary="List products")
def list_products(
    search: Optional[str] = Query(None, description="search term"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    svc = ProductService(db)
    items, total = svc.list(search=search, page=page, size=limit)
    return ok(
        {
            "products": [ProductOut.model_validate(p).model_dump() for p in items],
            "total": total,
        }
    )


@router.get("/{product_id}", summary="Get product")
def get_product(product_id: int, db: Session = Depends(get_db)):
    svc = ProductService(db)
    try:
        p = svc.get(product_id)
    except ProductServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return ok(product=ProductOut.model_validate(p).model_dump())


@router.patch("/{product_id}", summary="Update product scalar fields")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    actor: dict = Depends(get_actor),
):
    svc = ProductService(db, actor=actor)
    try:
        p = svc.update(product_id, payload.model_dump(exclude_unset=True))
    except ProductServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return ok(ProductOut.model_validate(p).model_dump())
