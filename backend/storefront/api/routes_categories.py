from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_actor, ok
from storefront.db import get_db
from storefront.schemas.product_schema import AvailableCategoryOut, CategoryLink, CategoryOut
from storefront.services.category_service import CategoryService, CategoryServiceException

router = APIRouter(prefix="/api/admin", tags=["categories"])


@router.get("/categories", summary="List all categories")
def list_categories(db: Session = Depends(get_db)):
    svc = CategoryService(db)
    return ok([CategoryOut.model_validate(c).model_dump() for c in svc.list_all()])


@router.get("/products/{product_id}/categories", summary="Categories associated with a product")
def product_categories(product_id: int, db: Session = Depends(get_db)):
    svc = CategoryService(db)
    try:
        cats = svc.list_for_product(product_id)
    except CategoryServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return ok([CategoryOut.model_validate(c).model_dump() for c in cats])


@router.post("/products/{product_id}/categories", summary="Associate a category (idempotent)")
def add_product_category(
    product_id: int,
    payload: CategoryLink,
    db: Session = Depends(get_db),
    actor: dict = Depends(get_actor),
):
    svc = CategoryService(db, actor=actor)
    try:
        created = svc.associate(product_id, payload.categoryId)
    except CategoryServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return ok({"productId": product_id, "categoryId": payload.categoryId, "created": created})


@router.delete("/products/{product_id}/categories", summary="Remove a category association (idempotent)")
def remove_product_category(
    product_id: int,
    categoryId: int = Query(...),
    db: Session = Depends(get_db),
    actor: dict = Depends(get_actor),
):
    svc = CategoryService(db, actor=actor)
    try:
        removed = svc.dissociate(product_id, categoryId)
    except CategoryServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return ok({"productId": product_id, "categoryId": categoryId, "removed": removed})


@router.get(
    "/products/{product_id}/available-categories",
    summary="All categories flagged with is_associated for a product",
)
def available_categories(
    product_id: int,
    search: Optional[str] = Query(None, description="filter by name or slug"),
    db: Session = Depends(get_db),
):
    svc = CategoryService(db)
    try:
        cats = svc.available_for_product(product_id, search=(search or "").strip() or None)
    except CategoryServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return ok({"categories": [AvailableCategoryOut(**c).model_dump() for c in cats]})
