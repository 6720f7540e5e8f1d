from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from storefront.api.deps import get_actor, ok
from storefront.db import get_db
from storefront.schemas.product_schema import ProductSizeCreate, ProductSizeOut, ProductSizeUpdate
from storefront.services.size_service import ProductSizeService, SizeServiceException

router = APIRouter(prefix="/api/admin/products/{product_id}/sizes", tags=["sizes"])


def _sizes_payload(svc: ProductSizeService, product_id: int) -> dict:
    return {
        "sizes": [
            ProductSizeOut.model_validate(s).model_dump(mode="json")
            for s in svc.list(product_id)
        ]
    }


@router.get("", summary="List size variants of a product")
def list_sizes(product_id: int, db: Session = Depends(get_db)):
    svc = ProductSizeService(db)
    try:
        return ok(_sizes_payload(svc, product_id))
    except SizeServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("", summary="Add a size", status_code=status.HTTP_201_CREATED)
def add_size(
    product_id: int,
    payload: ProductSizeCreate,
    db: Session = Depends(get_db),
    actor: dict = Depends(get_actor),
):
    svc = ProductSizeService(db, actor=actor)
    try:
        row = svc.add(product_id, payload.size, payload.stock_quantity)
        return ok(
            {
                "size": ProductSizeOut.model_validate(row).model_dump(mode="json"),
                **_sizes_payload(svc, product_id),
            }
        )
    except SizeServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("", summary="Update a size (label, stock, active flag)")
def update_size(
    product_id: int,
    payload: ProductSizeUpdate,
    db: Session = Depends(get_db),
    actor: dict = Depends(get_actor),
):
    """
    payload: { "id": 3, "original_size": "M", "size": "G", "stock_quantity": 4, "is_active": true }
    id and original_size are optional; without them the row is looked up by size.
    """
    svc = ProductSizeService(db, actor=actor)
    try:
        row = svc.update(
            product_id,
            payload.size,
            payload.stock_quantity,
            is_active=payload.is_active,
            size_id=payload.id,
            original_size=payload.original_size,
        )
        return ok(
            {
                "size": ProductSizeOut.model_validate(row).model_dump(mode="json"),
                **_sizes_payload(svc, product_id),
            }
        )
    except SizeServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("", summary="Delete a size by its label")
def delete_size(
    product_id: int,
    size: str = Query(..., description="size label (natural key)"),
    db: Session = Depends(get_db),
    actor: dict = Depends(get_actor),
):
    svc = ProductSizeService(db, actor=actor)
    try:
        svc.delete(product_id, size)
        return ok(_sizes_payload(svc, product_id))
    except SizeServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
