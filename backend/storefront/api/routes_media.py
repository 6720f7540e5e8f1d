import logging
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from storefront.adapters.blob_storage import BlobStorage, StorageError
from storefront.api.deps import get_actor, get_storage, ok
from storefront.db import get_db
from storefront.services.audit import AuditTrail
from storefront.services.product_service import ProductService, ProductServiceException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/products/{product_id}/media", tags=["media"])

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif", "video/mp4"}


def _prefix(product_id: int) -> str:
    return f"products/{product_id}/"


def _owned_pathname(product_id: int, pathname: str) -> bool:
    """Inside this product's prefix, with no relative segments."""
    parts = PurePosixPath(pathname).parts
    return pathname.startswith(_prefix(product_id)) and ".." not in parts


def _require_product(product_id: int, db: Session):
    try:
        ProductService(db).get(product_id)
    except ProductServiceException as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("", summary="Upload a product image or video")
def upload_media(
    product_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
    actor: dict = Depends(get_actor),
):
    _require_product(product_id, db)
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {file.content_type}")
    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")
    try:
        result = storage.upload(
            content,
            _prefix(product_id) + (PurePosixPath(file.filename or "").name or "upload"),
            content_type=file.content_type,
        )
    except StorageError as e:
        raise HTTPException(status_code=502, detail=str(e))

    AuditTrail(db, actor).write(
        "success",
        f"Media {result.pathname} uploaded for product {product_id}",
        "media",
        product_id=product_id,
        pathname=result.pathname,
        size=result.size,
    )
    db.commit()
    return ok(result.to_dict())


@router.get("", summary="List stored media of a product")
def list_media(
    product_id: int,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
):
    _require_product(product_id, db)
    return ok({"files": storage.list(_prefix(product_id))})


@router.delete("", summary="Delete a stored media file")
def delete_media(
    product_id: int,
    pathname: str = Query(...),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_storage),
    actor: dict = Depends(get_actor),
):
    _require_product(product_id, db)
    if not _owned_pathname(product_id, pathname):
        raise HTTPException(status_code=400, detail="File does not belong to this product")
    if not storage.delete(pathname):
        raise HTTPException(status_code=404, detail="File not found or could not be deleted")
    AuditTrail(db, actor).write(
        "warning",
        f"Media {pathname} deleted from product {product_id}",
        "media",
        product_id=product_id,
        pathname=pathname,
    )
    db.commit()
    return ok({"pathname": pathname})
