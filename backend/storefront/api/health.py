from fastapi import APIRouter
from sqlalchemy import text

from storefront.api.deps import get_storage
from storefront.db import engine

router = APIRouter()


@router.get("/health", tags=["health"])
def health():
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception:
        db_ok = False
    storage_ok = get_storage().health_check()

    return {
        "status": "ok" if db_ok and storage_ok else "degraded",
        "db": db_ok,
        "storage": storage_ok,
    }
