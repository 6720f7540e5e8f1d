from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import ok
from storefront.config import settings
from storefront.db import get_db
from storefront.services.log_service import LogService, LogServiceException

router = APIRouter(prefix="/api/admin/logs", tags=["logs"])


@router.get("", summary="Paginated, filterable system log feed with counts by level")
def list_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.LOGS_PAGE_SIZE, ge=1, le=200),
    level: Optional[str] = Query(None, description="info|warning|error|success|debug|all"),
    date: Optional[str] = Query(None, description="today|week|month|all"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    svc = LogService(db)
    try:
        result = svc.query(page=page, limit=limit, level=level, date_filter=date, search=search)
    except LogServiceException as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ok(result.model_dump(mode="json"))
