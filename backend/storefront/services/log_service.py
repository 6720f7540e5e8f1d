import math
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from storefront.models.system_log import LOG_LEVELS
from storefront.repositories.log_repo import DATE_WINDOWS, LogRepository
from storefront.schemas.product_schema import LogEntryOut, LogPage, LogStats, Pagination


class LogServiceException(Exception):
    pass


class LogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = LogRepository(db)

    def query(
        self,
        page: int = 1,
        limit: int = 50,
        level: Optional[str] = None,
        date_filter: Optional[str] = None,
        search: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LogPage:
        # "all" is the UI's way of saying "no filter"
        if level in (None, "", "all"):
            level = None
        elif level not in LOG_LEVELS:
            raise LogServiceException(f"Invalid level: {level}")
        if date_filter in (None, ""):
            date_filter = "all"
        if date_filter not in DATE_WINDOWS:
            raise LogServiceException(f"Invalid date filter: {date_filter}")
        search = (search or "").strip() or None

        rows, total, counts = self.repo.page(
            page=page,
            limit=limit,
            level=level,
            date_filter=date_filter,
            search=search,
            now=now,
        )
        return LogPage(
            logs=[LogEntryOut.from_row(r) for r in rows],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                pages=max(1, math.ceil(total / limit)),
            ),
            stats=LogStats(**counts),
        )
