from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from storefront.models.system_log import LOG_LEVELS, SystemLog

# date filter -> lower bound of created_at
DATE_WINDOWS = ("today", "week", "month", "all")


def _window_start(date_filter: Optional[str], now: datetime) -> Optional[datetime]:
    if date_filter == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if date_filter == "week":
        return now - timedelta(days=7)
    if date_filter == "month":
        return now - timedelta(days=30)
    return None


class LogRepository:
    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        level: str,
        message: str,
        context: Optional[str] = None,
        user_id: Optional[str] = None,
        user_name: Optional[str] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> SystemLog:
        row = SystemLog(
            level=level,
            message=message,
            context=context,
            user_id=user_id,
            user_name=user_name,
            ip=ip,
            user_agent=user_agent,
            details=details,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def _base_query(
        self, date_filter: Optional[str], search: Optional[str], now: datetime
    ) -> Query:
        query = self.db.query(SystemLog)
        start = _window_start(date_filter, now)
        if start is not None:
            query = query.filter(SystemLog.created_at >= start)
        if search:
            like = f"%{search}%"
            query = query.filter(
                (SystemLog.message.ilike(like))
                | (SystemLog.context.ilike(like))
                | (SystemLog.user_name.ilike(like))
            )
        return query

    def page(
        self,
        page: int = 1,
        limit: int = 50,
        level: Optional[str] = None,
        date_filter: Optional[str] = None,
        search: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[List[SystemLog], int, Dict[str, int]]:
        """
        Return (rows, total matching, counts by level).

        Counts ignore the level filter so every level badge stays meaningful
        while one level is selected; they do honour date and search.
        """
        now = now or datetime.now(timezone.utc)
        base = self._base_query(date_filter, search, now)

        counts = {lvl: 0 for lvl in LOG_LEVELS}
        for lvl, n in (
            base.with_entities(SystemLog.level, func.count(SystemLog.id))
            .group_by(SystemLog.level)
            .all()
        ):
            if lvl in counts:
                counts[lvl] = n
        counts["total"] = sum(counts[lvl] for lvl in LOG_LEVELS)

        query = base
        if level:
            query = query.filter(SystemLog.level == level)
        total = query.with_entities(func.count(SystemLog.id)).scalar() or 0
        rows = (
            query.order_by(SystemLog.created_at.desc(), SystemLog.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total, counts
