import logging
from typing import Optional

from sqlalchemy.orm import Session

from storefront.repositories.log_repo import LogRepository

logger = logging.getLogger(__name__)


class AuditTrail:
    """
    Appends SystemLog rows for admin mutations inside the caller's transaction,
    so an entry only becomes visible when the change it describes commits.
    """

    def __init__(self, db: Session, actor: Optional[dict] = None):
        self.repo = LogRepository(db)
        self.actor = actor or {}

    def write(self, level: str, message: str, context: str, **details):
        logger.debug("audit %s [%s] %s", level, context, message)
        return self.repo.record(
            level=level,
            message=message,
            context=context,
            user_id=self.actor.get("user_id"),
            user_name=self.actor.get("user_name"),
            ip=self.actor.get("ip"),
            user_agent=self.actor.get("user_agent"),
            details=details or None,
        )
