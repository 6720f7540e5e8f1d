import enum
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from storefront.db import Base


class LogLevel(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
    DEBUG = "debug"


LOG_LEVELS = [lvl.value for lvl in LogLevel]


class SystemLog(Base):
    """Append-only admin/system event. Never updated or deleted by the API."""

    __tablename__ = "system_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    level = Column(String(16), nullable=False, index=True, default=LogLevel.INFO.value)
    message = Column(Text, nullable=False)
    context = Column(String(128), nullable=True)  # e.g. "product_sizes", "media"
    user_id = Column(String(64), nullable=True)
    user_name = Column(String(128), nullable=True)
    ip = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False, index=True
    )
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, nullable=True)
