import itertools
import logging
import threading
from typing import List, Optional

from storefront.client import messages as msg
from storefront.client.http import ApiClient
from storefront.client.state import WorkflowState
from storefront.config import settings
from storefront.models.system_log import LOG_LEVELS
from storefront.schemas.product_schema import LogEntryOut, LogStats

logger = logging.getLogger(__name__)

LEVEL_FILTERS = ["all"] + LOG_LEVELS
DATE_FILTERS = ["today", "week", "month", "all"]


class LogViewer:
    """
    Read-only, server-paginated view over /api/admin/logs.

    Every fetch carries a sequence token; a response that arrives after a
    newer fetch was issued is dropped, so a slow reply for an old filter or
    page never overwrites the current one.
    """

    def __init__(self, api: ApiClient, page_size: Optional[int] = None):
        self.api = api
        self.page_size = page_size or settings.LOGS_PAGE_SIZE
        self.page = 1
        self.level = "all"
        self.date_filter = "today"
        self.search = ""

        self.logs: List[LogEntryOut] = []
        self.total = 0
        self.pages = 1
        self.stats = LogStats()
        self.state = WorkflowState()
        self.error: Optional[str] = None

        self._tokens = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    def params(self) -> dict:
        params = {"page": str(self.page), "limit": str(self.page_size)}
        if self.level != "all":
            params["level"] = self.level
        if self.date_filter != "all":
            params["date"] = self.date_filter
        if self.search:
            params["search"] = self.search
        return params

    def fetch(self) -> bool:
        """Returns True only when this response was applied."""
        with self._lock:
            token = next(self._tokens)
            self._latest = token
            params = self.params()
            self.state.loading()

        try:
            body = self.api.get("/api/admin/logs", params=params)
            failure = None if body.get("success") else msg.failure_message(body, msg.LOGS_LOAD_FAILED)
        except Exception as e:
            logger.error("fetching logs failed: %s", e)
            body, failure = None, msg.LOGS_LOAD_FAILED

        with self._lock:
            if token != self._latest:
                logger.debug("dropping stale log response (token %s, latest %s)", token, self._latest)
                return False
            if failure:
                self.error = failure
                self.logs = []
                self.state.fail(failure)
                return False
            data = body.get("data") or {}
            pagination = data.get("pagination") or {}
            self.logs = [LogEntryOut.model_validate(row) for row in data.get("logs") or []]
            self.total = pagination.get("total") or 0
            self.pages = pagination.get("pages") or 1
            if data.get("stats"):
                self.stats = LogStats.model_validate(data["stats"])
            self.error = None
            self.state.succeed(self.logs)
            return True

    # every filter change starts over at page 1

    def set_level(self, level: str) -> bool:
        if level not in LEVEL_FILTERS:
            raise ValueError(f"Unknown level filter: {level}")
        self.level = level
        self.page = 1
        return self.fetch()

    def set_date_filter(self, date_filter: str) -> bool:
        if date_filter not in DATE_FILTERS:
            raise ValueError(f"Unknown date filter: {date_filter}")
        self.date_filter = date_filter
        self.page = 1
        return self.fetch()

    def set_search(self, term: str) -> bool:
        self.search = (term or "").strip()
        self.page = 1
        return self.fetch()

    def set_page(self, page: int) -> bool:
        self.page = max(1, min(int(page), self.pages))
        return self.fetch()

    def next_page(self) -> bool:
        return self.set_page(self.page + 1)

    def previous_page(self) -> bool:
        return self.set_page(self.page - 1)

    def refresh(self) -> bool:
        self.page = 1
        return self.fetch()
