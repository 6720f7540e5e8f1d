import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import uuid4

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


class UiScheduler:
    """
    One-shot delayed calls on a background APScheduler.

    Scheduling with a job id that is already pending replaces it, which is
    all a debounce needs.
    """

    def __init__(self, scheduler: Optional[BackgroundScheduler] = None):
        self._scheduler = scheduler or BackgroundScheduler(daemon=True)
        self._lock = threading.Lock()

    def _ensure_started(self):
        with self._lock:
            if not self._scheduler.running:
                self._scheduler.start()

    def call_later(self, delay: float, func: Callable, job_id: str, args=None):
        self._ensure_started()
        run_at = datetime.now(timezone.utc) + timedelta(seconds=delay)
        self._scheduler.add_job(
            func,
            "date",
            run_date=run_at,
            args=list(args or []),
            id=job_id,
            replace_existing=True,
            misfire_grace_time=None,
        )

    def cancel(self, job_id: str) -> bool:
        try:
            self._scheduler.remove_job(job_id)
            return True
        except JobLookupError:
            return False

    def pending(self, job_id: str) -> bool:
        if not self._scheduler.running:
            return False
        return self._scheduler.get_job(job_id) is not None

    def shutdown(self):
        with self._lock:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)


_default: Optional[UiScheduler] = None
_default_lock = threading.Lock()


def default_scheduler() -> UiScheduler:
    global _default
    with _default_lock:
        if _default is None:
            _default = UiScheduler()
        return _default


class Debouncer:
    """Coalesces rapid triggers into one call after `delay` seconds of quiet."""

    def __init__(self, scheduler: UiScheduler, delay: float, name: str = "debounce"):
        self.scheduler = scheduler
        self.delay = delay
        self.job_id = f"{name}-{uuid4().hex[:8]}"

    def trigger(self, func: Callable, *args):
        self.scheduler.call_later(self.delay, func, self.job_id, args)

    def flush(self, func: Callable, *args):
        """Drop any pending call and run `func` now."""
        self.scheduler.cancel(self.job_id)
        return func(*args)

    def cancel(self) -> bool:
        return self.scheduler.cancel(self.job_id)

    @property
    def pending(self) -> bool:
        return self.scheduler.pending(self.job_id)


class FlashMessage:
    """A success banner that clears itself after `seconds`."""

    def __init__(self, scheduler: UiScheduler, seconds: float):
        self.scheduler = scheduler
        self.seconds = seconds
        self.text: Optional[str] = None
        self.job_id = f"flash-{uuid4().hex[:8]}"

    def show(self, text: str):
        self.text = text
        self.scheduler.call_later(self.seconds, self.clear, self.job_id)

    def clear(self):
        self.text = None
