import enum
import threading
from typing import Any, Optional


class Status(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class WorkflowState:
    """Finite state of one workflow: IDLE -> LOADING -> SUCCESS | ERROR."""

    def __init__(self):
        self._lock = threading.Lock()
        self.status = Status.IDLE
        self.payload: Any = None
        self.error: Optional[str] = None

    def loading(self):
        with self._lock:
            self.status = Status.LOADING
            self.error = None

    def succeed(self, payload: Any = None):
        with self._lock:
            self.status = Status.SUCCESS
            self.payload = payload
            self.error = None

    def fail(self, error: str, payload: Any = None):
        with self._lock:
            self.status = Status.ERROR
            self.error = error
            self.payload = payload

    def reset(self):
        with self._lock:
            self.status = Status.IDLE
            self.payload = None
            self.error = None

    @property
    def is_loading(self) -> bool:
        return self.status == Status.LOADING

    @property
    def is_error(self) -> bool:
        return self.status == Status.ERROR

    def __repr__(self):
        return f"<WorkflowState {self.status.value} error={self.error!r}>"
