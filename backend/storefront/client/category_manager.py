import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from storefront.client import messages as msg
from storefront.client.http import ApiClient
from storefront.client.scheduling import Debouncer, UiScheduler, default_scheduler
from storefront.client.state import WorkflowState
from storefront.config import settings
from storefront.schemas.product_schema import AvailableCategoryOut, CategoryOut

logger = logging.getLogger(__name__)


def reconcile_plan(selected: List[int], current: List[int]) -> Tuple[List[int], List[int]]:
    """(to_add, to_remove): selected - current, current - selected, in input order."""
    to_add = [cid for cid in selected if cid not in current]
    to_remove = [cid for cid in current if cid not in selected]
    return to_add, to_remove


@dataclass
class ReconcileResult:
    """
    Outcome of one save. Calls are not transactional: on failure `added` and
    `removed` list what was already applied on the server before `failed_op`.
    """

    added: List[int] = field(default_factory=list)
    removed: List[int] = field(default_factory=list)
    failed_op: Optional[Tuple[str, int]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failed_op is None and self.error is None

    @property
    def partial(self) -> bool:
        return not self.ok and bool(self.added or self.removed)


class CategoryAssociationManager:
    def __init__(
        self,
        api: ApiClient,
        product_id: int,
        scheduler: Optional[UiScheduler] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.api = api
        self.product_id = product_id
        self.scheduler = scheduler or default_scheduler()
        delay = settings.SEARCH_DEBOUNCE_MS / 1000.0 if debounce_seconds is None else debounce_seconds
        self.search_debounce = Debouncer(self.scheduler, delay, name=f"category-search-{product_id}")

        self.associated: List[CategoryOut] = []
        self.available: List[AvailableCategoryOut] = []
        self.selected: List[int] = []
        self.search_term = ""
        self.modal_open = False
        self.saving = False
        self.removing: Optional[int] = None
        self.error: Optional[str] = None
        self.state = WorkflowState()
        self.last_result: Optional[ReconcileResult] = None

    @property
    def base_path(self) -> str:
        return f"/api/admin/products/{self.product_id}"

    @property
    def associated_ids(self) -> List[int]:
        return [c.id for c in self.associated]

    def fetch_associated(self) -> bool:
        try:
            body = self.api.get(f"{self.base_path}/categories")
        except Exception as e:
            self.error = msg.CONNECTION_ERROR.format(e)
            return False
        if not body.get("success"):
            self.error = msg.failure_message(body, msg.CATEGORIES_LOAD_FAILED)
            return False
        self.associated = [CategoryOut.model_validate(c) for c in body.get("data") or []]
        return True

    # modal

    def open_modal(self) -> bool:
        self.modal_open = True
        self.search_term = ""
        self.error = None
        return self.fetch_available(initialize_selection=True)

    def close_modal(self):
        self.search_debounce.cancel()
        self.modal_open = False
        self.selected = []
        self.search_term = ""

    def fetch_available(self, initialize_selection: bool = False) -> bool:
        """
        Load categories (filtered by the current search term) flagged with
        is_associated. The selection is seeded from the associated flags when
        the modal opens; later searches keep the user's pending toggles.
        """
        self.state.loading()
        try:
            body = self.api.get(
                f"{self.base_path}/available-categories",
                params={"search": self.search_term or ""},
            )
        except Exception as e:
            logger.error("fetching available categories failed: %s", e)
            self.error = msg.SERVER_UNREACHABLE
            self.state.fail(self.error)
            return False
        if not body.get("success"):
            self.error = msg.failure_message(body, msg.CATEGORIES_LOAD_FAILED)
            self.state.fail(self.error)
            return False
        data = body.get("data") or {}
        raw = data.get("categories", []) if isinstance(data, dict) else data
        self.available = [AvailableCategoryOut.model_validate(c) for c in raw]
        if initialize_selection:
            self.selected = [c.id for c in self.available if c.is_associated]
        self.state.succeed(self.available)
        return True

    def toggle(self, category_id: int):
        if category_id in self.selected:
            self.selected = [cid for cid in self.selected if cid != category_id]
        else:
            self.selected = self.selected + [category_id]

    def type_search(self, term: str):
        """Keystroke: re-fetch once typing pauses for the debounce delay."""
        self.search_term = term
        self.search_debounce.trigger(self.fetch_available)

    def submit_search(self) -> bool:
        """Enter: cancel any pending debounced fetch and fetch right away."""
        return self.search_debounce.flush(self.fetch_available)

    def save(self) -> ReconcileResult:
        """
        Reconcile selection against the last fetched associated set: all adds,
        then all removes, one awaited call at a time. The first failure aborts
        the rest and leaves `associated` as last fetched.
        """
        result = ReconcileResult()
        if self.saving:
            result.error = "Save already in progress"
            return result
        self.saving = True
        self.error = None
        try:
            to_add, to_remove = reconcile_plan(self.selected, self.associated_ids)
            ops = [("add", cid) for cid in to_add] + [("remove", cid) for cid in to_remove]
            for op, cid in ops:
                try:
                    if op == "add":
                        body = self.api.post(f"{self.base_path}/categories", json={"categoryId": cid})
                    else:
                        body = self.api.delete(
                            f"{self.base_path}/categories", params={"categoryId": cid}
                        )
                except Exception as e:
                    logger.error("category %s %s failed: %s", op, cid, e)
                    result.failed_op = (op, cid)
                    result.error = msg.SERVER_UNREACHABLE
                    break
                if not body.get("success"):
                    fallback = msg.CATEGORIES_ADD_FAILED if op == "add" else msg.CATEGORIES_REMOVE_FAILED
                    result.failed_op = (op, cid)
                    result.error = msg.failure_message(body, fallback)
                    break
                (result.added if op == "add" else result.removed).append(cid)

            if result.failed_op is not None:
                self.error = result.error
                if result.partial:
                    logger.warning(
                        "category reconcile for product %s stopped at %s; applied adds=%s removes=%s",
                        self.product_id, result.failed_op, result.added, result.removed,
                    )
                return result

            self.fetch_associated()
            self.close_modal()
            return result
        finally:
            self.last_result = result
            self.saving = False

    # single add/remove outside the modal; both re-fetch the canonical list

    def add_category(self, category_id: int) -> bool:
        if category_id in self.associated_ids:
            return True
        if self.saving:
            return False
        self.saving = True
        try:
            try:
                body = self.api.post(f"{self.base_path}/categories", json={"categoryId": category_id})
            except Exception as e:
                self.error = msg.CONNECTION_ERROR.format(e)
                return False
            if not body.get("success"):
                self.error = msg.failure_message(body, msg.CATEGORY_ADD_FAILED)
                return False
            return self.fetch_associated()
        finally:
            self.saving = False

    def remove_category(self, category_id: int) -> bool:
        if self.removing == category_id:
            return False
        self.removing = category_id
        try:
            try:
                body = self.api.delete(
                    f"{self.base_path}/categories", params={"categoryId": category_id}
                )
            except Exception as e:
                self.error = msg.CONNECTION_ERROR.format(e)
                return False
            if not body.get("success"):
                self.error = msg.failure_message(body, msg.CATEGORY_REMOVE_FAILED)
                return False
            return self.fetch_associated()
        finally:
            self.removing = None
