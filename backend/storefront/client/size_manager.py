import logging
from dataclasses import dataclass
from typing import List, Optional

from storefront.client import messages as msg
from storefront.client.http import ApiClient
from storefront.client.scheduling import FlashMessage, UiScheduler, default_scheduler
from storefront.client.state import WorkflowState
from storefront.config import settings
from storefront.schemas.product_schema import ProductSizeOut

logger = logging.getLogger(__name__)


@dataclass
class SizeEditDraft:
    id: Optional[int]
    original_size: str
    size: str
    stock: int
    is_active: bool

    def payload(self) -> dict:
        # stock 0 always persists as inactive, whatever the toggle says
        return {
            "id": self.id,
            "original_size": self.original_size,
            "size": self.size.strip(),
            "stock_quantity": self.stock,
            "is_active": False if self.stock == 0 else self.is_active,
        }


def parse_stock(raw) -> int:
    """Number-input semantics: anything unparsable counts as 0."""
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return 0


class SizeManager:
    """
    Size/stock variants of one product.

    The server list is the source of truth: every successful write is
    followed by a full re-fetch, never a local merge.
    """

    def __init__(
        self,
        api: ApiClient,
        product_id: int,
        product_name: str = "",
        scheduler: Optional[UiScheduler] = None,
        flash_seconds: Optional[float] = None,
    ):
        self.api = api
        self.product_id = product_id
        self.product_name = product_name
        self.scheduler = scheduler or default_scheduler()
        self.flash = FlashMessage(
            self.scheduler, settings.FLASH_SECONDS if flash_seconds is None else flash_seconds
        )

        self.sizes: List[ProductSizeOut] = []
        self.state = WorkflowState()
        self.saving = False
        self.error: Optional[str] = None
        self.modal_error: Optional[str] = None

        self.add_form_open = False
        self.editing_size: Optional[str] = None
        self.edit: Optional[SizeEditDraft] = None
        self.size_to_delete: Optional[str] = None

    @property
    def path(self) -> str:
        return f"/api/admin/products/{self.product_id}/sizes"

    # derived display values, always from the last fetched list

    @property
    def total_stock(self) -> int:
        return sum(s.stock_quantity for s in self.sizes)

    @property
    def sizes_in_stock(self) -> int:
        return len([s for s in self.sizes if s.stock_quantity > 0])

    @property
    def size_count(self) -> int:
        return len(self.sizes)

    @staticmethod
    def is_available(size: ProductSizeOut) -> bool:
        return size.is_active and size.stock_quantity > 0

    def find(self, label: str) -> Optional[ProductSizeOut]:
        return next((s for s in self.sizes if s.size == label), None)

    @property
    def success(self) -> Optional[str]:
        return self.flash.text

    # list

    def fetch_sizes(self) -> bool:
        self.state.loading()
        self.error = None
        try:
            body = self.api.get(self.path)
        except Exception as e:
            self.error = msg.CONNECTION_ERROR.format(e)
            self.state.fail(self.error)
            return False
        if body.get("success"):
            self.sizes = [
                ProductSizeOut.model_validate(s)
                for s in (body.get("data") or {}).get("sizes") or []
            ]
            self.state.succeed(self.sizes)
            return True
        self.error = msg.failure_message(body, msg.SIZES_LOAD_FAILED)
        self.state.fail(self.error)
        return False

    def _mutate(self, method: str, fallback: str, success_text: str, **kwargs):
        """
        One write round trip. Returns (ok, error_message); on success shows the
        flash and re-fetches the list.
        """
        self.saving = True
        try:
            try:
                body = getattr(self.api, method)(self.path, **kwargs)
            except Exception as e:
                return False, msg.CONNECTION_ERROR.format(e)
            if not body.get("success"):
                return False, msg.failure_message(body, fallback)
            self.flash.show(success_text)
            self.fetch_sizes()
            return True, None
        finally:
            self.saving = False

    # add

    def open_add_form(self):
        self.add_form_open = True
        self.modal_error = None

    def close_add_form(self):
        self.add_form_open = False
        self.modal_error = None

    def add_size(self, size: str, stock_quantity: int) -> bool:
        if self.saving:
            return False
        label = (size or "").strip()
        if not label:
            self.modal_error = msg.SIZE_REQUIRED
            return False
        if stock_quantity < 0:
            self.modal_error = msg.STOCK_NON_NEGATIVE
            return False
        self.modal_error = None
        ok, error = self._mutate(
            "post",
            msg.SIZE_ADD_FAILED,
            msg.SIZE_ADDED,
            json={"size": label, "stock_quantity": stock_quantity},
        )
        if ok:
            self.add_form_open = False
        else:
            self.modal_error = error
        return ok

    # inline stock edit

    def begin_inline_edit(self, label: str):
        self.editing_size = label

    def cancel_inline_edit(self):
        self.editing_size = None

    def inline_key(self, key: str, raw_value) -> bool:
        """Enter commits, Escape cancels; other keys are ignored."""
        if key == "Enter":
            return self.commit_inline_stock(raw_value)
        if key == "Escape":
            self.cancel_inline_edit()
        return False

    def commit_inline_stock(self, raw_value) -> bool:
        """Blur/Enter: persist only when the value actually changed."""
        label = self.editing_size
        self.editing_size = None
        if label is None:
            return False
        current = self.find(label)
        stock = parse_stock(raw_value)
        if current is not None and stock == current.stock_quantity:
            return False
        return self.update_stock(label, stock)

    def update_stock(self, label: str, stock: int) -> bool:
        if self.saving:
            return False
        if stock < 0:
            self.error = msg.STOCK_NON_NEGATIVE
            return False
        self.error = None
        current = self.find(label)
        is_active = current.is_active if current else True
        ok, error = self._mutate(
            "put",
            msg.STOCK_UPDATE_FAILED,
            msg.STOCK_UPDATED,
            json={"size": label, "stock_quantity": stock, "is_active": is_active},
        )
        if not ok:
            self.error = error
        return ok

    # full edit modal

    def open_edit(self, size: ProductSizeOut):
        self.edit = SizeEditDraft(
            id=size.id,
            original_size=size.size,
            size=size.size,
            stock=size.stock_quantity,
            is_active=size.is_active,
        )
        self.editing_size = None
        self.modal_error = None

    def set_edit_label(self, label: str):
        if self.edit:
            self.edit.size = label

    def set_edit_stock(self, raw_value):
        if self.edit:
            stock = parse_stock(raw_value)
            self.edit.stock = stock
            if stock == 0:
                self.edit.is_active = False

    def set_edit_active(self, is_active: bool):
        if self.edit:
            self.edit.is_active = bool(is_active)

    def cancel_edit(self):
        self.edit = None
        self.editing_size = None
        self.modal_error = None

    def save_edit(self) -> bool:
        if self.edit is None or self.saving:
            return False
        if not self.edit.size.strip():
            self.modal_error = msg.SIZE_REQUIRED
            return False
        if self.edit.stock < 0:
            self.modal_error = msg.STOCK_NON_NEGATIVE
            return False
        self.modal_error = None
        ok, error = self._mutate(
            "put", msg.SIZE_UPDATE_FAILED, msg.SIZE_UPDATED, json=self.edit.payload()
        )
        if ok:
            self.edit = None
        else:
            self.modal_error = error
        return ok

    # delete with confirmation

    def request_delete(self, label: str):
        self.size_to_delete = label

    @property
    def delete_confirmation(self) -> Optional[str]:
        if self.size_to_delete is None:
            return None
        return msg.DELETE_CONFIRMATION.format(self.size_to_delete)

    def cancel_delete(self):
        self.size_to_delete = None

    def confirm_delete(self) -> bool:
        label = self.size_to_delete
        if label is None or self.saving:
            return False
        self.error = None
        ok, error = self._mutate(
            "delete", msg.SIZE_DELETE_FAILED, msg.SIZE_DELETED, params={"size": label}
        )
        # the dialog closes whatever the outcome
        self.size_to_delete = None
        if not ok:
            self.error = error
            logger.warning("deleting size %s of product %s failed: %s", label, self.product_id, error)
        return ok
