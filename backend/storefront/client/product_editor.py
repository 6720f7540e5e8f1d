import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from storefront.client import messages as msg
from storefront.client.category_manager import CategoryAssociationManager
from storefront.client.http import ApiClient
from storefront.client.scheduling import FlashMessage, UiScheduler, default_scheduler
from storefront.client.size_manager import SizeManager
from storefront.client.state import WorkflowState
from storefront.config import settings
from storefront.schemas.product_schema import CategoryOut, ProductOut

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("name", "description", "price", "original_price", "stock_quantity", "is_active")


class ProductLoadError(Exception):
    pass


def _normalize(data: dict) -> ProductOut:
    """Coerce the loosely typed GET payload into the editor's field types."""
    original = data.get("original_price")
    return ProductOut(
        id=data["id"],
        name=data.get("name") or "",
        slug=data.get("slug"),
        description=data.get("description") or "",
        price=float(data.get("price") or 0),
        original_price=float(original) if original is not None else None,
        stock_quantity=int(data.get("stock_quantity") or 0),
        is_active=bool(data.get("is_active")),
    )


class ProductEditor:
    """
    Edit page of one product: scalar fields plus the category and size
    workflows for the same product id.
    """

    def __init__(
        self,
        api: ApiClient,
        product_id: int,
        scheduler: Optional[UiScheduler] = None,
        flash_seconds: Optional[float] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.api = api
        self.product_id = product_id
        self.scheduler = scheduler or default_scheduler()
        seconds = settings.FLASH_SECONDS if flash_seconds is None else flash_seconds
        self.flash = FlashMessage(self.scheduler, seconds)

        self.product: Optional[ProductOut] = None
        self.all_categories: List[CategoryOut] = []
        self.state = WorkflowState()
        self.saving = False
        self.error: Optional[str] = None

        self.categories = CategoryAssociationManager(
            api, product_id, scheduler=self.scheduler, debounce_seconds=debounce_seconds
        )
        self.sizes = SizeManager(
            api, product_id, scheduler=self.scheduler, flash_seconds=seconds
        )

    @property
    def saved(self) -> bool:
        return self.flash.text is not None

    def _get(self, path: str) -> dict:
        body = self.api.get(path)
        if not isinstance(body, dict) or body.get("success") is False:
            raise ProductLoadError(msg.failure_message(body, msg.PRODUCT_LOAD_FAILED))
        return body

    def load(self) -> bool:
        """
        Fetch product, all categories and the product's categories in
        parallel. Any failure is fatal: the editor ends in ERROR with no product.
        """
        self.state.loading()
        self.error = None
        base = f"/api/admin/products/{self.product_id}"
        try:
            with ThreadPoolExecutor(max_workers=3) as pool:
                product_f = pool.submit(self._get, base)
                categories_f = pool.submit(self._get, "/api/admin/categories")
                linked_f = pool.submit(self._get, f"{base}/categories")
                product_body = product_f.result()
                categories_body = categories_f.result()
                linked_body = linked_f.result()

            data = product_body.get("product") or product_body.get("data")
            if not data or not data.get("id"):
                raise ProductLoadError(msg.PRODUCT_INVALID)
            product = _normalize(data)
            all_categories = [CategoryOut.model_validate(c) for c in categories_body.get("data") or []]
            linked = [CategoryOut.model_validate(c) for c in linked_body.get("data") or []]
        except Exception as e:
            logger.error("loading product %s failed: %s", self.product_id, e)
            self.product = None
            self.error = str(e) or msg.UNEXPECTED_ERROR
            self.state.fail(self.error)
            return False

        self.product = product
        self.all_categories = all_categories
        self.categories.associated = linked
        self.sizes.product_name = product.name
        self.state.succeed(product)
        return True

    def retry(self) -> bool:
        return self.load()

    def set_field(self, name: str, value):
        if name not in SCALAR_FIELDS:
            raise KeyError(name)
        if self.product is not None:
            setattr(self.product, name, value)

    def payload(self) -> dict:
        p = self.product
        return {
            "name": p.name,
            "description": p.description,
            "price": float(p.price),
            "original_price": float(p.original_price) if p.original_price is not None else None,
            "stock_quantity": int(p.stock_quantity),
            "is_active": bool(p.is_active),
        }

    def save(self) -> bool:
        """
        PATCH the full scalar set. On success the product takes the values
        that were sent; the response body is not read back.
        """
        if self.product is None or self.saving:
            return False
        self.saving = True
        self.error = None
        body = self.payload()
        try:
            try:
                result = self.api.patch(f"/api/admin/products/{self.product_id}", json=body)
            except Exception as e:
                self.error = msg.CONNECTION_ERROR.format(e)
                return False
            if not result.get("success"):
                self.error = msg.failure_message(result, msg.PRODUCT_SAVE_FAILED)
                return False
            self.product = self.product.model_copy(update=body)
            self.flash.show(msg.PRODUCT_SAVED)
            return True
        finally:
            self.saving = False
