from functools import lru_cache
from typing import Optional

from fastapi import Request

from storefront.adapters.blob_storage import BlobStorage


def get_actor(request: Request) -> dict:
    """Who is performing an admin action, as far as the request tells us."""
    return {
        "user_id": request.headers.get("X-Admin-User-Id"),
        "user_name": request.headers.get("X-Actor"),
        "ip": request.client.host if request.client else None,
        "user_agent": request.headers.get("User-Agent"),
    }


@lru_cache
def get_storage() -> BlobStorage:
    return BlobStorage()


def ok(data: Optional[object] = None, **extra) -> dict:
    body = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body
