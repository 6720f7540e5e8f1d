import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class ApiClient:
    """
    JSON-over-HTTP access to the admin API.

    `session` is anything with the requests.Session call surface
    (get/post/put/patch/delete returning objects with .json()); FastAPI's
    TestClient qualifies, which is how the workflows are tested in-process.
    Transport errors and undecodable bodies propagate; callers turn them into
    "connection error" states. Application failures come back as the decoded
    `{"success": false, "error": ...}` envelope, whatever the status code.
    """

    def __init__(self, base_url: str = "", session=None, timeout: Optional[float] = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(self, method: str, path: str, params: Optional[dict] = None, json=None) -> dict:
        kwargs = {}
        if params:
            kwargs["params"] = params
        if json is not None:
            kwargs["json"] = json
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method.upper(), url, params)
        resp = getattr(self.session, method.lower())(url, **kwargs)
        return resp.json()

    def get(self, path: str, params: Optional[dict] = None) -> dict:
        return self.request("get", path, params=params)

    def post(self, path: str, json=None) -> dict:
        return self.request("post", path, json=json)

    def put(self, path: str, json=None) -> dict:
        return self.request("put", path, json=json)

    def patch(self, path: str, json=None) -> dict:
        return self.request("patch", path, json=json)

    def delete(self, path: str, params: Optional[dict] = None) -> dict:
        return self.request("delete", path, params=params)
