"""Shared fixtures: a temporary local store, identity, cart and a fake backend."""

import json
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest
import requests

from storefront.api.client import ApiClient
from storefront.core.cart_store import CartStore
from storefront.core.identity import IdentityResolver
from storefront.core.storage import CartStorage, KeyValueStore, TokenStore
from storefront.models.cart import NewLineItem
from storefront.models.identity import User

BASE_URL = "http://backend.test/api"


def make_response(status: int = 200, body: Any = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    if body is None:
        response._content = b""
    elif isinstance(body, (dict, list)):
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = str(body).encode("utf-8")
    return response


class FakeBackend:
    """
    Stands in for `requests.Session`.

    Responses are queued per (method, path); the last queued response for a
    route keeps being returned. Unknown routes answer 404.
    """

    def __init__(self):
        self.headers: Dict[str, str] = {}
        self.routes: Dict[Tuple[str, str], List[requests.Response]] = {}
        self.request = MagicMock(side_effect=self._handle)

    def add(self, method: str, path: str, status: int = 200, body: Any = None) -> "FakeBackend":
        self.routes.setdefault((method, path), []).append(make_response(status, body))
        return self

    def calls_to(self, method: str, path: str) -> List[Any]:
        return [c for c in self.request.call_args_list if c.args[0] == method and c.args[1] == BASE_URL + path]

    def _handle(self, method: str, url: str, headers: Optional[dict] = None, timeout: Any = None, **kwargs):
        path = url[len(BASE_URL):]
        queue = self.routes.get((method, path))
        if not queue:
            return make_response(404, {"message": f"No route {method} {path}"})
        return queue.pop(0) if len(queue) > 1 else queue[0]


def make_user(user_id: str, role: str = "customer") -> User:
    return User(id=user_id, email=f"{user_id}@example.com", name=user_id.upper(), role=role)


def make_item(product_id: str, price: float = 10000, name: Optional[str] = None) -> NewLineItem:
    return NewLineItem(id=product_id, name=name or f"Product {product_id}", price=price)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr("storefront.core.retry_utils.time.sleep", lambda seconds: None)


@pytest.fixture()
def kv_store(tmp_path):
    return KeyValueStore(str(tmp_path / "storefront.db"))


@pytest.fixture()
def cart_storage(kv_store):
    return CartStorage(kv_store)


@pytest.fixture()
def tokens(kv_store):
    return TokenStore(kv_store)


@pytest.fixture()
def resolver():
    return IdentityResolver()


@pytest.fixture()
def cart_store(resolver, cart_storage):
    store = CartStore(resolver, cart_storage)
    yield store
    store.close()


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def client(tokens, backend):
    return ApiClient(tokens, base_url=BASE_URL, timeout=1, session=backend)
