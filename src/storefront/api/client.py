"""
HTTP client for the storefront backend.

Attaches the bearer token, refreshes it once on 401 and maps failures onto
the ApiError taxonomy (TransientError / PermanentError / AuthenticationRequired).
"""

import logging
from typing import Any, Dict, Optional

import requests

from storefront.core.config import settings
from storefront.core.retry_utils import ApiError, AuthenticationRequired, PermanentError, TransientError
from storefront.core.storage import TokenStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

REFRESH_PATH = "/auth/refresh-token"


def _parse_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ApiClient:
    """Thin wrapper around a `requests.Session` bound to the backend base URL."""

    def __init__(
        self,
        tokens: TokenStore,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        self.tokens = tokens
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = timeout or settings.timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("Accept", "application/json")

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PUT", path, json=json, **kwargs)

    def patch(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PATCH", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)

    def request(self, method: str, path: str, retry_on_401: bool = True, **kwargs) -> Any:
        """
        Send a request and return the decoded body.

        Raises:
            TransientError: network failure, timeout or 5xx
            PermanentError: other 4xx
            AuthenticationRequired: 401 and the token could not be refreshed
        """
        if kwargs.get("params"):
            kwargs["params"] = {k: v for k, v in kwargs["params"].items() if v is not None}

        response = self._send(method, path, **kwargs)

        if response.status_code == 401 and retry_on_401 and path != REFRESH_PATH:
            logger.info(f"[API] 401 on {method} {path}, refreshing access token")
            self.refresh_access_token()
            response = self._send(method, path, **kwargs)

        body = _parse_body(response)
        if response.status_code < 400:
            return body

        payload = body if isinstance(body, dict) else {}
        message = f"{method} {path} failed with status {response.status_code}"
        logger.error(f"[API] {message}: {payload.get('message') or body}")

        if response.status_code == 401:
            raise AuthenticationRequired(message, 401, payload)
        if response.status_code >= 500:
            raise TransientError(message, response.status_code, payload=payload)
        raise PermanentError(message, response.status_code, payload)

    def refresh_access_token(self) -> str:
        """Exchange the refresh token (cookie or stored) for a new access token."""
        body = {}
        refresh_token = self.tokens.refresh_token
        if refresh_token:
            body["refreshToken"] = refresh_token

        try:
            response = self._send("POST", REFRESH_PATH, json=body, authorize=False)
            data = _parse_body(response)
            token = data.get("accessToken") if isinstance(data, dict) else None
        except ApiError:
            token = None
            response = None

        if response is None or response.status_code >= 400 or not token:
            logger.warning("[API] Token refresh failed, signing out")
            self.tokens.access_token = None
            self.tokens.refresh_token = None
            raise AuthenticationRequired("Phiên đăng nhập đã hết hạn. Vui lòng đăng nhập lại.", 401)

        self.tokens.access_token = token
        return token

    def _send(self, method: str, path: str, authorize: bool = True, **kwargs) -> requests.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        token = self.tokens.access_token if authorize else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            return self.session.request(
                method, self.url(path), headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.Timeout as e:
            logger.error(f"[API] Timeout on {method} {path}: {e}")
            raise TransientError(f"Timeout on {method} {path}") from e
        except requests.RequestException as e:
            logger.error(f"[API] {method} {path} error: {e}")
            raise TransientError(f"{method} {path} error: {e}") from e
