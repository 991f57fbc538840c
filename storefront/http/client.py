"""
HTTP Client Facade

Single point of outbound request construction and error normalization for
the storefront backend.

Behaviour:
- ``Authorization: Bearer <token>`` is attached whenever the token store
  holds a token; the header is built per call, never cached on the client.
- HTTP 401 clears the token and redirects to the login page, whichever
  component issued the request.
- Any other error response is turned into a toast (server message or a
  generic fallback) and re-raised as ``ApiError``.
"""
import inspect
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx

from storefront.config import DEFAULT_API_URL, DEFAULT_TIMEOUT
from storefront.errors import (
    ERROR_GENERIC,
    ERROR_NETWORK,
    ApiError,
    AuthenticationError,
    NetworkError,
)
from storefront.http.tokens import TokenStore, MemoryTokenStore
from storefront.logging import get_logger, sanitize_string_for_logging
from storefront.ui import Navigator, Notifier

logger = get_logger(__name__)

UnauthorizedListener = Callable[[], Any]


def extract_error_message(payload: Any, default: str = ERROR_GENERIC) -> str:
    """
    Pull a human-readable message out of an error body.

    Handles the backend's ``{"message": ...}`` / ``{"error": ...}`` shapes and
    the media host's ``{"error": {"message": ...}}``.
    """
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
        error = payload.get("error")
        if isinstance(error, str) and error:
            return error
        if isinstance(error, dict):
            nested = error.get("message")
            if isinstance(nested, str) and nested:
                return nested
    return default


def path_segment(value: Any) -> str:
    """Escape an id for use as a single URL path segment."""
    return quote(str(value), safe="")


class ApiClient:
    """Async facade over ``httpx.AsyncClient`` for the storefront backend."""

    def __init__(
        self,
        token_store: Optional[TokenStore] = None,
        notifier: Optional[Notifier] = None,
        navigator: Optional[Navigator] = None,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token_store = token_store or MemoryTokenStore()
        self.notifier = notifier or Notifier()
        self.navigator = navigator or Navigator()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None
        self._unauthorized_listeners: List[UnauthorizedListener] = []

    # ==================== LIFECYCLE ====================

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazily create the shared httpx client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url + "/",
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                headers={"Accept": "application/json"},
                transport=self._transport,
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ==================== TOKEN ====================

    def set_token(self, token: str) -> None:
        self.token_store.set(token)

    def clear_token(self) -> None:
        self.token_store.clear()

    def get_token(self) -> Optional[str]:
        return self.token_store.get()

    def on_unauthorized(self, listener: UnauthorizedListener) -> None:
        """Register a callback fired after a 401 invalidated the token."""
        self._unauthorized_listeners.append(listener)

    def auth_headers(self) -> Dict[str, str]:
        token = self.get_token()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    # ==================== VERBS ====================

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, json=json, params=params)

    async def put(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, json=json, params=params)

    async def patch(self, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PATCH", path, json=json, params=params)

    async def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("DELETE", path, params=params)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
        quiet: bool = False,
    ) -> Any:
        """
        Send a request and return the parsed JSON body.

        Args:
            method: HTTP verb
            path: Path relative to the API base URL, or an absolute URL
            json: JSON request body
            params: Query parameters (None values are dropped)
            data: Form fields (multipart/urlencoded bodies)
            files: Multipart files
            authenticated: False for third-party hosts; skips the bearer header
                and the global 401 handling
            quiet: Log failures without raising a toast (background reads)

        Raises:
            AuthenticationError: backend answered 401
            ApiError: any other error status
            NetworkError: no response at all
        """
        url = path if path.startswith(("http://", "https://")) else path.lstrip("/")
        headers = self.auth_headers() if authenticated else {}
        query = {k: v for k, v in (params or {}).items() if v is not None} or None

        try:
            response = await self._get_http_client().request(
                method,
                url,
                json=json,
                params=query,
                data=data,
                files=files,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {sanitize_string_for_logging(path)} failed: {type(e).__name__}: {e}")
            if not quiet:
                self.notifier.error(ERROR_NETWORK)
            raise NetworkError(ERROR_NETWORK) from e

        if response.is_error:
            await self._handle_error_response(method, path, response, authenticated, quiet)

        return self._parse_body(response)

    # ==================== INTERNAL HELPERS ====================

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _handle_error_response(
        self,
        method: str,
        path: str,
        response: httpx.Response,
        authenticated: bool,
        quiet: bool = False,
    ) -> None:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        message = extract_error_message(payload)
        status = response.status_code

        if status == 401 and authenticated:
            logger.warning(f"401 on {method} {sanitize_string_for_logging(path)}; clearing session token")
            self.clear_token()
            for listener in list(self._unauthorized_listeners):
                try:
                    result = listener()
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception("Unauthorized listener failed")
            self.navigator.to_login()
            raise AuthenticationError(message, payload=payload)

        logger.warning(
            f"{method} {sanitize_string_for_logging(path)} -> {status}: "
            f"{sanitize_string_for_logging(message, max_length=120)}"
        )
        if not quiet:
            self.notifier.error(message)
        raise ApiError(message, status_code=status, payload=payload)
