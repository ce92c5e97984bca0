from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, Optional, Sequence, Tuple

import httpx
import structlog

from ..errors import NotFoundError, UpstreamError
from ..settings import PlatformConfig

logger = structlog.get_logger(__name__)

SHOPPING_LIST_SCOPES = ("manage_shopping_lists", "view_products", "manage_orders")
ORDER_SCOPES = (
    "manage_orders",
    "view_products",
    "view_shopping_lists",
    "manage_shopping_lists",
)

# refresh this many seconds before the platform says the token expires
_TOKEN_LEEWAY = 60


class CommercetoolsClient:
    """Thin async wrapper over the commercetools HTTP API.

    Paths are relative to the project, e.g. ``/orders``. Tokens are fetched
    with the client-credentials flow, one per scope set.
    """

    def __init__(
        self,
        config: PlatformConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._http = httpx.AsyncClient(timeout=config.timeout, transport=transport)
        self._tokens: Dict[Tuple[str, ...], Tuple[str, float]] = {}
        self._token_locks: Dict[Tuple[str, ...], asyncio.Lock] = {}

    async def aclose(self) -> None:
        await self._http.aclose()

    # ---------- auth ----------

    def _scope_string(self, scopes: Sequence[str]) -> str:
        key = self.config.project_key
        # scopes already carrying a project suffix are passed as-is
        return " ".join(s if ":" in s else f"{s}:{key}" for s in scopes)

    def _cached_token(self, scopes: Tuple[str, ...]) -> Optional[str]:
        cached = self._tokens.get(scopes)
        if cached and cached[1] > time.monotonic():
            return cached[0]
        return None

    async def _token(self, scopes: Tuple[str, ...]) -> str:
        token = self._cached_token(scopes)
        if token:
            return token

        # concurrent callers with a cold cache share one fetch per scope set
        lock = self._token_locks.setdefault(scopes, asyncio.Lock())
        async with lock:
            token = self._cached_token(scopes)
            if token:
                return token
            return await self._fetch_token(scopes)

    async def _fetch_token(self, scopes: Tuple[str, ...]) -> str:
        data = {"grant_type": "client_credentials"}
        if scopes:
            data["scope"] = self._scope_string(scopes)

        try:
            resp = await self._http.post(
                f"{self.config.auth_url}/oauth/token",
                data=data,
                auth=(self.config.client_id, self.config.client_secret),
            )
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                f"Failed to fetch CT token: {exc.response.status_code} {exc.response.text[:200]}",
                upstream_status=exc.response.status_code,
            )
        except httpx.RequestError as exc:
            raise UpstreamError(f"CT token request failed: {exc}")
        except ValueError:
            raise UpstreamError("Invalid token response")

        if not isinstance(body, dict) or "access_token" not in body:
            raise UpstreamError("Invalid token response")

        expires_in = int(body.get("expires_in") or 0)
        self._tokens[scopes] = (
            body["access_token"],
            time.monotonic() + max(expires_in - _TOKEN_LEEWAY, 0),
        )
        return body["access_token"]

    # ---------- requests ----------

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        scopes: Optional[Sequence[str]] = None,
    ) -> Any:
        scope_key = tuple(scopes) if scopes is not None else tuple(self.config.scopes)
        token = await self._token(scope_key)
        url = f"{self.config.api_url}/{self.config.project_key}{path}"

        try:
            resp = await self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            message = _error_message(exc.response)
            if status == 404:
                raise NotFoundError(message or f"URI not found: {path}")
            logger.error("platform.request_failed", method=method, path=path, status=status, detail=message)
            raise UpstreamError(
                f"commercetools API error {status}: {message}",
                upstream_status=status,
            )
        except httpx.RequestError as exc:
            logger.error("platform.request_error", method=method, path=path, error=str(exc))
            raise UpstreamError(f"commercetools request failed: {exc}")

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            logger.error("platform.invalid_body", method=method, path=path, status=resp.status_code)
            raise UpstreamError(
                f"commercetools returned a non-JSON body for {method} {path}",
                upstream_status=resp.status_code,
            )

    async def get(self, path: str, *, params=None, scopes=None) -> Any:
        return await self.request("GET", path, params=params, scopes=scopes)

    async def post(self, path: str, *, json: Any, params=None, scopes=None) -> Any:
        return await self.request("POST", path, params=params, json=json, scopes=scopes)

    async def delete(self, path: str, *, params=None, scopes=None) -> Any:
        return await self.request("DELETE", path, params=params, scopes=scopes)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or "")
    return ""
