"""HTTP client for the storefront REST API.

Requests are signed with the stored bearer token. Reads are scoped to the
branch resolved for the current user, the way the dashboard screens expect.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from storefront.core.branch_context import BranchContext
from storefront.core.constants import BRANCH_QUERY_PARAM, DEFAULT_API_TIMEOUT
from storefront.core.exceptions import ApiException
from storefront.core.session import AuthSession

logger = logging.getLogger(__name__)


class StorefrontApiClient:
    """Thin aiohttp wrapper around the remote API."""

    def __init__(
        self,
        base_url: str,
        session: AuthSession,
        branches: BranchContext | None = None,
        timeout: int = DEFAULT_API_TIMEOUT,
        http: aiohttp.ClientSession | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._branches = branches
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._http = http
        self._owns_http = http is None

    async def __aenter__(self) -> StorefrontApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._http is not None and self._owns_http and not self._http.closed:
            await self._http.close()
        self._http = None

    def _get_http(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_http = True
        return self._http

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def auth_headers(self) -> dict[str, str]:
        token = self._session.get_token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def branch_params(self) -> dict[str, str]:
        if self._branches is None:
            return {}
        return self._branches.branch_query_params(self._session.get_current_user())

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        url = self._url(path)
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        http = self._get_http()
        try:
            async with http.request(
                method, url, params=query, json=json, headers=self.auth_headers()
            ) as response:
                if response.content_type == "application/json":
                    try:
                        body = await response.json()
                    except ValueError as e:
                        logger.error("%s %s returned malformed JSON: %s", method, url, e)
                        raise ApiException(response.status, "invalid JSON response") from e
                else:
                    body = await response.text()
                if response.status >= 400:
                    message = body.get("message") if isinstance(body, dict) else None
                    raise ApiException(response.status, str(message or body or response.reason))
                return body
        except aiohttp.ClientError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ApiException(0, str(e)) from e
        except asyncio.TimeoutError as e:
            logger.error("%s %s timed out", method, url)
            raise ApiException(0, "request timed out") from e

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        branch_scoped: bool = True,
    ) -> Any:
        """GET with the active branch filter unless the caller sets one."""
        query = dict(params or {})
        if branch_scoped and BRANCH_QUERY_PARAM not in query:
            query.update(self.branch_params())
        return await self.request("GET", path, params=query)

    async def post(self, path: str, payload: Any = None) -> Any:
        return await self.request("POST", path, json=payload)

    async def put(self, path: str, payload: Any = None) -> Any:
        return await self.request("PUT", path, json=payload)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
