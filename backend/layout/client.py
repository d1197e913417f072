# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Async HTTP client for the ``/settings`` endpoints used by the layout store."""

from typing import Any, Optional

import httpx

DEFAULT_TIMEOUT = httpx.Timeout(10.0)


class SettingsClient:
    """
    Thin wrapper over ``httpx.AsyncClient``.

    Every method raises ``httpx.HTTPError`` on transport failures and non-2xx
    responses, and ``ValueError`` when the body is not JSON.
    """

    def __init__(
        self,
        base_url: str = "",
        token: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        if http is None:
            http = httpx.AsyncClient(base_url=base_url, headers=headers, timeout=DEFAULT_TIMEOUT)
        elif headers:
            http.headers.update(headers)
        self._http = http

    async def _get(self, path: str) -> Any:
        response = await self._http.get(path)
        response.raise_for_status()
        return response.json()

    async def _put(self, path: str, payload: Any) -> None:
        response = await self._http.put(path, json=payload)
        response.raise_for_status()

    async def get_layout(self) -> Any:
        return await self._get("/settings/layout")

    async def put_layout(self, tree: Optional[dict]) -> None:
        await self._put("/settings/layout", tree)

    async def get_sidebar(self) -> Any:
        return await self._get("/settings/sidebar")

    async def put_sidebar(self, panes: dict) -> None:
        await self._put("/settings/sidebar", panes)

    async def get_nav_bar_visibility(self) -> Any:
        return await self._get("/settings/nav-bar-visibility")

    async def put_nav_bar_visibility(self, visible: bool) -> None:
        await self._put("/settings/nav-bar-visibility", {"visible": visible})

    async def aclose(self) -> None:
        await self._http.aclose()
