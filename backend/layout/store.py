# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Layout store – client-side state for the dashboard layout tree, the sidebar
pane lists and the header / layout visibility flags.

Lifecycle
---------
Construction does no I/O.  ``await store.initialize()`` loads everything;
``store.ready`` is set once the layout is usable, so other coroutines can
``await store.wait_ready()``.

Loading (per artifact: layout tree, sidebar)
--------------------------------------------
backend → local storage → built-in default.  A backend hit is normalized
(missing node ids filled in) and mirrored to local storage; local storage is
only a fallback cache.  The result is never None.

Persistence
-----------
Whole-structure updates persist immediately.  Resize updates are debounced:
every call restarts a timer and only the state current when it fires is sent.
Nothing in the public API raises on backend or local-storage failures; they
are logged and the in-memory state stays authoritative.
"""

import asyncio
import enum
import json
from typing import Any, Dict, List, Optional, Set

import httpx

from core.logger import logger
from layout.client import SettingsClient
from layout.panes import ALL_PANES, default_sidebar_panes, is_valid_sidebar_config
from layout.storage import LocalStorage
from layout.tree import LayoutError, LayoutTree, default_layout

LAYOUT_STORAGE_KEY = "termdeck_layout_config"
SIDEBAR_STORAGE_KEY = "termdeck_sidebar_config"

PERSIST_DEBOUNCE_SECONDS = 1.0

_BACKEND_ERRORS = (httpx.HTTPError, ValueError)
# LayoutError and json.JSONDecodeError are both ValueErrors
_LOCAL_ERRORS = (OSError, ValueError)


class LayoutSource(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING_BACKEND = "loading_backend"
    BACKEND_OK = "backend_ok"
    LOADING_LOCAL = "loading_local"
    LOCAL_OK = "local_ok"
    DEFAULT = "default"
    READY = "ready"


class LayoutStore:
    def __init__(
        self,
        client: SettingsClient,
        storage: LocalStorage,
        debounce_seconds: float = PERSIST_DEBOUNCE_SECONDS,
    ):
        self._client = client
        self._storage = storage
        self._debounce_seconds = debounce_seconds

        self.layout_tree: Optional[LayoutTree] = None
        self.sidebar_panes: Dict[str, List[str]] = default_sidebar_panes()
        self.all_possible_panes: List[str] = list(ALL_PANES)
        self.is_layout_visible = True
        self.is_header_visible = True

        self.state = LayoutSource.UNINITIALIZED
        self.layout_source = LayoutSource.UNINITIALIZED
        self.sidebar_source = LayoutSource.UNINITIALIZED
        self.ready = asyncio.Event()

        self._persist_timer: Optional[asyncio.TimerHandle] = None
        self._persist_tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        await self.initialize_layout()
        await self.load_header_visibility()

    async def wait_ready(self) -> None:
        await self.ready.wait()

    async def close(self) -> None:
        """Flush pending writes; the client belongs to the caller."""
        await self.flush()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def layout(self) -> Optional[dict]:
        return self.layout_tree.to_dict() if self.layout_tree is not None else None

    @property
    def used_panes(self) -> Set[str]:
        used = self.layout_tree.pane_names() if self.layout_tree is not None else set()
        used.update(self.sidebar_panes["left"])
        used.update(self.sidebar_panes["right"])
        return used

    @property
    def available_panes(self) -> List[str]:
        """Panes placed neither in the tree nor in a sidebar."""
        used = self.used_panes
        return [pane for pane in self.all_possible_panes if pane not in used]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def initialize_layout(self) -> None:
        logger.info("Layout store: initializing")
        self.ready.clear()
        self.layout_tree = None
        self.sidebar_panes = default_sidebar_panes()
        self.state = LayoutSource.LOADING_BACKEND
        self.layout_source = LayoutSource.LOADING_BACKEND
        self.sidebar_source = LayoutSource.LOADING_BACKEND

        tree = await self._layout_from_backend()
        sidebar = await self._sidebar_from_backend()

        if tree is None or sidebar is None:
            self.state = LayoutSource.LOADING_LOCAL
        if tree is None:
            self.layout_source = LayoutSource.LOADING_LOCAL
            tree = self._layout_from_local()
        if tree is None:
            logger.info("Layout store: applying default layout")
            tree = LayoutTree.from_dict(default_layout())
            self.layout_source = LayoutSource.DEFAULT
        if sidebar is None:
            self.sidebar_source = LayoutSource.LOADING_LOCAL
            sidebar = self._sidebar_from_local()
        if sidebar is None:
            logger.info("Layout store: applying default sidebar panes")
            sidebar = default_sidebar_panes()
            self.sidebar_source = LayoutSource.DEFAULT

        self.layout_tree = tree
        self.sidebar_panes = sidebar
        self.state = LayoutSource.READY
        self.ready.set()
        logger.info(
            "Layout store ready (layout=%s, sidebar=%s)",
            self.layout_source.value, self.sidebar_source.value,
        )

    async def _layout_from_backend(self) -> Optional[LayoutTree]:
        try:
            data = await self._client.get_layout()
        except _BACKEND_ERRORS as exc:
            logger.error("Layout store: loading layout from backend failed: %s", exc)
            return None
        if not data:
            logger.info("Layout store: backend holds no layout")
            return None
        try:
            tree = LayoutTree.from_dict(data)
        except LayoutError as exc:
            logger.warning("Layout store: backend layout rejected: %s", exc)
            return None
        self.layout_source = LayoutSource.BACKEND_OK
        self._write_local(LAYOUT_STORAGE_KEY, tree.to_dict())
        return tree

    async def _sidebar_from_backend(self) -> Optional[Dict[str, List[str]]]:
        try:
            data = await self._client.get_sidebar()
        except _BACKEND_ERRORS as exc:
            logger.error("Layout store: loading sidebar from backend failed: %s", exc)
            return None
        if not is_valid_sidebar_config(data):
            logger.info("Layout store: backend holds no valid sidebar config")
            return None
        sidebar = {"left": list(data["left"]), "right": list(data["right"])}
        self.sidebar_source = LayoutSource.BACKEND_OK
        self._write_local(SIDEBAR_STORAGE_KEY, sidebar)
        return sidebar

    def _layout_from_local(self) -> Optional[LayoutTree]:
        try:
            raw = self._storage.get_item(LAYOUT_STORAGE_KEY)
            if raw is None:
                return None
            tree = LayoutTree.from_dict(json.loads(raw))
        except _LOCAL_ERRORS as exc:
            logger.error("Layout store: local layout unusable: %s", exc)
            return None
        self.layout_source = LayoutSource.LOCAL_OK
        return tree

    def _sidebar_from_local(self) -> Optional[Dict[str, List[str]]]:
        try:
            raw = self._storage.get_item(SIDEBAR_STORAGE_KEY)
            if raw is None:
                return None
            data = json.loads(raw)
        except _LOCAL_ERRORS as exc:
            logger.error("Layout store: local sidebar config unusable: %s", exc)
            return None
        if not is_valid_sidebar_config(data):
            logger.warning("Layout store: invalid sidebar config in local storage")
            return None
        self.sidebar_source = LayoutSource.LOCAL_OK
        return {"left": list(data["left"]), "right": list(data["right"])}

    def _write_local(self, key: str, value: Any) -> None:
        try:
            self._storage.set_item(key, json.dumps(value))
        except _LOCAL_ERRORS as exc:
            logger.error("Layout store: writing %s to local storage failed: %s", key, exc)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def update_layout_tree(self, new_tree: Any) -> None:
        """Replace the whole tree (nested JSON or a LayoutTree) and persist."""
        if new_tree is None:
            logger.error("Layout store: refusing to replace the layout with nothing")
            return
        candidate = new_tree.to_dict() if isinstance(new_tree, LayoutTree) else new_tree
        if candidate == self.layout:
            logger.info("Layout store: update_layout_tree called with an unchanged tree")
            return
        try:
            tree = LayoutTree.from_dict(candidate)
        except LayoutError as exc:
            logger.error("Layout store: invalid layout tree not applied: %s", exc)
            return

        self.layout_tree = tree
        # A pending resize persist would only resend what is sent now.
        self._cancel_debounced_persist()
        await self.persist_layout_tree()

    async def update_sidebar_panes(self, new_panes: Any) -> None:
        if not is_valid_sidebar_config(new_panes):
            logger.error("Layout store: invalid sidebar config not applied: %r", new_panes)
            return
        panes = {"left": list(new_panes["left"]), "right": list(new_panes["right"])}
        if panes == self.sidebar_panes:
            logger.info("Layout store: update_sidebar_panes called with unchanged panes")
            return
        self.sidebar_panes = panes
        await self.persist_sidebar_panes()

    def update_node_sizes(self, node_id: str, children_sizes: List[Any]) -> None:
        """
        Resize the children of container *node_id*.  Must be called from the
        event loop; the backend write is debounced.
        """
        if self.layout_tree is None:
            logger.warning("Layout store: update_node_sizes before the layout was loaded")
            return
        try:
            changed = self.layout_tree.update_child_sizes(node_id, children_sizes)
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Layout store: malformed child sizes for node %s: %s", node_id, exc)
            return
        if not changed:
            logger.info("Layout store: node %s not found or sizes unchanged", node_id)
            return
        self._schedule_debounced_persist()

    def toggle_layout_visibility(self) -> None:
        """Local only – not synced to the backend."""
        self.is_layout_visible = not self.is_layout_visible
        logger.info("Layout store: layout visibility is now %s", self.is_layout_visible)

    async def load_header_visibility(self) -> None:
        try:
            data = await self._client.get_nav_bar_visibility()
        except _BACKEND_ERRORS as exc:
            logger.error("Layout store: loading header visibility failed: %s", exc)
            self.is_header_visible = True
            return
        if isinstance(data, dict) and isinstance(data.get("visible"), bool):
            self.is_header_visible = data["visible"]
        else:
            logger.warning("Layout store: invalid header visibility response, using default")
            self.is_header_visible = True

    async def toggle_header_visibility(self) -> None:
        """Flip immediately, then tell the backend; no rollback if that fails."""
        self.is_header_visible = not self.is_header_visible
        try:
            await self._client.put_nav_bar_visibility(self.is_header_visible)
        except _BACKEND_ERRORS as exc:
            logger.error("Layout store: saving header visibility failed: %s", exc)

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------

    @staticmethod
    def get_system_default_layout() -> dict:
        return default_layout()

    @staticmethod
    def get_system_default_sidebar_panes() -> Dict[str, List[str]]:
        return default_sidebar_panes()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def persist_layout_tree(self) -> None:
        payload = self.layout
        try:
            await self._client.put_layout(payload)
            logger.info("Layout store: layout saved to backend")
        except _BACKEND_ERRORS as exc:
            logger.error("Layout store: saving layout to backend failed: %s", exc)
        self._write_local(LAYOUT_STORAGE_KEY, payload)

    async def persist_sidebar_panes(self) -> None:
        payload = {"left": list(self.sidebar_panes["left"]), "right": list(self.sidebar_panes["right"])}
        try:
            await self._client.put_sidebar(payload)
            logger.info("Layout store: sidebar config saved to backend")
        except _BACKEND_ERRORS as exc:
            logger.error("Layout store: saving sidebar config to backend failed: %s", exc)
        self._write_local(SIDEBAR_STORAGE_KEY, payload)

    async def flush(self) -> None:
        """Run a pending debounced persist now and wait for running ones."""
        if self._persist_timer is not None:
            self._cancel_debounced_persist()
            await self.persist_layout_tree()
        if self._persist_tasks:
            await asyncio.gather(*list(self._persist_tasks))

    def _schedule_debounced_persist(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Layout store: no running event loop, resize kept in memory only")
            return
        self._cancel_debounced_persist()
        self._persist_timer = loop.call_later(self._debounce_seconds, self._fire_debounced_persist)

    def _cancel_debounced_persist(self) -> None:
        if self._persist_timer is not None:
            self._persist_timer.cancel()
            self._persist_timer = None

    def _fire_debounced_persist(self) -> None:
        self._persist_timer = None
        task = asyncio.get_running_loop().create_task(self.persist_layout_tree())
        self._persist_tasks.add(task)
        task.add_done_callback(self._persist_tasks.discard)
