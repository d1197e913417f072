import asyncio
import json

import httpx
import pytest

from layout.client import SettingsClient
from layout.panes import default_sidebar_panes
from layout.storage import FileStorage, MemoryStorage
from layout.store import LAYOUT_STORAGE_KEY, SIDEBAR_STORAGE_KEY, LayoutSource, LayoutStore
from layout.tree import LayoutTree, default_layout


class FakeBackend:
    """Settings endpoints over httpx.MockTransport; records every request."""

    def __init__(self, layout=None, sidebar=None, visible=True, down=False, status=200):
        self.values = {
            "/settings/layout": layout,
            "/settings/sidebar": sidebar,
            "/settings/nav-bar-visibility": {"visible": visible},
        }
        self.down = down
        self.status = status
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("backend unreachable", request=request)
        if self.status != 200:
            return httpx.Response(self.status, json={"detail": "boom"})
        path = request.url.path
        if request.method == "PUT":
            self.values[path] = json.loads(request.content or b"null")
        return httpx.Response(200, json=self.values[path])

    def http(self):
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url="http://termdeck")

    def puts(self, path):
        return [json.loads(r.content) for r in self.requests if r.method == "PUT" and r.url.path == path]


def _layout_without_ids():
    return {
        "type": "container",
        "direction": "horizontal",
        "children": [
            {"type": "pane", "component": "terminal", "size": 50},
            {
                "type": "container",
                "direction": "vertical",
                "size": 50,
                "children": [
                    {"type": "pane", "component": "editor", "size": 50},
                    {"type": "pane", "component": "fileManager", "size": 50},
                ],
            },
        ],
    }


def _walk(node):
    yield node
    for child in node.get("children", []):
        yield from _walk(child)


@pytest.mark.asyncio
async def test_defaults_when_backend_and_local_storage_are_empty():
    backend = FakeBackend(down=True)
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), MemoryStorage())
        await store.initialize()

    assert store.ready.is_set()
    assert store.state is LayoutSource.READY
    assert store.layout_source is LayoutSource.DEFAULT
    assert store.sidebar_source is LayoutSource.DEFAULT
    assert store.layout is not None
    assert store.layout_tree.pane_names() == LayoutTree.from_dict(default_layout()).pane_names()
    assert store.sidebar_panes == default_sidebar_panes()
    assert store.is_header_visible is True


@pytest.mark.asyncio
async def test_backend_layout_gets_ids_and_is_mirrored_locally():
    backend = FakeBackend(layout=_layout_without_ids(), sidebar={"left": ["connections"], "right": ["editor"]})
    storage = MemoryStorage()
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), storage)
        await store.initialize()

    nodes = list(_walk(store.layout))
    assert len(nodes) == 5
    assert all(node["id"] for node in nodes)
    assert len({node["id"] for node in nodes}) == 5
    assert store.layout_source is LayoutSource.BACKEND_OK
    assert json.loads(storage.get_item(LAYOUT_STORAGE_KEY)) == store.layout
    assert json.loads(storage.get_item(SIDEBAR_STORAGE_KEY)) == {"left": ["connections"], "right": ["editor"]}


@pytest.mark.asyncio
async def test_falls_back_to_local_storage_when_backend_fails():
    cached = LayoutTree.from_dict(_layout_without_ids()).to_dict()
    storage = MemoryStorage({
        LAYOUT_STORAGE_KEY: json.dumps(cached),
        SIDEBAR_STORAGE_KEY: json.dumps({"left": [], "right": ["commandHistory"]}),
    })
    backend = FakeBackend(status=500)
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), storage)
        await store.initialize()

    assert store.layout == cached
    assert store.sidebar_panes == {"left": [], "right": ["commandHistory"]}
    assert store.layout_source is LayoutSource.LOCAL_OK
    assert store.sidebar_source is LayoutSource.LOCAL_OK


@pytest.mark.asyncio
async def test_unusable_local_data_falls_back_to_defaults():
    storage = MemoryStorage({
        LAYOUT_STORAGE_KEY: "{not json",
        SIDEBAR_STORAGE_KEY: json.dumps({"left": ["connections", "connections"], "right": []}),
    })
    backend = FakeBackend()
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), storage)
        await store.initialize_layout()

    assert store.layout_source is LayoutSource.DEFAULT
    assert store.sidebar_source is LayoutSource.DEFAULT
    assert store.layout is not None


@pytest.mark.asyncio
async def test_size_updates_are_debounced_into_one_put():
    backend = FakeBackend(layout=_layout_without_ids())
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), MemoryStorage(), debounce_seconds=0.05)
        await store.initialize_layout()
        root_id = store.layout["id"]

        store.update_node_sizes(root_id, [{"index": 0, "size": 30}, {"index": 1, "size": 70}])
        store.update_node_sizes(root_id, [{"index": 0, "size": 35}, {"index": 1, "size": 65}])
        store.update_node_sizes(root_id, [{"index": 0, "size": 40}, {"index": 1, "size": 60}])
        assert backend.puts("/settings/layout") == []

        await asyncio.sleep(0.2)
        await store.flush()

    puts = backend.puts("/settings/layout")
    assert len(puts) == 1
    assert [child["size"] for child in puts[0]["children"]] == [40, 60]


@pytest.mark.asyncio
async def test_flush_sends_a_pending_size_update_immediately():
    backend = FakeBackend(layout=_layout_without_ids())
    storage = MemoryStorage()
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), storage, debounce_seconds=60)
        await store.initialize_layout()
        root_id = store.layout["id"]

        store.update_node_sizes(root_id, [{"index": 0, "size": 25}])
        await store.close()

    assert len(backend.puts("/settings/layout")) == 1
    assert json.loads(storage.get_item(LAYOUT_STORAGE_KEY))["children"][0]["size"] == 25


@pytest.mark.asyncio
async def test_size_update_for_unknown_node_schedules_nothing():
    backend = FakeBackend(layout=_layout_without_ids())
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), MemoryStorage(), debounce_seconds=0.01)
        await store.initialize_layout()

        store.update_node_sizes("no-such-node", [{"index": 0, "size": 10}])
        store.update_node_sizes(store.layout["id"], [{"index": "x", "size": 10}])
        await asyncio.sleep(0.05)

    assert backend.puts("/settings/layout") == []


@pytest.mark.asyncio
async def test_update_layout_tree_persists_only_real_changes():
    backend = FakeBackend(layout=_layout_without_ids())
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), MemoryStorage())
        await store.initialize_layout()

        await store.update_layout_tree(store.layout)
        await store.update_layout_tree({"type": "pane", "component": "solitaire"})
        await store.update_layout_tree(None)
        assert backend.puts("/settings/layout") == []

        replacement = {"id": "only", "type": "pane", "component": "terminal"}
        await store.update_layout_tree(replacement)

    assert backend.puts("/settings/layout") == [replacement]
    assert store.layout == replacement


@pytest.mark.asyncio
async def test_update_sidebar_panes_validates_and_persists():
    backend = FakeBackend()
    storage = MemoryStorage()
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), storage)
        await store.initialize_layout()

        await store.update_sidebar_panes({"left": ["bogus"], "right": []})
        await store.update_sidebar_panes(default_sidebar_panes())
        assert backend.puts("/settings/sidebar") == []

        await store.update_sidebar_panes({"left": [], "right": ["connections", "dockerManager"]})

    assert backend.puts("/settings/sidebar") == [{"left": [], "right": ["connections", "dockerManager"]}]
    assert json.loads(storage.get_item(SIDEBAR_STORAGE_KEY))["right"] == ["connections", "dockerManager"]


@pytest.mark.asyncio
async def test_backend_failure_while_persisting_still_updates_local_storage():
    backend = FakeBackend(layout=_layout_without_ids())
    storage = MemoryStorage()
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), storage)
        await store.initialize_layout()
        backend.down = True

        await store.update_layout_tree({"id": "solo", "type": "pane", "component": "editor"})

    assert store.layout["component"] == "editor"
    assert json.loads(storage.get_item(LAYOUT_STORAGE_KEY))["id"] == "solo"


@pytest.mark.asyncio
async def test_header_visibility_load_and_optimistic_toggle():
    backend = FakeBackend(visible=False)
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), MemoryStorage())
        await store.load_header_visibility()
        assert store.is_header_visible is False

        await store.toggle_header_visibility()
        assert backend.puts("/settings/nav-bar-visibility") == [{"visible": True}]

        backend.down = True
        await store.toggle_header_visibility()

    assert store.is_header_visible is False


@pytest.mark.asyncio
async def test_available_panes_exclude_tree_and_sidebars():
    backend = FakeBackend(
        layout={"id": "t", "type": "pane", "component": "terminal"},
        sidebar={"left": ["connections"], "right": ["editor"]},
    )
    async with backend.http() as http:
        store = LayoutStore(SettingsClient(http=http), MemoryStorage())
        await store.initialize_layout()

    assert store.used_panes == {"terminal", "connections", "editor"}
    assert "terminal" not in store.available_panes
    assert "fileManager" in store.available_panes

    store.toggle_layout_visibility()
    assert store.is_layout_visible is False


@pytest.mark.asyncio
async def test_file_storage_survives_between_stores(tmp_path):
    storage = FileStorage(tmp_path / "local" / "storage.json")
    backend = FakeBackend(layout=_layout_without_ids())
    async with backend.http() as http:
        await LayoutStore(SettingsClient(http=http), storage).initialize_layout()

    offline = FakeBackend(down=True)
    async with offline.http() as http:
        store = LayoutStore(SettingsClient(http=http), FileStorage(tmp_path / "local" / "storage.json"))
        await store.initialize_layout()

    assert store.layout_source is LayoutSource.LOCAL_OK
    assert store.layout_tree.pane_names() == {"terminal", "editor", "fileManager"}
