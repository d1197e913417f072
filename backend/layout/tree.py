# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Dashboard layout tree.

On the wire (settings endpoint, local storage) the layout is nested JSON:

    {"id": "a1", "type": "container", "direction": "horizontal", "children": [
        {"id": "b2", "type": "pane", "component": "terminal", "size": 70},
        ...]}

In memory it is held as an arena – a flat ``id → LayoutNode`` table where a
container lists its children by id – so looking up a node and rewriting the
sizes of one container's children never walks or copies the whole tree.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

from core.logger import logger
from layout.panes import is_valid_pane_name

NODE_TYPES = ("pane", "container")
DIRECTIONS = ("horizontal", "vertical")

# Nested JSON deeper than this is rejected rather than recursed into.
MAX_DEPTH = 32


class LayoutError(ValueError):
    """The layout JSON does not describe a valid tree."""


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class LayoutNode:
    id: str
    type: str
    component: Optional[str] = None
    direction: Optional[str] = None
    size: Optional[float] = None
    children: List[str] = field(default_factory=list)


class LayoutTree:
    def __init__(self, root_id: str, nodes: Dict[str, LayoutNode]):
        if root_id not in nodes:
            raise LayoutError(f"root node {root_id!r} is not in the node table")
        self.root_id = root_id
        self.nodes = nodes

    # -- construction -------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Any) -> "LayoutTree":
        """
        Build a tree from nested JSON.  Nodes with a missing, empty or
        duplicate id get a freshly generated one; anything structurally wrong
        raises :class:`LayoutError`.
        """
        nodes: Dict[str, LayoutNode] = {}
        root_id = cls._ingest(data, nodes, depth=0)
        return cls(root_id, nodes)

    @classmethod
    def _ingest(cls, data: Any, nodes: Dict[str, LayoutNode], depth: int) -> str:
        if depth > MAX_DEPTH:
            raise LayoutError("layout tree is nested too deeply")
        if not isinstance(data, Mapping):
            raise LayoutError(f"layout node must be an object, got {type(data).__name__}")

        node_type = data.get("type")
        if node_type not in NODE_TYPES:
            raise LayoutError(f"unknown layout node type {node_type!r}")

        node_id = data.get("id")
        if not isinstance(node_id, str) or not node_id:
            node_id = cls._fresh_id(nodes)
            logger.warning("Layout node is missing an id, generated %s", node_id)
        elif node_id in nodes:
            duplicate, node_id = node_id, cls._fresh_id(nodes)
            logger.warning("Duplicate layout node id %s replaced by %s", duplicate, node_id)

        size = data.get("size")
        if isinstance(size, bool) or not isinstance(size, (int, float)):
            size = None

        node = LayoutNode(id=node_id, type=node_type, size=size)
        nodes[node_id] = node

        if node_type == "pane":
            component = data.get("component")
            if not is_valid_pane_name(component):
                raise LayoutError(f"unknown pane component {component!r}")
            node.component = component
            return node_id

        direction = data.get("direction")
        if direction not in DIRECTIONS:
            raise LayoutError(f"unknown container direction {direction!r}")
        node.direction = direction
        children = data.get("children") or []
        if not isinstance(children, list):
            raise LayoutError("container children must be a list")
        node.children = [cls._ingest(child, nodes, depth + 1) for child in children]
        return node_id

    @staticmethod
    def _fresh_id(nodes: Mapping[str, LayoutNode]) -> str:
        node_id = generate_id()
        while node_id in nodes:
            node_id = generate_id()
        return node_id

    # -- serialization ------------------------------------------------------

    def to_dict(self) -> dict:
        return self._node_dict(self.root_id)

    def _node_dict(self, node_id: str) -> dict:
        node = self.nodes[node_id]
        out: Dict[str, Any] = {"id": node.id, "type": node.type}
        if node.type == "pane":
            out["component"] = node.component
        else:
            out["direction"] = node.direction
            out["children"] = [self._node_dict(child) for child in node.children]
        if node.size is not None:
            out["size"] = node.size
        return out

    # -- queries ------------------------------------------------------------

    @property
    def root(self) -> LayoutNode:
        return self.nodes[self.root_id]

    def get(self, node_id: str) -> Optional[LayoutNode]:
        return self.nodes.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[LayoutNode]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LayoutTree):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def pane_names(self) -> Set[str]:
        """Every pane component placed somewhere in the tree."""
        return {node.component for node in self.nodes.values() if node.type == "pane" and node.component}

    # -- mutation -----------------------------------------------------------

    def update_child_sizes(self, container_id: str, child_sizes: Iterable[Any]) -> bool:
        """
        Set ``size`` on the listed children of one container.

        *child_sizes* holds ``{"index": i, "size": s}`` mappings (or
        ``(index, size)`` pairs).  Out-of-range indexes are ignored.  Returns
        whether any size actually changed; an unknown id or a pane id changes
        nothing.
        """
        container = self.nodes.get(container_id)
        if container is None or container.type != "container":
            return False

        pairs = [_index_size(item) for item in child_sizes]
        changed = False
        for index, size in pairs:
            if not 0 <= index < len(container.children):
                continue
            child = self.nodes[container.children[index]]
            if child.size != size:
                child.size = size
                changed = True
        return changed


def _index_size(item: Any) -> Tuple[int, float]:
    if isinstance(item, Mapping):
        return int(item["index"]), float(item["size"])
    index, size = item
    return int(index), float(size)


def default_layout() -> dict:
    """The built-in dashboard: sidebar widgets | terminal + files | editor."""

    def pane(component: str, size: float) -> dict:
        return {"id": generate_id(), "type": "pane", "component": component, "size": size}

    def column(size: float, children: List[dict]) -> dict:
        return {
            "id": generate_id(),
            "type": "container",
            "direction": "vertical",
            "size": size,
            "children": children,
        }

    return {
        "id": generate_id(),
        "type": "container",
        "direction": "horizontal",
        "children": [
            column(14.59, [
                pane("statusMonitor", 44.56),
                pane("commandHistory", 26.24),
                pane("quickCommands", 29.2),
            ]),
            column(58.03, [
                pane("terminal", 59.95),
                pane("commandBar", 5),
                pane("fileManager", 35.05),
            ]),
            column(27.38, [
                pane("editor", 100),
            ]),
        ],
    }
