import pytest

from layout.tree import LayoutError, LayoutTree, default_layout


def _tree():
    return {
        "id": "root",
        "type": "container",
        "direction": "horizontal",
        "children": [
            {"id": "left", "type": "pane", "component": "terminal", "size": 60},
            {"type": "pane", "component": "editor", "size": 40},
        ],
    }


def test_missing_ids_are_assigned():
    tree = LayoutTree.from_dict(_tree())

    assert len(tree) == 3
    assert all(node.id for node in tree)
    assert tree.to_dict()["children"][1]["id"]


def test_duplicate_ids_are_replaced():
    data = _tree()
    data["children"][1]["id"] = "left"

    ids = [node.id for node in LayoutTree.from_dict(data)]

    assert len(ids) == len(set(ids)) == 3
    assert "left" in ids


def test_round_trip_keeps_ids_and_sizes():
    data = _tree()
    data["children"][1]["id"] = "right"

    assert LayoutTree.from_dict(data).to_dict() == data


@pytest.mark.parametrize("bad", [
    None,
    [],
    {"type": "window"},
    {"type": "pane", "component": "solitaire"},
    {"type": "container", "direction": "diagonal", "children": []},
    {"type": "container", "direction": "vertical", "children": "nope"},
])
def test_invalid_trees_raise(bad):
    with pytest.raises(LayoutError):
        LayoutTree.from_dict(bad)


def test_update_child_sizes_touches_only_listed_children():
    tree = LayoutTree.from_dict(_tree())

    changed = tree.update_child_sizes("root", [{"index": 0, "size": 70}, {"index": 5, "size": 1}])

    children = tree.to_dict()["children"]
    assert changed is True
    assert children[0]["size"] == 70
    assert children[1]["size"] == 40


def test_update_child_sizes_unknown_or_pane_or_unchanged():
    tree = LayoutTree.from_dict(_tree())

    assert tree.update_child_sizes("missing", [(0, 10)]) is False
    assert tree.update_child_sizes("left", [(0, 10)]) is False
    assert tree.update_child_sizes("root", [(0, 60)]) is False


def test_default_layout_is_valid():
    tree = LayoutTree.from_dict(default_layout())

    assert {"terminal", "editor", "fileManager"} <= tree.pane_names()
    assert tree.root.direction == "horizontal"
