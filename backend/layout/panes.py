# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""The fixed set of dashboard panes and sidebar-configuration validation."""

import enum
from typing import Any, Dict, List


class PaneName(str, enum.Enum):
    CONNECTIONS = "connections"
    TERMINAL = "terminal"
    COMMAND_BAR = "commandBar"
    FILE_MANAGER = "fileManager"
    EDITOR = "editor"
    STATUS_MONITOR = "statusMonitor"
    COMMAND_HISTORY = "commandHistory"
    QUICK_COMMANDS = "quickCommands"
    DOCKER_MANAGER = "dockerManager"
    SUSPENDED_SSH_SESSIONS = "suspendedSshSessions"


ALL_PANES: List[str] = [pane.value for pane in PaneName]


def default_sidebar_panes() -> Dict[str, List[str]]:
    return {
        "left": [PaneName.CONNECTIONS.value, PaneName.DOCKER_MANAGER.value],
        "right": [],
    }


def is_valid_pane_name(value: Any) -> bool:
    return isinstance(value, str) and value in ALL_PANES


def is_valid_pane_name_list(value: Any) -> bool:
    """A list of recognized pane names with no duplicates."""
    if not isinstance(value, list):
        return False
    seen = set()
    for item in value:
        if not is_valid_pane_name(item) or item in seen:
            return False
        seen.add(item)
    return True


def is_valid_sidebar_config(value: Any) -> bool:
    """
    ``{"left": [...], "right": [...]}`` with each side valid on its own.
    The same pane on both sides is accepted.
    """
    return (
        isinstance(value, dict)
        and is_valid_pane_name_list(value.get("left"))
        and is_valid_pane_name_list(value.get("right"))
    )
