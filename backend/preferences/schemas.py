# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
from typing import List

from pydantic import BaseModel, field_validator

from layout.panes import is_valid_pane_name_list


class SidebarConfig(BaseModel):
    left: List[str]
    right: List[str]

    @field_validator("left", "right")
    @classmethod
    def known_unique_panes(cls, v: List[str]) -> List[str]:
        if not is_valid_pane_name_list(v):
            raise ValueError("must list known pane names without duplicates")
        return v


class NavBarVisibility(BaseModel):
    visible: bool
