# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the command-history endpoints."""

from typing import List

from pydantic import BaseModel


class CommandHistoryCreate(BaseModel):
    command: str


class CommandHistoryEntry(BaseModel):
    id: int
    command: str
    timestamp: int

    model_config = {"from_attributes": True}


class CommandHistoryListResponse(BaseModel):
    entries: List[CommandHistoryEntry]
