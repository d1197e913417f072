# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the tag endpoints."""

from typing import List

from pydantic import BaseModel, Field


# -- Requests --------------------------------------------------------------


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class TagUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=255)


class TagConnectionsUpdate(BaseModel):
    connection_ids: List[int]


# -- Responses -------------------------------------------------------------


class TagResponse(BaseModel):
    id: int
    name: str
    created_at: int
    updated_at: int

    model_config = {"from_attributes": True}


class TagListResponse(BaseModel):
    tags: List[TagResponse]
