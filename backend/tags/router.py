# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Tag endpoints – CRUD plus replacing the set of connections that carry a tag.

Every endpoint requires a valid JWT (router-level ``get_current_user``).
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from core.audit import record_audit
from core.security import get_current_user
from models.user import User
from tags import repository as tag_repo
from tags.schemas import (
    TagConnectionsUpdate,
    TagCreate,
    TagListResponse,
    TagResponse,
    TagUpdate,
)

router = APIRouter(
    prefix="/tags",
    tags=["tags"],
    dependencies=[Depends(get_current_user)],
)


def _existing_tag(tag_id: int, db: Session):
    tag = tag_repo.find_tag_by_id(db, tag_id)
    if not tag:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    return tag


# ---------------------------------------------------------------------------
# POST /tags  – create a tag
# ---------------------------------------------------------------------------


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
def create_tag(
    body: TagCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tag name must not be empty")
    if tag_repo.find_tag_by_name(db, name):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Tag name already exists")

    tag = tag_repo.create_tag(db, name)
    record_audit(db, current_user.id, "tag_create", f"tag_id={tag.id}, name={name}", request)
    return tag


# ---------------------------------------------------------------------------
# GET /tags  – list tags
# ---------------------------------------------------------------------------


@router.get("", response_model=TagListResponse)
def list_tags(db: Session = Depends(get_db)):
    return TagListResponse(tags=[TagResponse.model_validate(t) for t in tag_repo.find_all_tags(db)])


@router.get("/{tag_id}", response_model=TagResponse)
def get_tag(tag_id: int, db: Session = Depends(get_db)):
    return _existing_tag(tag_id, db)


# ---------------------------------------------------------------------------
# PUT /tags/{id}  – rename a tag
# ---------------------------------------------------------------------------


@router.put("/{tag_id}", response_model=TagResponse)
def update_tag(
    tag_id: int,
    body: TagUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _existing_tag(tag_id, db)
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Tag name must not be empty")
    clash = tag_repo.find_tag_by_name(db, name)
    if clash and clash.id != tag_id:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Tag name already exists")

    tag_repo.update_tag(db, tag_id, name)
    record_audit(db, current_user.id, "tag_update", f"tag_id={tag_id}, name={name}", request)
    return _existing_tag(tag_id, db)


# ---------------------------------------------------------------------------
# DELETE /tags/{id}
# ---------------------------------------------------------------------------


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(
    tag_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not tag_repo.delete_tag(db, tag_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")
    record_audit(db, current_user.id, "tag_delete", f"tag_id={tag_id}", request)


# ---------------------------------------------------------------------------
# PUT /tags/{id}/connections  – replace the connections carrying this tag
# ---------------------------------------------------------------------------


@router.put("/{tag_id}/connections")
def update_tag_connections(
    tag_id: int,
    body: TagConnectionsUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not tag_repo.update_tag_connections(db, tag_id, body.connection_ids):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag not found")

    connection_ids = tag_repo.find_tag_connection_ids(db, tag_id)
    record_audit(
        db,
        current_user.id,
        "tag_connections_update",
        f"tag_id={tag_id}, connection_ids={connection_ids}",
        request,
    )
    return {"tag_id": tag_id, "connection_ids": connection_ids}
