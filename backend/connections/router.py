# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Connection endpoints – CRUD, tag assignment, last-connected stamping and
Excel import/export.

Security invariants
-------------------
* JWT is required on every endpoint (router-level ``get_current_user``).
* Responses never contain secrets, not even in encrypted form.
* Audit rows mask every secret field.
"""

import io

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from database import get_db
from core.audit import record_audit
from core.security import get_current_user
from connections import service
from connections.schemas import (
    AddTagToConnectionsRequest,
    ConnectionCreate,
    ConnectionListResponse,
    ConnectionTagsUpdate,
    ConnectionUpdate,
    ConnectionWithTags,
    ImportResult,
    TagRef,
)
from connections.transfer import WorkbookFormatError, export_connections, parse_connections_workbook
from models.user import User
from tags import repository as tag_repo

router = APIRouter(
    prefix="/connections",
    tags=["connections"],
    dependencies=[Depends(get_current_user)],
)

_SECRET_FIELDS = ("password", "private_key", "passphrase")


def _describe(body, fields) -> str:
    parts = []
    for name in fields:
        if name in _SECRET_FIELDS:
            parts.append(f"{name}=******")
        else:
            parts.append(f"{name}={getattr(body, name)}")
    return ", ".join(parts)


# ---------------------------------------------------------------------------
# GET /connections  – list
# ---------------------------------------------------------------------------


@router.get("", response_model=ConnectionListResponse)
def list_connections(db: Session = Depends(get_db)):
    return ConnectionListResponse(connections=service.get_all_connections(db))


# ---------------------------------------------------------------------------
# POST /connections  – create
# ---------------------------------------------------------------------------


@router.post("", response_model=ConnectionWithTags, status_code=status.HTTP_201_CREATED)
def create_connection(
    body: ConnectionCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Encrypt the supplied secrets and persist the connection."""
    connection = service.create_connection(db, body)
    detail = f"connection_id={connection.id}, " + _describe(body, sorted(body.model_fields_set))
    record_audit(db, current_user.id, "connection_create", detail, request)
    return connection


# ---------------------------------------------------------------------------
# GET /connections/export  – download as .xlsx
# ---------------------------------------------------------------------------
# Declared before /{connection_id} so "export" is not parsed as an id.


@router.get("/export")
def export_all(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    connections = service.get_all_connections(db)
    tag_names = {tag.id: tag.name for tag in tag_repo.find_all_tags(db)}
    payload = export_connections(connections, tag_names)

    record_audit(
        db,
        current_user.id,
        "connection_export",
        f"Exported {len(connections)} connection(s) to Excel",
        request,
    )
    return StreamingResponse(
        io.BytesIO(payload),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="connections.xlsx"'},
    )


# ---------------------------------------------------------------------------
# POST /connections/import  – bulk-create from .xlsx
# ---------------------------------------------------------------------------


@router.post("/import", response_model=ImportResult)
async def import_all(
    request: Request,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Accept an .xlsx with the export's column layout.  All rows are inserted
    in one transaction; a failing row aborts the whole import.
    """
    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .xlsx files are accepted",
        )

    raw = await file.read()
    try:
        parsed = parse_connections_workbook(raw)
    except WorkbookFormatError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    result = service.import_connections(db, parsed.rows, parsed.tag_names, parsed.skipped_invalid)
    record_audit(
        db,
        current_user.id,
        "connection_import",
        f"Imported {result.imported} connection(s) from Excel "
        f"(skipped {result.skipped_duplicates} duplicates, {result.skipped_invalid} invalid)",
        request,
    )
    return result


# ---------------------------------------------------------------------------
# POST /connections/add-tag  – tag many connections at once
# ---------------------------------------------------------------------------


@router.post("/add-tag", status_code=status.HTTP_204_NO_CONTENT)
def add_tag(
    body: AddTagToConnectionsRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service.add_tag_to_connections(db, body.connection_ids, body.tag_id)
    record_audit(
        db,
        current_user.id,
        "connection_add_tag",
        f"tag_id={body.tag_id}, connection_ids={body.connection_ids}",
        request,
    )


# ---------------------------------------------------------------------------
# /connections/{id}
# ---------------------------------------------------------------------------


@router.get("/{connection_id}", response_model=ConnectionWithTags)
def get_connection(connection_id: int, db: Session = Depends(get_db)):
    return service.get_connection(db, connection_id)


@router.put("/{connection_id}", response_model=ConnectionWithTags)
def update_connection(
    connection_id: int,
    body: ConnectionUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Partial update – only explicitly provided fields change."""
    connection = service.update_connection(db, connection_id, body)
    detail = f"connection_id={connection_id}, " + _describe(body, sorted(body.model_fields_set))
    record_audit(db, current_user.id, "connection_update", detail, request)
    return connection


@router.delete("/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_connection(
    connection_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service.delete_connection(db, connection_id)
    record_audit(db, current_user.id, "connection_delete", f"connection_id={connection_id}", request)


@router.get("/{connection_id}/tags", response_model=list[TagRef])
def get_connection_tags(connection_id: int, db: Session = Depends(get_db)):
    return service.get_connection_tags(db, connection_id)


@router.put("/{connection_id}/tags", response_model=list[TagRef])
def set_connection_tags(
    connection_id: int,
    body: ConnectionTagsUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tags = service.set_connection_tags(db, connection_id, body.tag_ids)
    record_audit(
        db,
        current_user.id,
        "connection_tags_update",
        f"connection_id={connection_id}, tag_ids={[t.id for t in tags]}",
        request,
    )
    return tags


@router.post("/{connection_id}/connect")
def mark_connected(connection_id: int, db: Session = Depends(get_db)):
    """Called when a session to this connection is opened."""
    return {"last_connected_at": service.mark_connected(db, connection_id)}
