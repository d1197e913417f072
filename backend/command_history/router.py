# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Command-history endpoints.  JWT required on every route."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from core.security import get_current_user
from command_history import service
from command_history.schemas import (
    CommandHistoryCreate,
    CommandHistoryEntry,
    CommandHistoryListResponse,
)

router = APIRouter(
    prefix="/command-history",
    tags=["command-history"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=CommandHistoryListResponse)
def list_history(db: Session = Depends(get_db)):
    entries = [CommandHistoryEntry.model_validate(e) for e in service.get_all_command_history(db)]
    return CommandHistoryListResponse(entries=entries)


@router.post("", status_code=status.HTTP_201_CREATED)
def add_history(body: CommandHistoryCreate, db: Session = Depends(get_db)):
    """Empty / whitespace-only commands are rejected with 400."""
    return {"id": service.add_command_history(db, body.command)}


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_history_entry(entry_id: int, db: Session = Depends(get_db)):
    if not service.delete_command_history_by_id(db, entry_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="History entry not found")


@router.delete("")
def clear_history(db: Session = Depends(get_db)):
    return {"deleted": service.clear_all_command_history(db)}
