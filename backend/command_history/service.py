# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Command-history service – validation on top of the repository."""

from typing import List

from sqlalchemy.orm import Session

from command_history import repository
from core.exceptions import ValidationError
from models.command_history import CommandHistory


def add_command_history(db: Session, command: str) -> int:
    """
    Record a command.  Surrounding whitespace is stripped; re-adding a known
    command only moves it to the end of the history.
    """
    if not command or not command.strip():
        raise ValidationError("Command must not be empty", field="command")
    return repository.upsert_command(db, command.strip())


def get_all_command_history(db: Session) -> List[CommandHistory]:
    """Oldest first."""
    return repository.get_all_commands(db)


def delete_command_history_by_id(db: Session, entry_id: int) -> bool:
    return repository.delete_command_by_id(db, entry_id)


def clear_all_command_history(db: Session) -> int:
    return repository.clear_all_commands(db)
