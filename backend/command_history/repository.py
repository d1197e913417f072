# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Command-history repository.  The command text is the natural key."""

from typing import List

from sqlalchemy import insert
from sqlalchemy.dialects import mysql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StorageError
from core.logger import logger
from database import unix_now
from models.command_history import CommandHistory


def _upsert_statement(db: Session, command: str, now: int):
    """Dialect-native INSERT ... ON CONFLICT, or None where there is none."""
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        stmt = sqlite.insert(CommandHistory).values(command=command, timestamp=now)
        return stmt.on_conflict_do_update(
            index_elements=[CommandHistory.command],
            set_={"timestamp": stmt.excluded.timestamp},
        )
    if dialect == "mysql":
        stmt = mysql.insert(CommandHistory).values(command=command, timestamp=now)
        return stmt.on_duplicate_key_update(timestamp=stmt.inserted.timestamp)
    return None


def _insert_or_touch(db: Session, command: str, now: int) -> None:
    try:
        db.execute(insert(CommandHistory).values(command=command, timestamp=now))
    except IntegrityError:
        # Another writer stored the same text first.
        db.rollback()
        db.query(CommandHistory).filter(CommandHistory.command == command).update(
            {"timestamp": now}, synchronize_session=False
        )


def upsert_command(db: Session, command: str) -> int:
    """
    Insert *command*, or refresh the timestamp of the row that already holds
    exactly this text.  Returns the row id either way.

    The unique index on ``command`` makes this safe against concurrent
    writers: the insert and the timestamp refresh are one statement.
    """
    now = unix_now()
    try:
        stmt = _upsert_statement(db, command, now)
        if stmt is None:
            _insert_or_touch(db, command, now)
        else:
            db.execute(stmt)
        entry_id = (
            db.query(CommandHistory.id)
            .filter(CommandHistory.command == command)
            .scalar()
        )
        if entry_id is None:
            # MySQL only: a different command sharing the indexed prefix.
            raise StorageError("Command collides with an existing history entry")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to upsert command history entry: %s", exc)
        raise StorageError("Failed to save command history") from exc
    except StorageError:
        db.rollback()
        logger.error("Command history prefix collision for %r", command[:80])
        raise
    return entry_id


def get_all_commands(db: Session) -> List[CommandHistory]:
    try:
        return (
            db.query(CommandHistory)
            .order_by(CommandHistory.timestamp.asc(), CommandHistory.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to query command history: %s", exc)
        raise StorageError("Failed to fetch command history") from exc


def delete_command_by_id(db: Session, entry_id: int) -> bool:
    try:
        removed = (
            db.query(CommandHistory)
            .filter(CommandHistory.id == entry_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to delete command history entry %s: %s", entry_id, exc)
        raise StorageError("Failed to delete command history entry") from exc
    return removed > 0


def clear_all_commands(db: Session) -> int:
    try:
        removed = db.query(CommandHistory).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to clear command history: %s", exc)
        raise StorageError("Failed to clear command history") from exc
    return removed
