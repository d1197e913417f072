# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Tag repository – CRUD over ``tags`` and the tag side of ``connection_tags``."""

from typing import List, Optional, Sequence

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StorageError
from core.logger import logger
from database import unix_now
from models.connection import Connection, ConnectionTag
from models.tag import Tag


def find_all_tags(db: Session) -> List[Tag]:
    try:
        return db.query(Tag).order_by(Tag.name.asc()).all()
    except SQLAlchemyError as exc:
        logger.error("Failed to query tag list: %s", exc)
        raise StorageError("Failed to fetch tag list") from exc


def find_tag_by_id(db: Session, tag_id: int) -> Optional[Tag]:
    try:
        return db.query(Tag).filter(Tag.id == tag_id).first()
    except SQLAlchemyError as exc:
        logger.error("Failed to query tag %s: %s", tag_id, exc)
        raise StorageError("Failed to fetch tag") from exc


def find_tag_by_name(db: Session, name: str) -> Optional[Tag]:
    try:
        return db.query(Tag).filter(Tag.name == name).first()
    except SQLAlchemyError as exc:
        logger.error("Failed to query tag by name %r: %s", name, exc)
        raise StorageError("Failed to look up tag name") from exc


def create_tag(db: Session, name: str) -> Tag:
    now = unix_now()
    tag = Tag(name=name, created_at=now, updated_at=now)
    try:
        db.add(tag)
        db.commit()
        db.refresh(tag)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to insert tag %r: %s", name, exc)
        raise StorageError("Failed to create tag") from exc
    return tag


def update_tag(db: Session, tag_id: int, name: str) -> bool:
    try:
        affected = (
            db.query(Tag)
            .filter(Tag.id == tag_id)
            .update({"name": name, "updated_at": unix_now()}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to update tag %s: %s", tag_id, exc)
        raise StorageError("Failed to update tag") from exc
    return affected > 0


def delete_tag(db: Session, tag_id: int) -> bool:
    """Delete a tag together with its connection associations."""
    try:
        db.query(ConnectionTag).filter(ConnectionTag.tag_id == tag_id).delete(synchronize_session=False)
        removed = db.query(Tag).filter(Tag.id == tag_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to delete tag %s: %s", tag_id, exc)
        raise StorageError("Failed to delete tag") from exc
    return removed > 0


def find_tag_connection_ids(db: Session, tag_id: int) -> List[int]:
    try:
        rows = (
            db.query(ConnectionTag.connection_id)
            .filter(ConnectionTag.tag_id == tag_id)
            .order_by(ConnectionTag.connection_id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to query connections of tag %s: %s", tag_id, exc)
        raise StorageError("Failed to fetch tag connections") from exc
    return [connection_id for (connection_id,) in rows]


def update_tag_connections(db: Session, tag_id: int, connection_ids: Sequence[int]) -> bool:
    """
    Make *connection_ids* the exact set of connections carrying *tag_id*.

    Returns False when the tag does not exist.  Ids of connections that do
    not exist are skipped.  Delete and inserts commit together.
    """
    if find_tag_by_id(db, tag_id) is None:
        logger.warning("update_tag_connections: tag id=%s not found", tag_id)
        return False

    wanted = list(dict.fromkeys(i for i in connection_ids if isinstance(i, int) and i > 0))
    try:
        existing = {
            connection_id
            for (connection_id,) in db.query(Connection.id).filter(Connection.id.in_(wanted)).all()
        } if wanted else set()
        db.query(ConnectionTag).filter(ConnectionTag.tag_id == tag_id).delete(synchronize_session=False)
        rows = [{"connection_id": cid, "tag_id": tag_id} for cid in wanted if cid in existing]
        if rows:
            db.execute(insert(ConnectionTag), rows)
        db.commit()
    except SQLAlchemyError as exc:
        logger.error("Failed to replace connections of tag %s: %s", tag_id, exc)
        try:
            db.rollback()
        except SQLAlchemyError as rollback_exc:
            logger.error("Rollback failed for tag %s connection update: %s", tag_id, rollback_exc)
        raise StorageError("Failed to update tag connections") from exc
    return True
