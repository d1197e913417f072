# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Connection repository – SQL access to ``connections`` and ``connection_tags``.

Every function takes the request's ``Session`` as first argument.  Single
statements are committed here; the two tag transactions commit or roll back
as a unit; ``bulk_insert_connections`` only flushes and leaves the commit to
its caller.

Driver errors are logged with context and re-raised as ``StorageError`` with a
generic message.  "Not found" is a ``None`` / ``False`` return, not an error.
"""

import enum
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Union

from sqlalchemy import func, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StorageError
from core.logger import logger
from database import unix_now
from connections.mapper import (
    serialize_jump_chain,
    to_connection_base,
    to_connection_with_tags,
    to_full_connection,
)
from connections.schemas import (
    ConnectionBase,
    ConnectionCreateData,
    ConnectionUpdateData,
    ConnectionWithTags,
    FullConnection,
    TagRef,
)
from models.connection import Connection, ConnectionTag
from models.proxy import Proxy
from models.tag import Tag


class ConnectionField(str, enum.Enum):
    """Columns ``update_connection`` is allowed to write."""

    NAME = "name"
    TYPE = "type"
    HOST = "host"
    PORT = "port"
    USERNAME = "username"
    AUTH_METHOD = "auth_method"
    ENCRYPTED_PASSWORD = "encrypted_password"
    ENCRYPTED_PRIVATE_KEY = "encrypted_private_key"
    ENCRYPTED_PASSPHRASE = "encrypted_passphrase"
    PROXY_ID = "proxy_id"
    PROXY_TYPE = "proxy_type"
    SSH_KEY_ID = "ssh_key_id"
    NOTES = "notes"
    JUMP_CHAIN = "jump_chain"


# Managed elsewhere: identity, creation stamp, update_last_connected,
# update_connection_tags, and updated_at which is always refreshed here.
_NON_UPDATABLE = {"id", "created_at", "last_connected_at", "tag_ids", "updated_at"}


@dataclass
class BulkInsertResult:
    connection_id: int
    original: ConnectionCreateData


def _tag_ids_aggregate():
    return func.group_concat(ConnectionTag.tag_id).label("tag_ids_str")


def _valid_ids(ids: Sequence[Any]) -> List[int]:
    """Positive ints only, first occurrence wins."""
    seen: dict[int, None] = {}
    for value in ids:
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            seen.setdefault(value, None)
    return list(seen)


def _rollback_quietly(db: Session, what: str) -> None:
    try:
        db.rollback()
        logger.info("Transaction rolled back for %s", what)
    except SQLAlchemyError as rollback_exc:
        logger.error("Rollback failed for %s: %s", what, rollback_exc)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def find_all_connections_with_tags(db: Session) -> List[ConnectionWithTags]:
    """All connections with their tag ids, ordered by name."""
    try:
        rows = (
            db.query(Connection, _tag_ids_aggregate())
            .outerjoin(ConnectionTag, ConnectionTag.connection_id == Connection.id)
            .group_by(Connection.id)
            .order_by(Connection.name.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to query connection list: %s", exc)
        raise StorageError("Failed to fetch connection list") from exc
    return [to_connection_with_tags(row, tag_ids_str) for row, tag_ids_str in rows]


def find_connection_by_id_with_tags(db: Session, connection_id: int) -> Optional[ConnectionWithTags]:
    try:
        row = (
            db.query(Connection, _tag_ids_aggregate())
            .outerjoin(ConnectionTag, ConnectionTag.connection_id == Connection.id)
            .filter(Connection.id == connection_id)
            .group_by(Connection.id)
            .first()
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to query connection %s: %s", connection_id, exc)
        raise StorageError("Failed to fetch connection") from exc
    if row is None:
        return None
    connection, tag_ids_str = row
    return to_connection_with_tags(connection, tag_ids_str)


def find_full_connection_by_id(db: Session, connection_id: int) -> Optional[FullConnection]:
    """Connection plus its proxy (secrets included) – used to open a session."""
    try:
        row = (
            db.query(Connection, Proxy)
            .outerjoin(Proxy, Connection.proxy_id == Proxy.id)
            .filter(Connection.id == connection_id)
            .first()
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to query full connection %s: %s", connection_id, exc)
        raise StorageError("Failed to fetch connection details") from exc
    if row is None:
        return None
    connection, proxy = row
    return to_full_connection(connection, proxy)


def find_connection_by_name(db: Session, name: str) -> Optional[ConnectionBase]:
    """Base fields only; used for uniqueness checks before create/update."""
    try:
        row = db.query(Connection).filter(Connection.name == name).first()
    except SQLAlchemyError as exc:
        logger.error("Failed to query connection by name %r: %s", name, exc)
        raise StorageError("Failed to look up connection name") from exc
    return to_connection_base(row) if row is not None else None


def find_connection_tags(db: Session, connection_id: int) -> List[TagRef]:
    try:
        rows = (
            db.query(Tag.id, Tag.name)
            .join(ConnectionTag, ConnectionTag.tag_id == Tag.id)
            .filter(ConnectionTag.connection_id == connection_id)
            .order_by(Tag.name.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        logger.error("Failed to query tags of connection %s: %s", connection_id, exc)
        raise StorageError("Failed to fetch connection tags") from exc
    return [TagRef(id=tag_id, name=name) for tag_id, name in rows]


# ---------------------------------------------------------------------------
# Single-statement writes
# ---------------------------------------------------------------------------


def _new_connection_row(data: ConnectionCreateData, now: int) -> Connection:
    return Connection(
        name=data.name,
        type=data.type,
        host=data.host,
        port=data.port,
        username=data.username,
        auth_method=data.auth_method,
        encrypted_password=data.encrypted_password,
        encrypted_private_key=data.encrypted_private_key,
        encrypted_passphrase=data.encrypted_passphrase,
        proxy_id=data.proxy_id,
        proxy_type=data.proxy_type,
        ssh_key_id=data.ssh_key_id,
        notes=data.notes,
        jump_chain=serialize_jump_chain(data.jump_chain),
        created_at=now,
        updated_at=now,
    )


def create_connection(db: Session, data: ConnectionCreateData) -> int:
    """Insert one connection and link ``data.tag_ids`` in the same commit."""
    row = _new_connection_row(data, unix_now())
    try:
        db.add(row)
        db.flush()
        tag_ids = _valid_ids(data.tag_ids)
        if tag_ids:
            db.execute(
                insert(ConnectionTag),
                [{"connection_id": row.id, "tag_id": tag_id} for tag_id in tag_ids],
            )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to insert connection %r: %s", data.name, exc)
        raise StorageError("Failed to create connection record") from exc

    if not isinstance(row.id, int) or row.id <= 0:
        logger.error("Insert of connection %r produced no valid id", data.name)
        raise StorageError("Failed to create connection record")
    logger.info("Created connection id=%s name=%r", row.id, data.name)
    return row.id


def _updatable_changes(
    data: Union[ConnectionUpdateData, Mapping[Union[str, ConnectionField], Any]],
) -> dict[ConnectionField, Any]:
    if isinstance(data, ConnectionUpdateData):
        data = data.model_dump(exclude_unset=True)

    changes: dict[ConnectionField, Any] = {}
    for key, value in data.items():
        name = key.value if isinstance(key, ConnectionField) else str(key)
        if name in _NON_UPDATABLE:
            continue
        try:
            changes[ConnectionField(name)] = value
        except ValueError:
            logger.warning("update_connection: ignoring unknown field %r", name)
    return changes


def update_connection(
    db: Session,
    connection_id: int,
    data: Union[ConnectionUpdateData, Mapping[Union[str, ConnectionField], Any]],
) -> bool:
    """
    Partial update of the fields present in *data*.

    Returns False without issuing any SQL when nothing updatable was given,
    otherwise whether a row matched.  ``updated_at`` is always refreshed.
    """
    changes = _updatable_changes(data)
    if not changes:
        logger.warning("update_connection called for id=%s with no fields to update", connection_id)
        return False

    values: dict[str, Any] = {}
    for field, value in changes.items():
        if field is ConnectionField.JUMP_CHAIN:
            values[field.value] = serialize_jump_chain(value)
        else:
            values[field.value] = value
    values["updated_at"] = unix_now()

    try:
        affected = (
            db.query(Connection)
            .filter(Connection.id == connection_id)
            .update(values, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to update connection %s: %s", connection_id, exc)
        raise StorageError("Failed to update connection record") from exc
    return affected > 0


def delete_connection(db: Session, connection_id: int) -> bool:
    """Delete a connection and its tag associations."""
    try:
        db.query(ConnectionTag).filter(
            ConnectionTag.connection_id == connection_id
        ).delete(synchronize_session=False)
        removed = (
            db.query(Connection)
            .filter(Connection.id == connection_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to delete connection %s: %s", connection_id, exc)
        raise StorageError("Failed to delete connection record") from exc
    return removed > 0


def update_last_connected(db: Session, connection_id: int, timestamp: int) -> bool:
    try:
        affected = (
            db.query(Connection)
            .filter(Connection.id == connection_id)
            .update({"last_connected_at": timestamp}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to update last_connected_at of connection %s: %s", connection_id, exc)
        raise StorageError("Failed to update last connected time") from exc
    if affected == 0:
        logger.warning("update_last_connected: no connection with id=%s", connection_id)
    return affected > 0


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def update_connection_tags(db: Session, connection_id: int, tag_ids: Sequence[int]) -> bool:
    """
    Replace every tag association of a connection.

    Returns False (nothing mutated) when the connection does not exist.  The
    delete and the inserts commit together; on failure the transaction is
    rolled back and the original error re-raised.
    """
    try:
        exists = db.query(Connection.id).filter(Connection.id == connection_id).first()
    except SQLAlchemyError as exc:
        logger.error("Failed to check existence of connection %s: %s", connection_id, exc)
        raise StorageError("Failed to check whether the connection exists") from exc
    if exists is None:
        logger.warning("update_connection_tags: connection id=%s not found", connection_id)
        return False

    valid_ids = _valid_ids(tag_ids)
    try:
        db.query(ConnectionTag).filter(
            ConnectionTag.connection_id == connection_id
        ).delete(synchronize_session=False)
        if valid_ids:
            db.execute(
                insert(ConnectionTag),
                [{"connection_id": connection_id, "tag_id": tag_id} for tag_id in valid_ids],
            )
        db.commit()
    except Exception as exc:
        logger.error("Tag update transaction failed for connection %s: %s", connection_id, exc)
        _rollback_quietly(db, f"tag update of connection {connection_id}")
        raise
    return True


def bulk_insert_connections(
    db: Session,
    connections: Sequence[ConnectionCreateData],
) -> List[BulkInsertResult]:
    """
    Insert many connections inside the caller's transaction.

    Flushes after each row to obtain its id but never commits.  The first row
    that fails aborts the batch with a ``StorageError`` naming it; rolling back
    is the caller's job.
    """
    results: List[BulkInsertResult] = []
    now = unix_now()
    for data in connections:
        row = _new_connection_row(data, now)
        try:
            db.add(row)
            db.flush()
        except SQLAlchemyError as exc:
            logger.error("Bulk insert of connection %r failed: %s", data.name, exc)
            raise StorageError(f'Failed to bulk insert connection "{data.name}"') from exc
        if not isinstance(row.id, int) or row.id <= 0:
            logger.error("Bulk insert of connection %r produced no valid id", data.name)
            raise StorageError(f'Failed to bulk insert connection "{data.name}"')
        results.append(BulkInsertResult(connection_id=row.id, original=data))
    return results


def add_tag_to_multiple_connections(db: Session, connection_ids: Sequence[int], tag_id: int) -> None:
    """
    Attach *tag_id* to every connection in *connection_ids* in one
    transaction.  Existing associations are left alone (insert-or-ignore).
    """
    ids = _valid_ids(connection_ids)
    if not ids or not _valid_ids([tag_id]):
        logger.warning("add_tag_to_multiple_connections called with no connection ids or an invalid tag id")
        return

    try:
        already_tagged = {
            connection_id
            for (connection_id,) in db.query(ConnectionTag.connection_id)
            .filter(ConnectionTag.tag_id == tag_id, ConnectionTag.connection_id.in_(ids))
            .all()
        }
        rows = [
            {"connection_id": connection_id, "tag_id": tag_id}
            for connection_id in ids
            if connection_id not in already_tagged
        ]
        if rows:
            db.execute(insert(ConnectionTag), rows)
        db.commit()
    except SQLAlchemyError as exc:
        logger.error("Failed to add tag %s to multiple connections: %s", tag_id, exc)
        _rollback_quietly(db, f"bulk tag insert of tag {tag_id}")
        raise StorageError(f"Failed to add tag to multiple connections: {exc}") from exc
