# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Connection service – business rules between the router and the repository.

* Plaintext secrets from API requests are encrypted here; the repository only
  ever receives ciphertext.
* Connection names are unique when present (checked before insert/update).
* Tag assignment is delegated to the transactional
  ``repository.update_connection_tags``.
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from core.logger import logger
from core.security import encrypt_optional
from database import unix_now
from connections import repository as repo
from connections.schemas import (
    ConnectionCreate,
    ConnectionCreateData,
    ConnectionUpdate,
    ConnectionUpdateData,
    ConnectionWithTags,
    ImportResult,
    TagRef,
)
from models.connection import ConnectionTag
from models.tag import Tag

# NOT NULL columns; an explicit null in an update is rejected.
_REQUIRED_FIELDS = ("type", "host", "port", "username", "auth_method")


def _normalized_name(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    name = name.strip()
    return name or None


def _ensure_name_available(db: Session, name: Optional[str], own_id: Optional[int] = None) -> None:
    if not name:
        return
    existing = repo.find_connection_by_name(db, name)
    if existing and existing.id != own_id:
        raise ConflictError(f'A connection named "{name}" already exists')


def _check_tags_exist(db: Session, tag_ids: Sequence[int]) -> None:
    wanted = {t for t in tag_ids if isinstance(t, int) and t > 0}
    if not wanted:
        return
    found = {tag_id for (tag_id,) in db.query(Tag.id).filter(Tag.id.in_(wanted)).all()}
    missing = sorted(wanted - found)
    if missing:
        raise ValidationError(f"Unknown tag id(s): {missing}")


def _check_auth_fields(body: ConnectionCreate) -> None:
    if body.type != "SSH":
        return
    if body.auth_method == "key" and not body.private_key and body.ssh_key_id is None:
        raise ValidationError("Key authentication needs a private_key or an ssh_key_id")


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def get_all_connections(db: Session) -> List[ConnectionWithTags]:
    return repo.find_all_connections_with_tags(db)


def get_connection(db: Session, connection_id: int) -> ConnectionWithTags:
    connection = repo.find_connection_by_id_with_tags(db, connection_id)
    if connection is None:
        raise NotFoundError("Connection not found")
    return connection


def get_connection_tags(db: Session, connection_id: int) -> List[TagRef]:
    get_connection(db, connection_id)
    return repo.find_connection_tags(db, connection_id)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def create_connection(db: Session, body: ConnectionCreate) -> ConnectionWithTags:
    name = _normalized_name(body.name)
    _ensure_name_available(db, name)
    _check_auth_fields(body)
    _check_tags_exist(db, body.tag_ids)

    data = ConnectionCreateData(
        name=name,
        type=body.type,
        host=body.host.strip(),
        port=body.port,
        username=body.username,
        auth_method=body.auth_method,
        encrypted_password=encrypt_optional(body.password),
        encrypted_private_key=encrypt_optional(body.private_key),
        encrypted_passphrase=encrypt_optional(body.passphrase),
        proxy_id=body.proxy_id,
        proxy_type=body.proxy_type,
        ssh_key_id=body.ssh_key_id,
        notes=body.notes,
        jump_chain=body.jump_chain,
        tag_ids=body.tag_ids,
    )
    connection_id = repo.create_connection(db, data)
    return get_connection(db, connection_id)


def update_connection(db: Session, connection_id: int, body: ConnectionUpdate) -> ConnectionWithTags:
    get_connection(db, connection_id)
    provided = body.model_dump(exclude_unset=True)

    nulled = [f for f in _REQUIRED_FIELDS if f in provided and provided[f] is None]
    if nulled:
        raise ValidationError(f"Field(s) cannot be null: {', '.join(nulled)}", fields=nulled)

    if "name" in provided:
        provided["name"] = _normalized_name(provided["name"])
        _ensure_name_available(db, provided["name"], own_id=connection_id)

    # Plaintext secrets → ciphertext columns.  An explicit null clears them.
    for plain_field, column in (
        ("password", "encrypted_password"),
        ("private_key", "encrypted_private_key"),
        ("passphrase", "encrypted_passphrase"),
    ):
        if plain_field in provided:
            provided[column] = encrypt_optional(provided.pop(plain_field))

    tag_ids = provided.pop("tag_ids", None)
    if tag_ids is not None:
        _check_tags_exist(db, tag_ids)
    changes = ConnectionUpdateData(**provided)
    if changes.model_fields_set:
        repo.update_connection(db, connection_id, changes)
    if tag_ids is not None:
        repo.update_connection_tags(db, connection_id, tag_ids)
    return get_connection(db, connection_id)


def delete_connection(db: Session, connection_id: int) -> None:
    if not repo.delete_connection(db, connection_id):
        raise NotFoundError("Connection not found")


def set_connection_tags(db: Session, connection_id: int, tag_ids: Sequence[int]) -> List[TagRef]:
    _check_tags_exist(db, tag_ids)
    if not repo.update_connection_tags(db, connection_id, tag_ids):
        raise NotFoundError("Connection not found")
    return repo.find_connection_tags(db, connection_id)


def mark_connected(db: Session, connection_id: int) -> int:
    """Stamp ``last_connected_at`` with the current time and return it."""
    now = unix_now()
    if not repo.update_last_connected(db, connection_id, now):
        raise NotFoundError("Connection not found")
    return now


def add_tag_to_connections(db: Session, connection_ids: Sequence[int], tag_id: int) -> None:
    if db.query(Tag.id).filter(Tag.id == tag_id).first() is None:
        raise NotFoundError("Tag not found")
    repo.add_tag_to_multiple_connections(db, connection_ids, tag_id)


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def import_connections(
    db: Session,
    rows: Sequence[ConnectionCreateData],
    tag_names: Sequence[Sequence[str]],
    skipped_invalid: int = 0,
) -> ImportResult:
    """
    Insert parsed import rows in one transaction and link their tags.

    *tag_names* is parallel to *rows*; unknown tag names are created.  Rows
    whose name already exists (in the table or earlier in the batch) are
    skipped.  Any failure rolls the whole import back.
    """
    seen_names = set()
    accepted: List[ConnectionCreateData] = []
    accepted_tags: List[Sequence[str]] = []
    skipped_duplicates = 0
    for data, names in zip(rows, tag_names):
        if data.name and (data.name in seen_names or repo.find_connection_by_name(db, data.name)):
            skipped_duplicates += 1
            continue
        if data.name:
            seen_names.add(data.name)
        accepted.append(data)
        accepted_tags.append(names)

    try:
        tag_cache: Dict[str, int] = {}
        results = repo.bulk_insert_connections(db, accepted)
        links = []
        for result, names in zip(results, accepted_tags):
            for tag_name in dict.fromkeys(n.strip() for n in names if n and n.strip()):
                links.append((result.connection_id, _tag_id_for_import(db, tag_name, tag_cache)))
        _link_tags(db, links)
        db.commit()
    except (StorageError, SQLAlchemyError):
        try:
            db.rollback()
        except SQLAlchemyError as rollback_exc:
            logger.error("Rollback of connection import failed: %s", rollback_exc)
        raise

    logger.info(
        "Imported %d connection(s) (skipped %d duplicates, %d invalid)",
        len(results), skipped_duplicates, skipped_invalid,
    )
    return ImportResult(
        imported=len(results),
        skipped_duplicates=skipped_duplicates,
        skipped_invalid=skipped_invalid,
    )


def _tag_id_for_import(db: Session, name: str, cache: Dict[str, int]) -> int:
    if name not in cache:
        tag = db.query(Tag).filter(Tag.name == name).first()
        if tag is None:
            now = unix_now()
            tag = Tag(name=name, created_at=now, updated_at=now)
            db.add(tag)
            db.flush()
        cache[name] = tag.id
    return cache[name]


def _link_tags(db: Session, links: Sequence[tuple]) -> None:
    for connection_id, tag_id in links:
        db.add(ConnectionTag(connection_id=connection_id, tag_id=tag_id))
    db.flush()
