# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Row mapping between the ``connections`` table and the records in
``connections.schemas``.

Two columns are not stored the way the rest of the code uses them:

* ``jump_chain`` is JSON text (``"[3, 7]"``) in the table and a list of ints
  everywhere above the repository.  An empty chain is stored as NULL.
* tag ids arrive as a ``GROUP_CONCAT`` aggregate (``"1,4,9"``).
"""

import json
from typing import Iterable, Optional

from core.logger import logger
from connections.schemas import (
    ConnectionBase,
    ConnectionWithTags,
    FullConnection,
    ProxyRecord,
)
from models.connection import Connection
from models.proxy import Proxy

_BASE_FIELDS = tuple(ConnectionBase.model_fields)


def parse_tag_ids(raw: Optional[str]) -> list[int]:
    """``"1,4,x,9"`` → ``[1, 4, 9]``; non-numeric fragments are dropped."""
    if not raw:
        return []
    tag_ids = []
    for fragment in str(raw).split(","):
        try:
            tag_ids.append(int(fragment.strip()))
        except ValueError:
            continue
    return tag_ids


def parse_jump_chain(raw: Optional[str]) -> Optional[list[int]]:
    """JSON text → list of ints, or None for NULL / empty / malformed values."""
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed jump_chain value %r", raw)
        return None
    if not isinstance(value, list):
        logger.warning("Ignoring non-list jump_chain value %r", raw)
        return None
    chain = [hop for hop in value if isinstance(hop, int) and not isinstance(hop, bool)]
    return chain or None


def serialize_jump_chain(chain: Optional[Iterable[int]]) -> Optional[str]:
    """List of ints → JSON text; None and empty lists both become NULL."""
    if not chain:
        return None
    return json.dumps([int(hop) for hop in chain])


def _base_values(row: Connection) -> dict:
    return {field: getattr(row, field) for field in _BASE_FIELDS}


def to_connection_base(row: Connection) -> ConnectionBase:
    return ConnectionBase(**_base_values(row))


def to_connection_with_tags(row: Connection, tag_ids_str: Optional[str]) -> ConnectionWithTags:
    return ConnectionWithTags(
        **_base_values(row),
        tag_ids=parse_tag_ids(tag_ids_str),
        jump_chain=parse_jump_chain(row.jump_chain),
    )


def to_full_connection(row: Connection, proxy: Optional[Proxy]) -> FullConnection:
    proxy_record = None
    if proxy is not None:
        proxy_record = ProxyRecord(
            id=proxy.id,
            name=proxy.name,
            type=proxy.type,
            host=proxy.host,
            port=proxy.port,
            username=proxy.username,
            encrypted_password=proxy.encrypted_password,
            encrypted_private_key=proxy.encrypted_private_key,
            encrypted_passphrase=proxy.encrypted_passphrase,
        )
    return FullConnection(
        **_base_values(row),
        encrypted_password=row.encrypted_password,
        encrypted_private_key=row.encrypted_private_key,
        encrypted_passphrase=row.encrypted_passphrase,
        jump_chain=parse_jump_chain(row.jump_chain),
        proxy=proxy_record,
    )
