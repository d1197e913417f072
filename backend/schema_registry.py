# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Ordered registry of every table the application owns.

``initialize_database`` walks it once at startup: create the table if it is
missing, then run its initializer (if any) in a session of its own.  Tables
are listed so that every foreign key points at a table created earlier.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from sqlalchemy import Table
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logger import logger
from appearance.repository import ensure_default_appearance_exists, initialize_preset_themes
from preferences.repository import ensure_default_settings_exist
from models.setting import Setting
from models.user import User
from models.audit_log import AuditLog
from models.proxy import Proxy, SshKey
from models.connection import Connection, ConnectionTag
from models.tag import Tag
from models.command_history import CommandHistory
from models.appearance import AppearanceSettings, TerminalTheme


@dataclass(frozen=True)
class TableDefinition:
    name: str
    table: Table
    init: Optional[Callable[[Session], None]] = None


TABLE_DEFINITIONS: List[TableDefinition] = [
    TableDefinition("settings", Setting.__table__, ensure_default_settings_exist),
    TableDefinition("users", User.__table__),
    TableDefinition("audit_logs", AuditLog.__table__),
    TableDefinition("proxies", Proxy.__table__),
    TableDefinition("ssh_keys", SshKey.__table__),
    TableDefinition("connections", Connection.__table__),
    TableDefinition("tags", Tag.__table__),
    TableDefinition("connection_tags", ConnectionTag.__table__),
    TableDefinition("command_history", CommandHistory.__table__),
    TableDefinition("terminal_themes", TerminalTheme.__table__, initialize_preset_themes),
    TableDefinition("appearance_settings", AppearanceSettings.__table__, ensure_default_appearance_exists),
]


def initialize_database(engine: Engine) -> None:
    """Create missing tables and seed defaults.  Safe to run repeatedly."""
    for definition in TABLE_DEFINITIONS:
        try:
            definition.table.create(bind=engine, checkfirst=True)
            if definition.init is not None:
                with Session(engine) as session:
                    definition.init(session)
                    session.commit()
        except SQLAlchemyError as exc:
            logger.error("Initializing table %s failed: %s", definition.name, exc)
            raise
    logger.info("Database initialized (%s tables)", len(TABLE_DEFINITIONS))
