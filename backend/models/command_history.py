# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""CommandHistory ORM model – one row per distinct command text."""

from sqlalchemy import Column, Index, Integer, Text

from database import Base, unix_now


class CommandHistory(Base):
    __tablename__ = "command_history"
    # MySQL can only index a prefix of a TEXT column.
    __table_args__ = (
        Index("ux_command_history_command", "command", unique=True, mysql_length=255),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    command = Column(Text, nullable=False)
    timestamp = Column(Integer, nullable=False, default=unix_now, index=True)
