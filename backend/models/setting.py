# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Setting ORM model – a flat key/value table of application settings."""

from sqlalchemy import Column, String, Text

from database import Base


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(255), primary_key=True)
    # Always text; structured values (layout tree, sidebar) are JSON-encoded.
    value = Column(Text, nullable=True)
