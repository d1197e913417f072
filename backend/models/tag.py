# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Tag ORM model."""

from sqlalchemy import Column, Integer, String

from database import Base, unix_now


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(Integer, nullable=False, default=unix_now)
    updated_at = Column(Integer, nullable=False, default=unix_now, onupdate=unix_now)
