# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""AuditLog ORM model – tracks every mutating API action."""

from sqlalchemy import Column, Integer, String, Text, ForeignKey

from database import Base, unix_now


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # NULL for actions that happen before authentication (failed logins)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    action = Column(String(64), nullable=False, index=True)   # e.g. "connection_create"
    detail = Column(Text, nullable=True)                      # human-readable note, secrets masked
    request_ip = Column(String(45), nullable=True)            # Client IP address (supports IPv6)
    created_at = Column(Integer, nullable=False, default=unix_now)
