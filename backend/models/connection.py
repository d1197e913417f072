# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Connection and ConnectionTag ORM models."""

from sqlalchemy import Column, Integer, String, Text, Enum, ForeignKey

from database import Base, unix_now

CONNECTION_TYPES = ("SSH", "RDP", "VNC")
AUTH_METHODS = ("password", "key")
PROXY_TYPES = ("proxy", "jump")


class Connection(Base):
    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Optional, but unique when present (several NULLs are allowed)
    name = Column(String(255), unique=True, nullable=True)
    type = Column(Enum(*CONNECTION_TYPES, name="connection_type"), nullable=False, default="SSH")
    host = Column(String(255), nullable=False)
    port = Column(Integer, nullable=False)
    username = Column(String(255), nullable=False)
    auth_method = Column(Enum(*AUTH_METHODS, name="connection_auth_method"), nullable=False)
    # Ciphertexts produced by core.security.encrypt_secret – never plaintext.
    encrypted_password = Column(Text, nullable=True)
    encrypted_private_key = Column(Text, nullable=True)
    encrypted_passphrase = Column(Text, nullable=True)
    proxy_id = Column(
        Integer,
        ForeignKey("proxies.id", ondelete="SET NULL"),
        nullable=True,
    )
    proxy_type = Column(Enum(*PROXY_TYPES, name="connection_proxy_type"), nullable=True)
    ssh_key_id = Column(
        Integer,
        ForeignKey("ssh_keys.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes = Column(Text, nullable=True)
    # JSON array of connection ids, e.g. "[3, 7]".  NULL instead of "[]".
    jump_chain = Column(Text, nullable=True)
    created_at = Column(Integer, nullable=False, default=unix_now)
    updated_at = Column(Integer, nullable=False, default=unix_now)
    last_connected_at = Column(Integer, nullable=True)


class ConnectionTag(Base):
    __tablename__ = "connection_tags"

    connection_id = Column(
        Integer,
        ForeignKey("connections.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id = Column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
