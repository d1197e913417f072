# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Proxy and SshKey ORM models – referenced by connections."""

from sqlalchemy import Column, Integer, String, Text, Enum

from database import Base, unix_now


class Proxy(Base):
    __tablename__ = "proxies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    type = Column(Enum("SOCKS5", "HTTP", name="proxy_server_type"), nullable=False, default="SOCKS5")
    host = Column(String(255), nullable=False)
    port = Column(Integer, nullable=False)
    username = Column(String(255), nullable=True)
    auth_method = Column(Enum("none", "password", "key", name="proxy_auth_method"), nullable=False, default="none")
    encrypted_password = Column(Text, nullable=True)
    encrypted_private_key = Column(Text, nullable=True)
    encrypted_passphrase = Column(Text, nullable=True)
    created_at = Column(Integer, nullable=False, default=unix_now)
    updated_at = Column(Integer, nullable=False, default=unix_now, onupdate=unix_now)


class SshKey(Base):
    __tablename__ = "ssh_keys"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    encrypted_private_key = Column(Text, nullable=False)
    encrypted_passphrase = Column(Text, nullable=True)
    created_at = Column(Integer, nullable=False, default=unix_now)
    updated_at = Column(Integer, nullable=False, default=unix_now, onupdate=unix_now)
