# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Pydantic models for connections.

Two families live here:

* Records passed between the repository and the service layer
  (``ConnectionBase``, ``ConnectionWithTags``, ``FullConnection``,
  ``ConnectionCreateData``, ``ConnectionUpdateData``).  These carry the
  *encrypted* secrets – the repository never sees plaintext.
* API request / response bodies.  Requests carry plaintext secrets which the
  service encrypts; responses never contain any secret at all.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ConnectionType = Literal["SSH", "RDP", "VNC"]
AuthMethod = Literal["password", "key"]
ProxyType = Literal["proxy", "jump"]


# -- Repository records ----------------------------------------------------


class ConnectionBase(BaseModel):
    id: int
    name: Optional[str] = None
    type: ConnectionType = "SSH"
    host: str
    port: int
    username: str
    auth_method: AuthMethod
    proxy_id: Optional[int] = None
    proxy_type: Optional[ProxyType] = None
    ssh_key_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: int
    updated_at: int
    last_connected_at: Optional[int] = None


class ConnectionWithTags(ConnectionBase):
    tag_ids: List[int] = []
    jump_chain: Optional[List[int]] = None


class ProxyRecord(BaseModel):
    """The proxy half of :class:`FullConnection` – secrets included."""

    id: int
    name: str
    type: str
    host: str
    port: int
    username: Optional[str] = None
    encrypted_password: Optional[str] = None
    encrypted_private_key: Optional[str] = None
    encrypted_passphrase: Optional[str] = None


class FullConnection(ConnectionBase):
    """Everything needed to open a session, resolved through the proxy."""

    encrypted_password: Optional[str] = None
    encrypted_private_key: Optional[str] = None
    encrypted_passphrase: Optional[str] = None
    jump_chain: Optional[List[int]] = None
    proxy: Optional[ProxyRecord] = None


class ConnectionCreateData(BaseModel):
    name: Optional[str] = None
    type: ConnectionType = "SSH"
    host: str
    port: int
    username: str
    auth_method: AuthMethod
    encrypted_password: Optional[str] = None
    encrypted_private_key: Optional[str] = None
    encrypted_passphrase: Optional[str] = None
    proxy_id: Optional[int] = None
    proxy_type: Optional[ProxyType] = None
    ssh_key_id: Optional[int] = None
    notes: Optional[str] = None
    jump_chain: Optional[List[int]] = None
    # Linked through connection_tags; never written to `connections`
    tag_ids: List[int] = []


class ConnectionUpdateData(BaseModel):
    """Every field optional; only explicitly-set fields are written."""

    name: Optional[str] = None
    type: Optional[ConnectionType] = None
    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    auth_method: Optional[AuthMethod] = None
    encrypted_password: Optional[str] = None
    encrypted_private_key: Optional[str] = None
    encrypted_passphrase: Optional[str] = None
    proxy_id: Optional[int] = None
    proxy_type: Optional[ProxyType] = None
    ssh_key_id: Optional[int] = None
    notes: Optional[str] = None
    jump_chain: Optional[List[int]] = None


# -- API requests ------------------------------------------------------------


class ConnectionCreate(BaseModel):
    name: Optional[str] = None
    type: ConnectionType = "SSH"
    host: str = Field(min_length=1)
    port: int = Field(default=22, ge=1, le=65535)
    username: str = ""
    auth_method: AuthMethod = "password"
    password: Optional[str] = None
    private_key: Optional[str] = None
    passphrase: Optional[str] = None
    proxy_id: Optional[int] = None
    proxy_type: Optional[ProxyType] = None
    ssh_key_id: Optional[int] = None
    notes: Optional[str] = None
    jump_chain: Optional[List[int]] = None
    tag_ids: List[int] = []


class ConnectionUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[ConnectionType] = None
    host: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    username: Optional[str] = None
    auth_method: Optional[AuthMethod] = None
    password: Optional[str] = None       # if provided the server re-encrypts
    private_key: Optional[str] = None
    passphrase: Optional[str] = None
    proxy_id: Optional[int] = None
    proxy_type: Optional[ProxyType] = None
    ssh_key_id: Optional[int] = None
    notes: Optional[str] = None
    jump_chain: Optional[List[int]] = None
    tag_ids: Optional[List[int]] = None


class ConnectionTagsUpdate(BaseModel):
    tag_ids: List[int]


class AddTagToConnectionsRequest(BaseModel):
    connection_ids: List[int]
    tag_id: int


# -- API responses -----------------------------------------------------------


class ConnectionListResponse(BaseModel):
    connections: List[ConnectionWithTags]


class TagRef(BaseModel):
    id: int
    name: str


class ImportResult(BaseModel):
    imported: int
    skipped_duplicates: int
    skipped_invalid: int
