# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Audit-trail helper used by the routers after a successful mutation."""

from typing import Optional

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.logger import logger
from core.security import get_client_ip
from models.audit_log import AuditLog


def record_audit(
    db: Session,
    user_id: Optional[int],
    action: str,
    detail: Optional[str] = None,
    request: Optional[Request] = None,
) -> None:
    """
    Append one audit row and commit it.

    The audited change has already been committed, so a failure here is
    logged and the session rolled back rather than failing the request.
    """
    db.add(AuditLog(
        user_id=user_id,
        action=action,
        detail=detail,
        request_ip=get_client_ip(request) if request is not None else None,
    ))
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to write audit log action=%s: %s", action, exc)
