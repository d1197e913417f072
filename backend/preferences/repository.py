# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Key/value access to the ``settings`` table."""

from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StorageError
from core.logger import logger
from models.setting import Setting

LAYOUT_TREE_KEY = "layoutTree"
SIDEBAR_CONFIG_KEY = "sidebarConfig"
NAV_BAR_VISIBLE_KEY = "navBarVisible"

DEFAULT_SETTINGS: Dict[str, str] = {
    "language": "en",
    NAV_BAR_VISIBLE_KEY: "true",
}


def get_setting(db: Session, key: str) -> Optional[str]:
    try:
        row = db.query(Setting).filter(Setting.key == key).first()
    except SQLAlchemyError as exc:
        logger.error("Reading setting %s failed: %s", key, exc)
        raise StorageError("Failed to read setting", cause=exc, key=key) from exc
    return row.value if row else None


def set_setting(db: Session, key: str, value: str) -> None:
    try:
        row = db.query(Setting).filter(Setting.key == key).first()
        if row:
            row.value = value
        else:
            db.add(Setting(key=key, value=value))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Writing setting %s failed: %s", key, exc)
        raise StorageError("Failed to save setting", cause=exc, key=key) from exc


def delete_setting(db: Session, key: str) -> bool:
    try:
        deleted = db.query(Setting).filter(Setting.key == key).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Deleting setting %s failed: %s", key, exc)
        raise StorageError("Failed to delete setting", cause=exc, key=key) from exc
    return deleted > 0


def ensure_default_settings_exist(db: Session) -> None:
    """Insert any missing default; existing values are never overwritten."""
    existing = {key for (key,) in db.query(Setting.key).filter(Setting.key.in_(DEFAULT_SETTINGS))}
    for key, value in DEFAULT_SETTINGS.items():
        if key not in existing:
            db.add(Setting(key=key, value=value))
            logger.info("Seeded default setting %s", key)
    db.flush()
