# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Settings endpoints read and written by the layout store.

Structured values are kept JSON-encoded in the ``settings`` table.  A stored
value that no longer parses is reported as absent so clients fall back to
their own defaults.
"""

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from core.logger import logger
from core.security import get_current_user
from layout.panes import is_valid_sidebar_config
from layout.tree import LayoutError, LayoutTree
from preferences import repository as settings_repo
from preferences.schemas import NavBarVisibility, SidebarConfig

router = APIRouter(
    prefix="/settings",
    tags=["settings"],
    dependencies=[Depends(get_current_user)],
)


def _load_json(db: Session, key: str) -> Any:
    raw = settings_repo.get_setting(db, key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Stored setting %s is not valid JSON, ignoring it", key)
        return None


# ---------------------------------------------------------------------------
# /settings/layout  – the dashboard layout tree (nullable)
# ---------------------------------------------------------------------------


@router.get("/layout")
def get_layout(db: Session = Depends(get_db)):
    return _load_json(db, settings_repo.LAYOUT_TREE_KEY)


@router.put("/layout")
def put_layout(
    body: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
):
    if body is None:
        settings_repo.delete_setting(db, settings_repo.LAYOUT_TREE_KEY)
        return None
    try:
        tree = LayoutTree.from_dict(body)
    except LayoutError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    layout = tree.to_dict()
    settings_repo.set_setting(db, settings_repo.LAYOUT_TREE_KEY, json.dumps(layout))
    return layout


# ---------------------------------------------------------------------------
# /settings/sidebar  – left / right sidebar pane lists
# ---------------------------------------------------------------------------


@router.get("/sidebar")
def get_sidebar(db: Session = Depends(get_db)):
    data = _load_json(db, settings_repo.SIDEBAR_CONFIG_KEY)
    return data if is_valid_sidebar_config(data) else None


@router.put("/sidebar", response_model=SidebarConfig)
def put_sidebar(body: SidebarConfig, db: Session = Depends(get_db)):
    settings_repo.set_setting(db, settings_repo.SIDEBAR_CONFIG_KEY, json.dumps(body.model_dump()))
    return body


# ---------------------------------------------------------------------------
# /settings/nav-bar-visibility
# ---------------------------------------------------------------------------


@router.get("/nav-bar-visibility", response_model=NavBarVisibility)
def get_nav_bar_visibility(db: Session = Depends(get_db)):
    raw = settings_repo.get_setting(db, settings_repo.NAV_BAR_VISIBLE_KEY)
    return NavBarVisibility(visible=raw != "false")


@router.put("/nav-bar-visibility", response_model=NavBarVisibility)
def put_nav_bar_visibility(body: NavBarVisibility, db: Session = Depends(get_db)):
    settings_repo.set_setting(
        db, settings_repo.NAV_BAR_VISIBLE_KEY, "true" if body.visible else "false"
    )
    return body
