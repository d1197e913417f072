# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Seeding for the appearance tables.  Both functions are schema-registry
initializers: they flush and leave the commit to the caller.
"""

import json
from typing import Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from appearance.presets import DEFAULT_APPEARANCE, DEFAULT_THEME_NAME, PRESET_TERMINAL_THEMES
from core.logger import logger
from models.appearance import AppearanceSettings, TerminalTheme

APPEARANCE_ROW_ID = 1


def initialize_preset_themes(
    db: Session, presets: Optional[Iterable[Mapping]] = None
) -> int:
    """Insert preset themes that are missing by name; returns how many were added."""
    presets = PRESET_TERMINAL_THEMES if presets is None else presets
    existing = {name for (name,) in db.query(TerminalTheme.name)}
    added = 0
    for preset in presets:
        if preset["name"] in existing:
            continue
        db.add(TerminalTheme(
            name=preset["name"],
            theme_data=json.dumps(preset["theme_data"]),
            is_preset=True,
        ))
        added += 1
    db.flush()
    if added:
        logger.info("Seeded %s preset terminal theme(s)", added)
    return added


def ensure_default_appearance_exists(db: Session) -> None:
    if db.query(AppearanceSettings).filter(AppearanceSettings.id == APPEARANCE_ROW_ID).first():
        return
    theme = db.query(TerminalTheme).filter(TerminalTheme.name == DEFAULT_THEME_NAME).first()
    db.add(AppearanceSettings(
        id=APPEARANCE_ROW_ID,
        active_terminal_theme_id=theme.id if theme else None,
        **DEFAULT_APPEARANCE,
    ))
    db.flush()
    logger.info("Seeded default appearance settings")
