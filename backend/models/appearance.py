# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""TerminalTheme and AppearanceSettings ORM models."""

from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey

from database import Base, unix_now


class TerminalTheme(Base):
    __tablename__ = "terminal_themes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    # xterm.js ITheme object, JSON-encoded
    theme_data = Column(Text, nullable=False)
    is_preset = Column(Boolean, nullable=False, default=False)
    created_at = Column(Integer, nullable=False, default=unix_now)
    updated_at = Column(Integer, nullable=False, default=unix_now, onupdate=unix_now)


class AppearanceSettings(Base):
    __tablename__ = "appearance_settings"

    # Single-row table: id is always 1.
    id = Column(Integer, primary_key=True)
    active_terminal_theme_id = Column(
        Integer,
        ForeignKey("terminal_themes.id", ondelete="SET NULL"),
        nullable=True,
    )
    terminal_font_family = Column(String(255), nullable=False)
    terminal_font_size = Column(Integer, nullable=False)
    editor_font_size = Column(Integer, nullable=False)
    page_background_image = Column(String(2048), nullable=True)
    updated_at = Column(Integer, nullable=False, default=unix_now, onupdate=unix_now)
