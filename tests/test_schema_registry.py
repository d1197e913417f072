import json

from sqlalchemy import inspect
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from appearance.presets import PRESET_TERMINAL_THEMES
from database import Base, build_engine
from models.appearance import AppearanceSettings, TerminalTheme
from models.setting import Setting
from schema_registry import TABLE_DEFINITIONS, initialize_database


def test_registry_covers_every_mapped_table():
    assert {d.name for d in TABLE_DEFINITIONS} == set(Base.metadata.tables)
    assert all(d.table.name == d.name for d in TABLE_DEFINITIONS)


def test_referenced_tables_come_first():
    position = {d.name: i for i, d in enumerate(TABLE_DEFINITIONS)}
    for definition in TABLE_DEFINITIONS:
        for fk in definition.table.foreign_keys:
            assert position[fk.column.table.name] < position[definition.name], (
                f"{definition.name} is registered before {fk.column.table.name}"
            )


def test_initialize_database_is_idempotent():
    engine = build_engine("sqlite://", poolclass=StaticPool)

    initialize_database(engine)
    initialize_database(engine)

    assert set(inspect(engine).get_table_names()) == {d.name for d in TABLE_DEFINITIONS}
    with Session(engine) as session:
        assert session.query(TerminalTheme).count() == len(PRESET_TERMINAL_THEMES)
        assert session.query(AppearanceSettings).count() == 1
        assert session.get(Setting, "navBarVisible").value == "true"

        appearance = session.get(AppearanceSettings, 1)
        theme = session.get(TerminalTheme, appearance.active_terminal_theme_id)
        assert theme.is_preset
        assert "background" in json.loads(theme.theme_data)
    engine.dispose()


def test_existing_settings_are_not_overwritten():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    initialize_database(engine)
    with Session(engine) as session:
        session.get(Setting, "language").value = "de"
        session.commit()

    initialize_database(engine)

    with Session(engine) as session:
        assert session.get(Setting, "language").value == "de"
    engine.dispose()
