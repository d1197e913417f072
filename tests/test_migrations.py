import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool

from database import Base, build_engine

_VERSIONS = Path(__file__).resolve().parent.parent / "backend" / "migrations" / "versions"


def _load_revision(filename):
    spec = importlib.util.spec_from_file_location(filename[:-3], _VERSIONS / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _column_names(insp, table):
    return {column["name"] for column in insp.get_columns(table)}


def test_initial_revision_matches_the_models():
    revision = _load_revision("0001_initial.py")
    engine = build_engine("sqlite://", poolclass=StaticPool)

    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revision.upgrade()

    insp = inspect(engine)
    assert set(insp.get_table_names()) == set(Base.metadata.tables)
    for name, table in Base.metadata.tables.items():
        assert _column_names(insp, name) == {c.name for c in table.columns}, name

    unique = {ix["name"] for ix in insp.get_indexes("command_history") if ix["unique"]}
    assert "ux_command_history_command" in unique

    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revision.downgrade()

    assert inspect(engine).get_table_names() == []
    engine.dispose()
