import pytest
from sqlalchemy.exc import IntegrityError

from command_history import repository as history_repo
from command_history import service as history
from core.exceptions import ValidationError
from models.command_history import CommandHistory


@pytest.mark.parametrize("command", ["", "   ", "\t\n"])
def test_blank_commands_are_rejected(db, command):
    with pytest.raises(ValidationError):
        history.add_command_history(db, command)
    assert db.query(CommandHistory).count() == 0


def test_readding_a_command_refreshes_its_timestamp(db, monkeypatch):
    monkeypatch.setattr(history_repo, "unix_now", lambda: 1000)
    first_id = history.add_command_history(db, "ls -la")
    monkeypatch.setattr(history_repo, "unix_now", lambda: 2000)
    second_id = history.add_command_history(db, "  ls -la  ")

    entries = history.get_all_command_history(db)
    assert first_id == second_id
    assert len(entries) == 1
    assert entries[0].command == "ls -la"
    assert entries[0].timestamp == 2000


def test_entries_are_listed_oldest_first(db, monkeypatch):
    for ts, command in ((30, "c"), (10, "a"), (20, "b")):
        monkeypatch.setattr(history_repo, "unix_now", lambda ts=ts: ts)
        history.add_command_history(db, command)

    assert [e.command for e in history.get_all_command_history(db)] == ["a", "b", "c"]


def test_delete_and_clear(db):
    keep = history.add_command_history(db, "uptime")
    drop = history.add_command_history(db, "whoami")

    assert history.delete_command_history_by_id(db, drop) is True
    assert history.delete_command_history_by_id(db, drop) is False
    assert [e.id for e in history.get_all_command_history(db)] == [keep]

    history.add_command_history(db, "df -h")
    assert history.clear_all_command_history(db) == 2
    assert history.get_all_command_history(db) == []


def test_interleaved_writers_keep_one_row(session_factory, monkeypatch):
    writer_a, writer_b = session_factory(), session_factory()
    try:
        # A has looked for "ls" and found nothing ...
        assert writer_a.query(CommandHistory).filter(CommandHistory.command == "ls").first() is None
        # ... B stores it before A writes.
        monkeypatch.setattr(history_repo, "unix_now", lambda: 100)
        b_id = history_repo.upsert_command(writer_b, "ls")
        monkeypatch.setattr(history_repo, "unix_now", lambda: 200)
        a_id = history_repo.upsert_command(writer_a, "ls")

        rows = writer_a.query(CommandHistory).all()
    finally:
        writer_a.close()
        writer_b.close()

    assert a_id == b_id
    assert [(r.command, r.timestamp) for r in rows] == [("ls", 200)]


def test_duplicate_command_rows_are_rejected_by_the_schema(db):
    db.add(CommandHistory(command="ls", timestamp=1))
    db.commit()

    db.add(CommandHistory(command="ls", timestamp=2))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
    assert db.query(CommandHistory).count() == 1


def test_upsert_without_native_on_conflict_touches_existing_row(db, monkeypatch):
    monkeypatch.setattr(history_repo, "_upsert_statement", lambda *args: None)
    monkeypatch.setattr(history_repo, "unix_now", lambda: 10)
    first_id = history_repo.upsert_command(db, "ls")
    monkeypatch.setattr(history_repo, "unix_now", lambda: 20)
    second_id = history_repo.upsert_command(db, "ls")

    assert first_id == second_id
    assert [(e.command, e.timestamp) for e in history_repo.get_all_commands(db)] == [("ls", 20)]


def test_routes(client, auth_headers):
    assert client.post("/command-history", json={"command": "  "}, headers=auth_headers).status_code == 400

    created = client.post("/command-history", json={"command": "htop"}, headers=auth_headers)
    assert created.status_code == 201
    entry_id = created.json()["id"]

    listed = client.get("/command-history", headers=auth_headers).json()
    assert [e["command"] for e in listed["entries"]] == ["htop"]

    assert client.delete(f"/command-history/{entry_id}", headers=auth_headers).status_code == 204
    assert client.delete(f"/command-history/{entry_id}", headers=auth_headers).status_code == 404
    assert client.delete("/command-history", headers=auth_headers).json() == {"deleted": 0}


def test_routes_require_auth(client):
    assert client.get("/command-history").status_code == 401
