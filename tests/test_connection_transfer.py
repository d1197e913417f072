import io

import pytest
from openpyxl import Workbook

from connections import repository as connection_repo
from connections import service
from connections.schemas import ConnectionCreateData
from connections.transfer import (
    EXPORT_HEADERS,
    WorkbookFormatError,
    export_connections,
    parse_connections_workbook,
)
from core.exceptions import StorageError
from models.tag import Tag


def _workbook(rows, headers=EXPORT_HEADERS):
    wb = Workbook()
    ws = wb.active
    ws.append(headers)
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def test_export_then_parse_keeps_fields_and_tag_names(db):
    tag = Tag(name="prod", created_at=1, updated_at=1)
    db.add(tag)
    db.commit()
    connection_id = connection_repo.create_connection(db, ConnectionCreateData(
        name="rdp-box", type="RDP", host="10.0.0.9", port=3390, username="admin",
        auth_method="password", jump_chain=[3, 4], notes="windows",
    ))
    connection_repo.update_connection_tags(db, connection_id, [tag.id])

    raw = export_connections(connection_repo.find_all_connections_with_tags(db), {tag.id: tag.name})
    parsed = parse_connections_workbook(raw)

    assert parsed.skipped_invalid == 0
    (row,) = parsed.rows
    assert (row.name, row.type, row.host, row.port, row.username) == ("rdp-box", "RDP", "10.0.0.9", 3390, "admin")
    assert row.jump_chain == [3, 4]
    assert row.notes == "windows"
    assert parsed.tag_names == [["prod"]]


def test_parse_defaults_and_invalid_rows():
    raw = _workbook(
        [
            ["vnc-1", "vnc", "10.0.0.2", None, "u", None, None, None, None, None],
            ["no-host", "SSH", None, 22, "u", "password", None, None, None, None],
            ["bad-type", "TELNET", "10.0.0.3", 23, "u", "password", None, None, None, None],
            [None, None, None, None, None, None, None, None, None, None],
        ]
    )

    parsed = parse_connections_workbook(raw)

    assert [r.name for r in parsed.rows] == ["vnc-1"]
    assert parsed.rows[0].type == "VNC"
    assert parsed.rows[0].port == 5900
    assert parsed.skipped_invalid == 2


def test_parse_rejects_non_workbooks_and_missing_host_column():
    with pytest.raises(WorkbookFormatError):
        parse_connections_workbook(b"plain text")
    with pytest.raises(WorkbookFormatError):
        parse_connections_workbook(_workbook([["x"]], headers=["Name"]))


def test_import_creates_tags_and_skips_duplicates(db):
    connection_repo.create_connection(db, ConnectionCreateData(
        name="existing", host="h", port=22, username="u", auth_method="password",
    ))
    rows = [
        ConnectionCreateData(name="existing", host="h", port=22, username="u", auth_method="password"),
        ConnectionCreateData(name="new-1", host="h1", port=22, username="u", auth_method="password"),
        ConnectionCreateData(name="new-1", host="h1", port=22, username="u", auth_method="password"),
        ConnectionCreateData(name="new-2", host="h2", port=22, username="u", auth_method="password"),
    ]
    tag_names = [["x"], ["ops", "prod"], [], ["prod", "prod"]]

    result = service.import_connections(db, rows, tag_names, skipped_invalid=1)

    assert (result.imported, result.skipped_duplicates, result.skipped_invalid) == (2, 2, 1)
    by_name = {c.name: c for c in connection_repo.find_all_connections_with_tags(db)}
    names = {t.id: t.name for t in db.query(Tag)}
    assert sorted(names[t] for t in by_name["new-1"].tag_ids) == ["ops", "prod"]
    assert [names[t] for t in by_name["new-2"].tag_ids] == ["prod"]
    assert "x" not in names.values()


def test_failed_import_rolls_everything_back(db, monkeypatch):
    def explode(session, links):
        raise StorageError("Failed to link imported tags")

    monkeypatch.setattr(service, "_link_tags", explode)
    rows = [ConnectionCreateData(name="a", host="h", port=22, username="u", auth_method="password")]

    with pytest.raises(StorageError):
        service.import_connections(db, rows, [["prod"]])

    assert connection_repo.find_all_connections_with_tags(db) == []
    assert db.query(Tag).count() == 0


def test_import_endpoint(client, auth_headers):
    raw = _workbook([["imported", "SSH", "10.0.0.5", 22, "root", "password", None, None, "lab", None]])

    response = client.post(
        "/connections/import",
        files={"file": ("connections.xlsx", raw, "application/octet-stream")},
        headers=auth_headers,
    )

    assert response.json() == {"imported": 1, "skipped_duplicates": 0, "skipped_invalid": 0}
    exported = client.get("/connections/export", headers=auth_headers)
    assert exported.status_code == 200
    assert parse_connections_workbook(exported.content).rows[0].name == "imported"

    wrong = client.post("/connections/import", files={"file": ("c.csv", b"a,b", "text/csv")}, headers=auth_headers)
    assert wrong.status_code == 400
