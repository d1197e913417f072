import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.sql.dml import Insert

from connections import repository as repo
from connections.repository import ConnectionField
from connections.schemas import ConnectionCreateData, ConnectionUpdateData
from core.exceptions import StorageError
from models.connection import ConnectionTag
from models.proxy import Proxy
from models.tag import Tag


def _data(**overrides):
    values = dict(
        name="db-primary",
        type="SSH",
        host="10.1.0.5",
        port=2222,
        username="ops",
        auth_method="password",
        encrypted_password="ciphertext",
        notes="primary database",
    )
    values.update(overrides)
    return ConnectionCreateData(**values)


def _tags(db, *names):
    tags = [Tag(name=name, created_at=1, updated_at=1) for name in names]
    db.add_all(tags)
    db.commit()
    return [tag.id for tag in tags]


def _links(db, connection_id):
    return sorted(
        tag_id
        for (tag_id,) in db.query(ConnectionTag.tag_id).filter(ConnectionTag.connection_id == connection_id)
    )


def test_create_then_find_round_trips_fields(db):
    connection_id = repo.create_connection(db, _data(jump_chain=[4, 2]))
    record = repo.find_connection_by_id_with_tags(db, connection_id)

    assert record.name == "db-primary"
    assert record.host == "10.1.0.5"
    assert record.port == 2222
    assert record.notes == "primary database"
    assert record.jump_chain == [4, 2]
    assert record.tag_ids == []
    assert record.created_at == record.updated_at


def test_create_links_tags_in_the_same_commit(db):
    tag_ids = _tags(db, "prod", "web")

    connection_id = repo.create_connection(db, _data(tag_ids=tag_ids))

    assert _links(db, connection_id) == sorted(tag_ids)


def test_create_with_unlinkable_tag_stores_nothing(db):
    with pytest.raises(StorageError):
        repo.create_connection(db, _data(tag_ids=[999]))

    assert repo.find_all_connections_with_tags(db) == []
    assert db.query(ConnectionTag).count() == 0


def test_empty_jump_chain_is_stored_as_null(db):
    connection_id = repo.create_connection(db, _data(jump_chain=[]))
    assert repo.find_connection_by_id_with_tags(db, connection_id).jump_chain is None

    repo.update_connection(db, connection_id, {"jump_chain": [9]})
    assert repo.find_connection_by_id_with_tags(db, connection_id).jump_chain == [9]

    repo.update_connection(db, connection_id, ConnectionUpdateData(jump_chain=[]))
    assert repo.find_connection_by_id_with_tags(db, connection_id).jump_chain is None


def test_find_missing_returns_none(db):
    assert repo.find_connection_by_id_with_tags(db, 999) is None
    assert repo.find_full_connection_by_id(db, 999) is None
    assert repo.find_connection_by_name(db, "nope") is None


def test_find_all_orders_by_name_and_aggregates_tags(db):
    tag_a, tag_b = _tags(db, "prod", "db")
    second = repo.create_connection(db, _data(name="zeta"))
    first = repo.create_connection(db, _data(name="alpha"))
    repo.update_connection_tags(db, first, [tag_a, tag_b])

    records = repo.find_all_connections_with_tags(db)

    assert [r.id for r in records] == [first, second]
    assert sorted(records[0].tag_ids) == sorted([tag_a, tag_b])
    assert records[1].tag_ids == []


def test_full_connection_resolves_proxy(db):
    proxy = Proxy(name="jump", type="SOCKS5", host="proxy.local", port=1080, auth_method="none",
                  created_at=1, updated_at=1)
    db.add(proxy)
    db.commit()
    connection_id = repo.create_connection(db, _data(proxy_id=proxy.id, proxy_type="proxy"))

    full = repo.find_full_connection_by_id(db, connection_id)

    assert full.encrypted_password == "ciphertext"
    assert full.proxy.host == "proxy.local"


def test_update_ignores_non_updatable_fields(db):
    connection_id = repo.create_connection(db, _data())
    before = repo.find_connection_by_id_with_tags(db, connection_id)

    assert repo.update_connection(db, connection_id, {"id": 55, "created_at": 1, "bogus": "x"}) is False

    after = repo.find_connection_by_id_with_tags(db, connection_id)
    assert after.id == before.id
    assert after.created_at == before.created_at


def test_update_writes_enumerated_fields(db):
    connection_id = repo.create_connection(db, _data())

    assert repo.update_connection(db, connection_id, {ConnectionField.HOST: "10.9.9.9", "port": 22}) is True
    assert repo.update_connection(db, 999, {"host": "x"}) is False

    record = repo.find_connection_by_id_with_tags(db, connection_id)
    assert (record.host, record.port) == ("10.9.9.9", 22)


def test_update_last_connected(db):
    connection_id = repo.create_connection(db, _data())

    assert repo.update_last_connected(db, connection_id, 1234) is True
    assert repo.update_last_connected(db, 999, 1234) is False
    assert repo.find_connection_by_id_with_tags(db, connection_id).last_connected_at == 1234


def test_delete_removes_tag_links(db):
    (tag_id,) = _tags(db, "prod")
    connection_id = repo.create_connection(db, _data())
    repo.update_connection_tags(db, connection_id, [tag_id])

    assert repo.delete_connection(db, connection_id) is True
    assert repo.delete_connection(db, connection_id) is False
    assert _links(db, connection_id) == []


def test_update_connection_tags_replaces_and_clears(db):
    tag_a, tag_b, tag_c = _tags(db, "a", "b", "c")
    connection_id = repo.create_connection(db, _data())

    assert repo.update_connection_tags(db, connection_id, [tag_a, tag_b, tag_a, 0, -3]) is True
    assert _links(db, connection_id) == sorted([tag_a, tag_b])

    assert repo.update_connection_tags(db, connection_id, [tag_c]) is True
    assert _links(db, connection_id) == [tag_c]

    assert repo.update_connection_tags(db, connection_id, []) is True
    assert _links(db, connection_id) == []


def test_update_connection_tags_on_missing_connection_changes_nothing(db):
    (tag_id,) = _tags(db, "a")
    other = repo.create_connection(db, _data())
    repo.update_connection_tags(db, other, [tag_id])

    assert repo.update_connection_tags(db, 999, [tag_id]) is False
    assert db.query(ConnectionTag).count() == 1


def test_failed_tag_insert_keeps_original_links(db, monkeypatch):
    tag_a, tag_b = _tags(db, "a", "b")
    connection_id = repo.create_connection(db, _data())
    repo.update_connection_tags(db, connection_id, [tag_a])

    real_execute = db.execute

    def failing_execute(statement, *args, **kwargs):
        if isinstance(statement, Insert):
            raise OperationalError("INSERT INTO connection_tags", {}, Exception("disk I/O error"))
        return real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db, "execute", failing_execute)
    with pytest.raises(OperationalError):
        repo.update_connection_tags(db, connection_id, [tag_b])
    monkeypatch.undo()

    assert _links(db, connection_id) == [tag_a]


def test_bulk_insert_flushes_without_committing(db):
    results = repo.bulk_insert_connections(db, [_data(name="one"), _data(name="two")])

    assert [r.original.name for r in results] == ["one", "two"]
    assert all(r.connection_id > 0 for r in results)

    db.rollback()
    assert repo.find_all_connections_with_tags(db) == []


def test_bulk_insert_names_the_failing_connection(db):
    repo.create_connection(db, _data(name="taken"))

    with pytest.raises(StorageError, match='"taken"'):
        repo.bulk_insert_connections(db, [_data(name="fresh"), _data(name="taken")])
    db.rollback()


def test_add_tag_to_multiple_connections_is_insert_or_ignore(db):
    (tag_id,) = _tags(db, "prod")
    first = repo.create_connection(db, _data(name="one"))
    second = repo.create_connection(db, _data(name="two"))
    repo.update_connection_tags(db, first, [tag_id])

    repo.add_tag_to_multiple_connections(db, [first, second, second], tag_id)

    assert _links(db, first) == [tag_id]
    assert _links(db, second) == [tag_id]


def test_add_tag_to_missing_connection_raises_storage_error(db):
    (tag_id,) = _tags(db, "prod")

    with pytest.raises(StorageError, match="Failed to add tag"):
        repo.add_tag_to_multiple_connections(db, [12345], tag_id)
    assert db.query(ConnectionTag).count() == 0
