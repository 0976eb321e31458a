# tests/test_store.py
import pytest

from turnos.core.errors import ConstraintViolation, StorageError
from turnos.ticket.store import TicketStore


def test_insert_and_find(store):
    ticket = store.insert("u1", "Ann", "Q1", "T-0001")
    assert ticket.id is not None
    assert ticket.created_at is not None

    assert store.find_by_id(ticket.id).user_id == "u1"
    assert store.find_by_user_id("u1").id == ticket.id
    assert store.find_by_user_id("nobody") is None
    assert store.find_by_id(999) is None
    assert store.count() == 1


def test_insert_duplicate_user_id_is_a_constraint_violation(store):
    store.insert("u1", "Ann", "Q1", "T-0001")
    with pytest.raises(ConstraintViolation):
        store.insert("u1", "Other", "Q2", "T-0002")

    # session is usable again after the rollback
    assert store.count() == 1


def test_list_all_is_most_recent_first(store):
    for n, user in enumerate(["a", "b", "c"], start=1):
        store.insert(user, user.upper(), "req", f"T-000{n}")

    assert [t.user_id for t in store.list_all()] == ["c", "b", "a"]


def test_update_only_touches_name_and_request(store):
    ticket = store.insert("u1", "Ann", "Q1", "T-0001")
    label, created = ticket.ticket_label, ticket.created_at

    updated = store.update(ticket.id, "Bob", "New request")
    assert updated.name == "Bob"
    assert updated.request == "New request"
    assert updated.ticket_label == label
    assert updated.created_at == created

    assert store.update(999, "x", "y") is None


def test_delete_returns_removed_record(store):
    ticket = store.insert("u1", "Ann", "Q1", "T-0001")
    ticket_id = ticket.id

    deleted = store.delete(ticket_id)
    assert deleted.ticket_label == "T-0001"
    assert store.find_by_id(ticket_id) is None
    assert store.delete(ticket_id) is None


def test_sequence_increments(store):
    assert store.increment_sequence("ticket") is None
    assert store.create_sequence("ticket", 5) == 5
    assert store.increment_sequence("ticket") == 6
    assert store.increment_sequence("ticket") == 7


def test_create_sequence_twice_is_a_constraint_violation(store):
    store.create_sequence("ticket", 1)
    with pytest.raises(ConstraintViolation):
        store.create_sequence("ticket", 1)


def test_database_failure_becomes_storage_error(session_factory, engine):
    store = TicketStore(session_factory())
    # dropping the table makes every query fail
    with engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE turnos")

    with pytest.raises(StorageError):
        store.count()
