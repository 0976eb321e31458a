# tests/test_services.py
import pytest

from turnos.core.errors import NotFound, ValidationError
from turnos.ticket import services


def test_sequential_users_get_sequential_labels(store):
    labels = [services.create_or_get(store, user, "Name", "Req")[0].ticket_label for user in ("u1", "u2", "u3")]
    assert labels == ["T-0001", "T-0002", "T-0003"]


@pytest.mark.parametrize("strategy", ["sequence", "count"])
def test_first_request_uses_prior_count(store, strategy):
    services.create_or_get(store, "a", "A", "Q", strategy=strategy)
    services.create_or_get(store, "b", "B", "Q", strategy=strategy)
    prior = store.count()

    ticket, is_new = services.create_or_get(store, "c", "C", "Q", strategy=strategy)
    assert is_new is True
    assert ticket.ticket_label == f"T-{prior + 1:04d}"


def test_repeat_request_returns_original_ticket(store):
    first, is_new = services.create_or_get(store, "u1", "Ann", "Q1")
    assert is_new is True
    first_id, created = first.id, first.created_at

    again, is_new = services.create_or_get(store, "u1", "Ann2", "Q2")
    assert is_new is False
    assert again.id == first_id
    assert again.ticket_label == "T-0001"
    assert again.name == "Ann"
    assert again.request == "Q1"
    assert again.created_at == created
    assert store.count() == 1


def test_repeat_request_does_not_consume_a_label(store):
    services.create_or_get(store, "u1", "Ann", "Q1")
    services.create_or_get(store, "u1", "Ann", "Q1")

    ticket, _ = services.create_or_get(store, "u2", "Bob", "Q2")
    assert ticket.ticket_label == "T-0002"


@pytest.mark.parametrize(
    "user_id, name, request_text",
    [
        ("", "Ann", "Q1"),
        ("u1", "", "Q1"),
        ("u1", "Ann", ""),
        (None, "Ann", "Q1"),
        ("u1", None, "Q1"),
        ("u1", "Ann", None),
    ],
)
def test_create_requires_every_field(store, user_id, name, request_text):
    with pytest.raises(ValidationError):
        services.create_or_get(store, user_id, name, request_text)
    assert store.count() == 0


def test_same_user_race_resolves_to_existing_ticket(store, monkeypatch):
    first, _ = services.create_or_get(store, "u1", "Ann", "Q1")
    first_id = first.id

    real_find = store.find_by_user_id
    calls = []

    def racing_find(user_id):
        # first lookup misses, as if the other request had not committed yet
        calls.append(user_id)
        return None if len(calls) == 1 else real_find(user_id)

    monkeypatch.setattr(store, "find_by_user_id", racing_find)

    ticket, is_new = services.create_or_get(store, "u1", "Ann2", "Q2")
    assert is_new is False
    assert ticket.id == first_id
    assert ticket.name == "Ann"
    assert store.count() == 1

    # the rolled back insert did not burn a sequence number
    monkeypatch.undo()
    ticket, _ = services.create_or_get(store, "u2", "Bob", "Q2")
    assert ticket.ticket_label == "T-0002"


def test_list_all_most_recent_first(store):
    for user in ("u1", "u2", "u3"):
        services.create_or_get(store, user, "N", "R")
    assert [t.ticket_label for t in services.list_all(store)] == ["T-0003", "T-0002", "T-0001"]


def test_get_by_id(store):
    ticket, _ = services.create_or_get(store, "u1", "Ann", "Q1")
    assert services.get_by_id(store, ticket.id).user_id == "u1"

    with pytest.raises(NotFound):
        services.get_by_id(store, 999)


def test_update_keeps_label_and_created_at(store):
    ticket, _ = services.create_or_get(store, "u1", "Ann", "Q1")
    ticket_id, label, created = ticket.id, ticket.ticket_label, ticket.created_at

    services.update(store, ticket_id, "Bob", "New request")

    fetched = services.get_by_id(store, ticket_id)
    assert fetched.name == "Bob"
    assert fetched.request == "New request"
    assert fetched.ticket_label == label
    assert fetched.created_at == created


def test_update_validation_and_not_found(store):
    ticket, _ = services.create_or_get(store, "u1", "Ann", "Q1")

    with pytest.raises(ValidationError):
        services.update(store, ticket.id, "", "x")
    with pytest.raises(ValidationError):
        services.update(store, ticket.id, "Bob", None)
    with pytest.raises(NotFound):
        services.update(store, 999, "Bob", "x")


def test_remove_then_get_fails(store):
    ticket, _ = services.create_or_get(store, "u1", "Ann", "Q1")
    ticket_id = ticket.id

    removed = services.remove(store, ticket_id)
    assert removed.ticket_label == "T-0001"

    with pytest.raises(NotFound):
        services.get_by_id(store, ticket_id)


def test_remove_missing_ticket(store):
    with pytest.raises(NotFound):
        services.remove(store, 999)
