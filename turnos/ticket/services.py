# turnos/ticket/services.py
import logging

from turnos.core.errors import ConstraintViolation, NotFound, ValidationError
from turnos.ticket.allocator import next_label
from turnos.ticket.models import Ticket
from turnos.ticket.store import TicketStore

logger = logging.getLogger(__name__)


def _require(message: str, *values) -> None:
    if any(not isinstance(value, str) or not value for value in values):
        raise ValidationError(message)


def create_or_get(
    store: TicketStore,
    user_id: str,
    name: str,
    request: str,
    strategy: str = "sequence",
) -> tuple[Ticket, bool]:
    """Return the ticket of ``user_id``, creating it on the first request.

    The second element of the result tells whether the ticket is new.
    """
    _require("Missing required data: userId, name and request are required", user_id, name, request)

    existing = store.find_by_user_id(user_id)
    if existing:
        return existing, False

    label = next_label(store, strategy)
    try:
        db_ticket = store.insert(user_id, name, request, label)
    except ConstraintViolation:
        # lost a race against a concurrent request for the same user
        existing = store.find_by_user_id(user_id)
        if not existing:
            raise
        logger.info("Concurrent create for user %s resolved to %s", user_id, existing.ticket_label)
        return existing, False

    logger.info("Issued ticket %s to user %s", db_ticket.ticket_label, user_id)
    return db_ticket, True


def list_all(store: TicketStore) -> list[Ticket]:
    return store.list_all()


def get_by_id(store: TicketStore, ticket_id: int) -> Ticket:
    db_ticket = store.find_by_id(ticket_id)
    if not db_ticket:
        raise NotFound(f"ticket {ticket_id} not found")
    return db_ticket


def update(store: TicketStore, ticket_id: int, name: str, request: str) -> Ticket:
    _require("Missing data: name and request are required", name, request)
    db_ticket = store.update(ticket_id, name, request)
    if not db_ticket:
        raise NotFound(f"ticket {ticket_id} not found")
    logger.info("Updated ticket %s (id=%s)", db_ticket.ticket_label, ticket_id)
    return db_ticket


def remove(store: TicketStore, ticket_id: int) -> Ticket:
    db_ticket = store.delete(ticket_id)
    if not db_ticket:
        raise NotFound(f"ticket {ticket_id} not found")
    logger.info("Deleted ticket %s (id=%s)", db_ticket.ticket_label, ticket_id)
    return db_ticket
