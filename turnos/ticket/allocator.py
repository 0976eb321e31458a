# turnos/ticket/allocator.py
import logging
import re

from turnos.core.errors import ConstraintViolation
from turnos.ticket.store import TicketStore

logger = logging.getLogger(__name__)

LABEL_PREFIX = "T-"
LABEL_WIDTH = 4
SEQUENCE_NAME = "ticket"

_LABEL_RE = re.compile(rf"^{LABEL_PREFIX}(\d+)$")


def format_label(number: int) -> str:
    return f"{LABEL_PREFIX}{number:0{LABEL_WIDTH}d}"


def parse_label(label: str) -> int | None:
    match = _LABEL_RE.match(label or "")
    return int(match.group(1)) if match else None


def next_label(store: TicketStore, strategy: str = "sequence") -> str:
    """Compute the label for the ticket about to be inserted.

    ``count`` derives the number from the current row count, which can hand
    the same label to two concurrent creations and reuses labels after a
    delete. ``sequence`` bumps a counter row inside the caller's transaction.
    """
    if strategy == "count":
        return format_label(store.count() + 1)
    if strategy != "sequence":
        raise ValueError(f"unknown label strategy: {strategy!r}")
    return format_label(_next_sequence_number(store))


def _next_sequence_number(store: TicketStore) -> int:
    number = store.increment_sequence(SEQUENCE_NAME)
    if number is not None:
        return number

    # first allocation on this database: continue after existing tickets
    highest = max((parse_label(label) or 0 for label in store.ticket_labels()), default=0)
    start = max(store.count(), highest) + 1
    try:
        store.create_sequence(SEQUENCE_NAME, start)
        logger.info("Seeded ticket sequence at %s", start)
        return start
    except ConstraintViolation:
        # another request seeded it first
        number = store.increment_sequence(SEQUENCE_NAME)
        if number is None:
            raise
        return number
