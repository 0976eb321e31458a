# turnos/ticket/store.py
"""Persistence of ticket records.

A :class:`TicketStore` wraps one SQLAlchemy session. Routes get a fresh
store per request through ``Depends(get_store)``, so the session is released
when the request ends.
"""
import functools
import logging

from fastapi import Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from turnos.core.database import get_db
from turnos.core.errors import ConstraintViolation, StorageError
from turnos.ticket.models import Ticket, TicketSequence

logger = logging.getLogger(__name__)


def _storage_guard(method):
    """Roll back and re-raise unexpected database failures as StorageError."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Storage failure in %s: %s", method.__name__, exc, exc_info=True)
            raise StorageError(f"{method.__name__} failed") from exc

    return wrapper


class TicketStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    @_storage_guard
    def count(self) -> int:
        return self.db.query(Ticket).count()

    @_storage_guard
    def find_by_user_id(self, user_id: str) -> Ticket | None:
        return self.db.query(Ticket).filter(Ticket.user_id == user_id).first()

    @_storage_guard
    def find_by_id(self, ticket_id: int) -> Ticket | None:
        return self.db.query(Ticket).filter(Ticket.id == ticket_id).first()

    @_storage_guard
    def list_all(self) -> list[Ticket]:
        return self.db.query(Ticket).order_by(Ticket.id.desc()).all()

    @_storage_guard
    def ticket_labels(self) -> list[str]:
        return [label for (label,) in self.db.query(Ticket.ticket_label).all()]

    def insert(self, user_id: str, name: str, request: str, ticket_label: str) -> Ticket:
        db_ticket = Ticket(user_id=user_id, name=name, request=request, ticket_label=ticket_label)
        self.db.add(db_ticket)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConstraintViolation(f"user_id {user_id!r} already has a ticket") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Storage failure in insert: %s", exc, exc_info=True)
            raise StorageError("insert failed") from exc
        self.db.refresh(db_ticket)
        return db_ticket

    @_storage_guard
    def update(self, ticket_id: int, name: str, request: str) -> Ticket | None:
        db_ticket = self.find_by_id(ticket_id)
        if not db_ticket:
            return None
        db_ticket.name = name
        db_ticket.request = request
        self.db.commit()
        self.db.refresh(db_ticket)
        return db_ticket

    @_storage_guard
    def delete(self, ticket_id: int) -> Ticket | None:
        db_ticket = self.find_by_id(ticket_id)
        if not db_ticket:
            return None
        self.db.delete(db_ticket)
        self.db.commit()
        return db_ticket

    @_storage_guard
    def increment_sequence(self, name: str) -> int | None:
        """Atomically bump the counter row and return the new value.

        Left uncommitted: the insert that consumes the number commits both.
        Returns None when the counter row does not exist yet.
        """
        updated = (
            self.db.query(TicketSequence)
            .filter(TicketSequence.name == name)
            .update({TicketSequence.last_number: TicketSequence.last_number + 1}, synchronize_session=False)
        )
        if not updated:
            return None
        return self.db.query(TicketSequence.last_number).filter(TicketSequence.name == name).scalar()

    def create_sequence(self, name: str, value: int) -> int:
        self.db.add(TicketSequence(name=name, last_number=value))
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConstraintViolation(f"sequence {name!r} already exists") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Storage failure in create_sequence: %s", exc, exc_info=True)
            raise StorageError("create_sequence failed") from exc
        return value


def get_store(db: Session = Depends(get_db)) -> TicketStore:
    return TicketStore(db)
