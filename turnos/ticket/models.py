# turnos/ticket/models.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text, func

from turnos.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Ticket(Base):
    __tablename__ = "turnos"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    request = Column(Text, nullable=False)
    ticket_label = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    def __repr__(self) -> str:
        return f"<Ticket id={self.id} label={self.ticket_label} user_id={self.user_id}>"


class TicketSequence(Base):
    """Counter row backing atomic label allocation."""

    __tablename__ = "ticket_sequences"

    name = Column(String(50), primary_key=True)
    last_number = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
