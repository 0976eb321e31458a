# turnos/core/errors.py


class TicketError(Exception):
    """Base class for every error raised by the ticket domain."""

    status_code = 500
    public_message = "Internal server error"


class ValidationError(TicketError):
    """A required field is missing or empty."""

    status_code = 400

    @property
    def public_message(self) -> str:
        return str(self)


class NotFound(TicketError):
    status_code = 404
    public_message = "Ticket not found"


class ConstraintViolation(TicketError):
    """Unique constraint hit on insert. Recovered by the service layer."""

    status_code = 409
    public_message = "Ticket already exists"


class StorageError(TicketError):
    pass


class RenderError(TicketError):
    pass


__all__ = [
    "TicketError",
    "ValidationError",
    "NotFound",
    "ConstraintViolation",
    "StorageError",
    "RenderError",
]
