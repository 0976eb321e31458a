# turnos/ticket/routes.py
from datetime import datetime, timezone
from io import BytesIO

from fastapi import APIRouter, Depends, Query, Request, Response, status

from turnos.core.config import Settings, get_settings
from turnos.ticket import services as ticket_service
from turnos.ticket.receipt import ReceiptOptions, receipt_filename, render_receipt, resolve_timezone
from turnos.ticket.schemas import TicketChanged, TicketCreate, TicketIssued, TicketOut, TicketUpdate
from turnos.ticket.store import TicketStore, get_store

router = APIRouter(tags=["Tickets"])


def _pdf_url(http_request: Request, settings: Settings, ticket_id: int) -> str:
    if settings.PUBLIC_BASE_URL:
        return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/turno/{ticket_id}/pdf"
    return str(http_request.url_for("download_receipt", ticket_id=ticket_id))


@router.post("/turno", response_model=TicketIssued)
def create(
    ticket: TicketCreate,
    http_request: Request,
    response: Response,
    store: TicketStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    db_ticket, is_new = ticket_service.create_or_get(
        store, ticket.user_id, ticket.name, ticket.request, strategy=settings.LABEL_STRATEGY
    )
    if is_new:
        response.status_code = status.HTTP_201_CREATED
        message = f"Ticket assigned successfully to {db_ticket.name}"
    else:
        message = f"You already have a ticket assigned: {db_ticket.ticket_label}"
    return TicketIssued(
        id=db_ticket.id,
        ticket_label=db_ticket.ticket_label,
        name=db_ticket.name,
        request=db_ticket.request,
        created_at=db_ticket.created_at,
        message=message,
        pdf_url=_pdf_url(http_request, settings, db_ticket.id),
        is_new=is_new,
    )


@router.get("/turnos", response_model=list[TicketOut])
def list_all(store: TicketStore = Depends(get_store)):
    return ticket_service.list_all(store)


@router.get("/turno/{ticket_id}", response_model=TicketOut)
def get(ticket_id: int, store: TicketStore = Depends(get_store)):
    return ticket_service.get_by_id(store, ticket_id)


@router.get("/turno/{ticket_id}/pdf", name="download_receipt", response_class=Response)
def download_receipt(
    ticket_id: int,
    tz: str | None = Query(default=None, description="IANA timezone for printed dates, e.g. Europe/Madrid"),
    store: TicketStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    db_ticket = ticket_service.get_by_id(store, ticket_id)
    zone = resolve_timezone(tz or settings.TIMEZONE)

    buffer = BytesIO()
    render_receipt(
        db_ticket,
        buffer,
        now=datetime.now(timezone.utc),
        tz=zone,
        options=ReceiptOptions.from_settings(settings),
    )
    return Response(
        content=buffer.getvalue(),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={receipt_filename(db_ticket)}"},
    )


@router.put("/turno/{ticket_id}", response_model=TicketChanged)
def update(ticket_id: int, ticket: TicketUpdate, store: TicketStore = Depends(get_store)):
    updated = ticket_service.update(store, ticket_id, ticket.name, ticket.request)
    return TicketChanged(message="Ticket updated successfully", ticket=TicketOut.model_validate(updated))


@router.delete("/turno/{ticket_id}", response_model=TicketChanged)
def delete(ticket_id: int, store: TicketStore = Depends(get_store)):
    deleted = ticket_service.remove(store, ticket_id)
    return TicketChanged(message="Ticket deleted successfully", ticket=TicketOut.model_validate(deleted))
