# turnos/ticket/receipt.py
"""Printable ticket receipts.

Rendering happens in two steps. :func:`build_receipt` turns a ticket into an
ordered list of draw instructions and touches nothing but its arguments.
:func:`write_receipt` walks that list once and writes an A4 PDF to a binary
stream with reportlab's platypus engine, which also takes care of page breaks
when a long request overflows the page.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import BinaryIO
from xml.sax.saxutils import escape
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate
from reportlab.platypus.doctemplate import LayoutError

from turnos.core.config import Settings
from turnos.core.errors import RenderError, ValidationError
from turnos.ticket.models import Ticket

logger = logging.getLogger(__name__)

PAGE_MARGIN = 50
ACCENT = "#667eea"
MUTED = "#666666"
FAINT = "#999999"
TEXT = "#333333"

DATE_FORMAT = "%d/%m/%Y %H:%M"
GENERATED_FORMAT = "%d/%m/%Y, %H:%M:%S"

_ALIGNMENTS = {"left": TA_LEFT, "center": TA_CENTER, "justify": TA_JUSTIFY}


@dataclass(frozen=True)
class TextBlock:
    text: str
    size: float
    color: str = TEXT
    align: str = "left"
    bold: bool = False
    line_gap: float = 0
    space_after: float = 0


@dataclass(frozen=True)
class FieldLine:
    """A ``Label: value`` line with the label segment in bold."""

    label: str
    value: str
    size: float = 14
    color: str = TEXT
    space_after: float = 0


@dataclass(frozen=True)
class Rule:
    color: str = ACCENT
    thickness: float = 2
    space_after: float = 0


Instruction = TextBlock | FieldLine | Rule


@dataclass(frozen=True)
class ReceiptOptions:
    title: str = "TICKET RECEIPT"
    subtitle: str = "ManyChat Ticket System"
    footer: str = "This document is a ticket receipt. Keep it for future reference."

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReceiptOptions":
        return cls(
            title=settings.RECEIPT_TITLE,
            subtitle=settings.RECEIPT_SUBTITLE,
            footer=settings.RECEIPT_FOOTER,
        )


def resolve_timezone(name: str | None) -> tzinfo:
    """Map a zone name such as ``Europe/Madrid`` to a tzinfo.

    Raises ValidationError for names the zone database does not know.
    """
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone: {name}") from exc


def _localize(moment: datetime, tz: tzinfo) -> datetime:
    # SQLite hands back naive datetimes; they are stored in UTC
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def build_receipt(
    ticket: Ticket,
    generated_at: datetime,
    tz: tzinfo = timezone.utc,
    options: ReceiptOptions | None = None,
) -> list[Instruction]:
    """Lay out the receipt of ``ticket`` as draw instructions, top to bottom.

    ``generated_at`` is the render time printed in the footer; the ticket's
    own ``created_at`` goes in the field block. The ticket is only read.
    """
    options = options or ReceiptOptions()
    created = _localize(ticket.created_at, tz).strftime(DATE_FORMAT)
    generated = _localize(generated_at, tz).strftime(GENERATED_FORMAT)

    return [
        TextBlock(options.title, size=28, color=ACCENT, align="center", space_after=14),
        TextBlock(options.subtitle, size=12, color=MUTED, align="center", space_after=28),
        Rule(color=ACCENT, thickness=3, space_after=21),
        TextBlock(f"Ticket: {ticket.ticket_label}", size=20, color=ACCENT, align="center", space_after=40),
        FieldLine("Name:", ticket.name, space_after=7),
        FieldLine("User ID:", ticket.user_id, space_after=7),
        FieldLine("Date/Time:", created, space_after=14),
        TextBlock("Request:", size=14, bold=True, space_after=4),
        TextBlock(ticket.request, size=12, align="justify", line_gap=3, space_after=24),
        Rule(color=ACCENT, thickness=2, space_after=14),
        TextBlock(options.footer, size=10, color=FAINT, align="center", space_after=5),
        TextBlock(f"Generated on {generated}", size=8, color=FAINT, align="center"),
    ]


def receipt_text(instructions: list[Instruction]) -> str:
    """Plain-text projection of a layout, one line per instruction."""
    lines = []
    for item in instructions:
        if isinstance(item, Rule):
            lines.append("-" * 40)
        elif isinstance(item, FieldLine):
            lines.append(f"{item.label} {item.value}")
        else:
            lines.append(item.text)
    return "\n".join(lines)


def receipt_filename(ticket: Ticket) -> str:
    return f"turno-{ticket.ticket_label}.pdf"


def _flowable(item: Instruction, index: int):
    if isinstance(item, Rule):
        return HRFlowable(
            width="100%",
            thickness=item.thickness,
            color=colors.HexColor(item.color),
            spaceBefore=0,
            spaceAfter=item.space_after,
        )

    if isinstance(item, FieldLine):
        markup = f"<b>{escape(item.label)}</b> {escape(item.value)}"
        style = ParagraphStyle(
            f"field-{index}",
            fontName="Helvetica",
            fontSize=item.size,
            leading=item.size * 1.2,
            textColor=colors.HexColor(item.color),
            spaceAfter=item.space_after,
        )
        return Paragraph(markup, style)

    style = ParagraphStyle(
        f"text-{index}",
        fontName="Helvetica-Bold" if item.bold else "Helvetica",
        fontSize=item.size,
        leading=item.size * 1.2 + item.line_gap,
        textColor=colors.HexColor(item.color),
        alignment=_ALIGNMENTS[item.align],
        spaceAfter=item.space_after,
    )
    # keep user supplied line breaks
    markup = escape(item.text).replace("\n", "<br/>")
    return Paragraph(markup, style)


def write_receipt(instructions: list[Instruction], stream: BinaryIO, compress: bool = True, title: str = "") -> None:
    """Write ``instructions`` as an A4 PDF into ``stream``.

    Raises RenderError when the document cannot be written, e.g. because the
    stream has been closed.
    """
    doc = SimpleDocTemplate(
        stream,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        pageCompression=1 if compress else 0,
        invariant=1,
        title=title,
    )
    story = [_flowable(item, index) for index, item in enumerate(instructions)]
    try:
        doc.build(story)
    except (OSError, ValueError, LayoutError) as exc:
        logger.error("Failed to write receipt %r: %s", title, exc, exc_info=True)
        raise RenderError("could not write receipt") from exc


def render_receipt(
    ticket: Ticket,
    stream: BinaryIO,
    now: datetime | None = None,
    tz: tzinfo | None = None,
    options: ReceiptOptions | None = None,
    compress: bool = True,
) -> list[Instruction]:
    """Build and write the receipt of ``ticket``; returns the layout used."""
    instructions = build_receipt(
        ticket,
        generated_at=now or datetime.now(timezone.utc),
        tz=tz or timezone.utc,
        options=options,
    )
    write_receipt(instructions, stream, compress=compress, title=f"Ticket {ticket.ticket_label}")
    return instructions
