"""
Ticket Service
Issues tickets for paid bookings, lists them for their owners, checks them
in at the door and renders printable PDF tickets
"""

import logging
import uuid
from datetime import datetime
from io import BytesIO
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from reportlab.graphics.barcode import code128
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, Image
from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eventhub.core.database import db_manager
from eventhub.core.exceptions import AuthorizationError, NotFoundError
from eventhub.core.metrics import TICKETS_CHECKED_IN
from eventhub.core.security import AuthContext
from eventhub.models.base import as_utc, utcnow
from eventhub.models.booking import Booking
from eventhub.models.event import Event
from eventhub.models.ticket import Ticket, TicketStatus
from eventhub.models.venue import Venue
from eventhub.services.qr_code_service import qr_code_service

logger = logging.getLogger(__name__)

_tickets = Ticket.__table__


class TicketService:
    """Service for ticket issuance and validation"""

    @staticmethod
    def ticket_number(booking_reference: str, sequence: int) -> str:
        return f"TKT-{booking_reference}-{sequence:03d}"

    def issue_tickets(self, booking: Booking, issued_at: Optional[datetime] = None) -> List[Ticket]:
        """
        Create one active ticket per booked unit, each with a signed QR payload.

        booking.tickets must already be loaded; the new tickets are added to it
        and flushed with the caller's transaction.
        """
        issued_at = issued_at or utcnow()
        tickets = []
        for sequence in range(1, booking.quantity + 1):
            ticket_id = uuid.uuid4()
            tickets.append(Ticket(
                id=ticket_id,
                ticket_number=self.ticket_number(booking.booking_reference, sequence),
                qr_payload=qr_code_service.build_payload(ticket_id, booking.id, booking.event_id, issued_at),
                status=TicketStatus.ACTIVE,
                issued_at=issued_at,
            ))
        booking.tickets.extend(tickets)
        logger.info(f"Issued {len(tickets)} tickets for booking {booking.booking_reference}")
        return tickets

    async def list_my_tickets(
        self,
        db: AsyncSession,
        ctx: AuthContext,
        status: Optional[TicketStatus] = None,
        time_filter: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Dict], int]:
        """The caller's tickets joined with their booking, event and venue"""
        filters = [Booking.customer_id == ctx.user_id]
        if status:
            filters.append(Ticket.status == status)
        if time_filter == "upcoming":
            filters.append(Event.starts_at >= utcnow())
        elif time_filter == "past":
            filters.append(Event.starts_at < utcnow())
        if search:
            filters.append(
                or_(
                    Event.title.ilike(f"%{search}%"),
                    Booking.booking_reference.ilike(f"%{search}%")
                )
            )

        base = (
            select(Ticket, Booking.booking_reference, Event.id, Event.title, Event.starts_at, Venue.name)
            .join(Booking, Ticket.booking_id == Booking.id)
            .join(Event, Booking.event_id == Event.id)
            .join(Venue, Event.venue_id == Venue.id)
            .where(*filters)
        )
        total = (await db.execute(
            select(func.count()).select_from(base.subquery())
        )).scalar_one()

        rows = await db.execute(
            base.order_by(Event.starts_at.asc(), Ticket.ticket_number).offset(skip).limit(limit)
        )
        items = []
        for ticket, reference, event_id, title, starts_at, venue_name in rows.all():
            items.append({
                "id": ticket.id,
                "booking_id": ticket.booking_id,
                "ticket_number": ticket.ticket_number,
                "qr_payload": ticket.qr_payload,
                "status": ticket.status,
                "seat_number": ticket.seat_number,
                "issued_at": ticket.issued_at,
                "used_at": ticket.used_at,
                "booking_reference": reference,
                "event_id": event_id,
                "event_title": title,
                "event_starts_at": starts_at,
                "venue_name": venue_name,
            })
        return items, total

    async def get_booking_tickets(self, db: AsyncSession, ctx: AuthContext, booking_id: UUID) -> List[Ticket]:
        booking = await db.get(Booking, booking_id)
        if not booking or (not ctx.is_admin and booking.customer_id != ctx.user_id):
            raise NotFoundError("Booking", booking_id)

        result = await db.execute(
            select(Ticket)
            .where(Ticket.booking_id == booking_id)
            .order_by(Ticket.ticket_number)
        )
        return list(result.scalars().all())

    async def _load(self, db: AsyncSession, ticket_id: UUID) -> Optional[Ticket]:
        stmt = (
            select(Ticket)
            .options(
                selectinload(Ticket.booking).selectinload(Booking.event).selectinload(Event.venue),
                selectinload(Ticket.booking).selectinload(Booking.customer),
            )
            .where(Ticket.id == ticket_id)
            .execution_options(populate_existing=True)
        )
        return (await db.execute(stmt)).scalar_one_or_none()

    async def get_ticket(self, db: AsyncSession, ctx: AuthContext, ticket_id: UUID) -> Ticket:
        """A ticket owned by the caller, or any ticket for admins"""
        ticket = await self._load(db, ticket_id)
        if not ticket or (not ctx.is_admin and ticket.booking.customer_id != ctx.user_id):
            raise NotFoundError("Ticket", ticket_id)
        return ticket

    async def verify_ticket(self, db: AsyncSession, ctx: AuthContext, payload: str, check_in: bool = True) -> Dict:
        """
        Validate a scanned QR payload and optionally check the ticket in.

        Malformed or tampered payloads raise InvalidQRCodeError. Tickets that
        are not admissible come back with valid=False and a result of
        mismatch, already_used, cancelled or expired. Scanning an active
        ticket after its event day marks it expired.
        """
        parsed = qr_code_service.parse_payload(payload)

        ticket = await self._load(db, parsed.ticket_id)
        if not ticket:
            raise NotFoundError("Ticket", parsed.ticket_id)

        event = ticket.booking.event
        if not ctx.is_admin and event.organizer_id != ctx.user_id:
            raise AuthorizationError("Only the event organizer can verify its tickets")

        def outcome(valid: bool, result: str, message: str) -> Dict:
            return {
                "valid": valid,
                "result": result,
                "message": message,
                "ticket_id": ticket.id,
                "ticket_number": ticket.ticket_number,
                "ticket_status": ticket.status,
                "event_id": event.id,
                "used_at": ticket.used_at,
            }

        if (
            ticket.booking_id != parsed.booking_id
            or event.id != parsed.event_id
            or ticket.qr_payload != payload
        ):
            logger.warning(f"QR payload does not match ticket {ticket.id}")
            return outcome(False, "mismatch", "QR code does not match this ticket")

        status = TicketStatus(ticket.status)
        if status == TicketStatus.USED:
            return outcome(False, "already_used", "Ticket has already been used")
        if status == TicketStatus.CANCELLED:
            return outcome(False, "cancelled", "Ticket has been cancelled")
        if status == TicketStatus.EXPIRED:
            return outcome(False, "expired", "Ticket has expired")

        if as_utc(event.starts_at).date() < utcnow().date():
            if check_in:
                async with db_manager.transaction(db):
                    await db.execute(
                        update(_tickets)
                        .where(_tickets.c.id == ticket.id, _tickets.c.status == TicketStatus.ACTIVE)
                        .values(status=TicketStatus.EXPIRED, updated_at=utcnow())
                    )
                    await db.refresh(ticket, ["status", "updated_at"])
                logger.info(f"Ticket {ticket.ticket_number} expired, event {event.id} is over")
            return outcome(False, "expired", "Event date has passed")

        if not check_in:
            return outcome(True, "valid", "Ticket is valid")

        async with db_manager.transaction(db):
            now = utcnow()
            result = await db.execute(
                update(_tickets)
                .where(_tickets.c.id == ticket.id, _tickets.c.status == TicketStatus.ACTIVE)
                .values(status=TicketStatus.USED, used_at=now, updated_at=now)
            )
            await db.refresh(ticket, ["status", "used_at", "updated_at"])

        if result.rowcount != 1:
            return outcome(False, "already_used", "Ticket has already been used")

        TICKETS_CHECKED_IN.inc()
        logger.info(f"Ticket {ticket.ticket_number} checked in by {ctx.user_id}")
        return outcome(True, "checked_in", "Ticket checked in")

    def render_ticket_pdf(self, ticket: Ticket) -> bytes:
        """Printable ticket with event details, QR code and barcode"""
        booking = ticket.booking
        event = booking.event
        venue = event.venue

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=72,
            leftMargin=72,
            topMargin=72,
            bottomMargin=18,
            title=ticket.ticket_number,
        )

        elements = []
        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            'TicketTitle',
            parent=styles['Heading1'],
            fontSize=24,
            textColor=colors.HexColor('#2c3e50'),
            spaceAfter=30,
            alignment=1
        )
        event_style = ParagraphStyle(
            'EventName',
            parent=styles['Heading2'],
            fontSize=20,
            textColor=colors.HexColor('#34495e'),
            spaceAfter=20,
            alignment=1
        )
        small_style = ParagraphStyle(
            'Small',
            parent=styles['Normal'],
            fontSize=10,
            textColor=colors.grey,
            alignment=1
        )

        elements.append(Paragraph("EVENT TICKET", title_style))
        elements.append(Paragraph(event.title, event_style))
        elements.append(Spacer(1, 0.2 * inch))

        details = [
            ['Ticket:', ticket.ticket_number],
            ['Booking:', booking.booking_reference],
            ['Date:', event.starts_at.strftime('%A, %d %B %Y')],
            ['Time:', event.starts_at.strftime('%H:%M')],
            ['Venue:', venue.name],
            ['Address:', venue.address or venue.location],
            ['Seat:', ticket.seat_number or 'General admission'],
            ['Name:', booking.customer.full_name],
            ['Status:', TicketStatus(ticket.status).value.upper()],
        ]
        details_table = Table(details, colWidths=[2 * inch, 4 * inch])
        details_table.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 12),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 12),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('BACKGROUND', (0, 0), (0, -1), colors.HexColor('#ecf0f1')),
        ]))
        elements.append(details_table)
        elements.append(Spacer(1, 0.4 * inch))

        qr_img = Image(BytesIO(qr_code_service.render_png(ticket.qr_payload)), width=2.5 * inch, height=2.5 * inch)
        qr_table = Table([[qr_img]], colWidths=[6 * inch])
        qr_table.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]))
        elements.append(qr_table)
        elements.append(Spacer(1, 0.2 * inch))
        elements.append(Paragraph("Present this QR code at the venue for entry", small_style))
        elements.append(Spacer(1, 0.3 * inch))

        barcode = code128.Code128(ticket.ticket_number, barHeight=0.5 * inch, barWidth=1)
        elements.append(barcode)
        elements.append(Spacer(1, 0.1 * inch))
        elements.append(Paragraph(ticket.ticket_number, small_style))

        elements.append(Spacer(1, 0.4 * inch))
        elements.append(Paragraph(
            "This ticket admits one and is non-transferable. "
            f"Generated on {utcnow().strftime('%Y-%m-%d %H:%M')} UTC",
            small_style
        ))

        doc.build(elements)
        buffer.seek(0)
        return buffer.getvalue()


ticket_service = TicketService()
