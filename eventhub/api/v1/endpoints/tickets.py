"""
Ticket endpoints
"""

from typing import Any, List, Literal, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import get_session
from eventhub.core.security import AuthContext, get_auth_context, require_organizer
from eventhub.models.ticket import TicketStatus
from eventhub.schemas.response import PaginatedResponse, PaginationMeta
from eventhub.schemas.ticket import (
    MyTicketResponse,
    TicketQRImage,
    TicketResponse,
    TicketVerifyRequest,
    TicketVerifyResponse,
)
from eventhub.services.qr_code_service import qr_code_service
from eventhub.services.ticket_service import ticket_service

router = APIRouter()


@router.get("/my", response_model=PaginatedResponse[MyTicketResponse])
async def get_my_tickets(
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    status: Optional[TicketStatus] = None,
    time_filter: Optional[Literal["upcoming", "past"]] = None,
    search: Optional[str] = None
) -> Any:
    """
    List the caller's tickets across all bookings
    """
    tickets, total = await ticket_service.list_my_tickets(
        db,
        ctx,
        status=status,
        time_filter=time_filter,
        search=search,
        skip=(page - 1) * per_page,
        limit=per_page
    )
    return {
        "data": tickets,
        "pagination": PaginationMeta.build(page, per_page, total)
    }


@router.get("/booking/{booking_id}", response_model=List[TicketResponse])
async def get_booking_tickets(
    booking_id: UUID,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Any:
    return await ticket_service.get_booking_tickets(db, ctx, booking_id)


@router.get("/{ticket_id}/qr")
async def get_ticket_qr(
    ticket_id: UUID,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Response:
    """
    QR code image for a ticket
    """
    ticket = await ticket_service.get_ticket(db, ctx, ticket_id)
    return Response(content=qr_code_service.render_png(ticket.qr_payload), media_type="image/png")


@router.get("/{ticket_id}/qr/base64", response_model=TicketQRImage)
async def get_ticket_qr_base64(
    ticket_id: UUID,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Any:
    ticket = await ticket_service.get_ticket(db, ctx, ticket_id)
    return {
        "ticket_id": ticket.id,
        "ticket_number": ticket.ticket_number,
        "qr_payload": ticket.qr_payload,
        "image_base64": qr_code_service.render_base64(ticket.qr_payload),
    }


@router.get("/{ticket_id}/pdf")
async def get_ticket_pdf(
    ticket_id: UUID,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Response:
    """
    Printable PDF ticket
    """
    ticket = await ticket_service.get_ticket(db, ctx, ticket_id)
    return Response(
        content=ticket_service.render_ticket_pdf(ticket),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{ticket.ticket_number}.pdf"'}
    )


@router.post("/verify", response_model=TicketVerifyResponse)
async def verify_ticket(
    verify_data: TicketVerifyRequest,
    ctx: AuthContext = Depends(require_organizer),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Validate a scanned ticket QR code and, by default, check the ticket in
    """
    return await ticket_service.verify_ticket(db, ctx, verify_data.payload, check_in=verify_data.check_in)
