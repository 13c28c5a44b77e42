"""
Payment endpoints
"""

from typing import Any, Literal, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import get_session
from eventhub.core.security import AuthContext, get_auth_context
from eventhub.schemas.payment import (
    CheckoutResponse,
    PaymentCreate,
    PaymentHistoryResponse,
    PaymentSuccessResponse,
)
from eventhub.services.payment_service import payment_service

router = APIRouter()


@router.get("/checkout/{booking_id}", response_model=CheckoutResponse)
async def checkout(
    booking_id: UUID,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Quote the amount due, service fee included, for a pending booking
    """
    return await payment_service.get_checkout(db, ctx, booking_id)


@router.post("/process", response_model=PaymentSuccessResponse)
async def process_payment(
    payment_data: PaymentCreate,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Any:
    """
    Pay for a pending booking. On success the booking is confirmed, its
    tickets are issued and loyalty points are credited.
    """
    return await payment_service.process_payment(
        db,
        ctx,
        booking_id=payment_data.booking_id,
        payment_method=payment_data.payment_method,
        amount=payment_data.amount
    )


@router.get("/history", response_model=PaymentHistoryResponse)
async def payment_history(
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    date_filter: Optional[Literal["today", "week", "month", "year"]] = None
) -> Any:
    return await payment_service.payment_history(
        db,
        ctx,
        search=search,
        date_filter=date_filter,
        page=page,
        per_page=per_page
    )


@router.get("/{payment_id}/receipt", response_class=PlainTextResponse)
async def payment_receipt(
    payment_id: UUID,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session)
) -> Any:
    payment = await payment_service.get_payment(db, ctx, payment_id)
    return PlainTextResponse(
        payment_service.receipt_text(payment),
        headers={"Content-Disposition": f'attachment; filename="receipt-{payment.transaction_id}.txt"'}
    )
