"""
Discount code management and redemption
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.database import db_manager
from eventhub.core.exceptions import ConflictError, InvalidDiscountError, NotFoundError
from eventhub.models.base import as_utc, utcnow
from eventhub.models.discount import Discount
from eventhub.schemas.discount import DiscountCreate

logger = logging.getLogger(__name__)

_discounts = Discount.__table__


class DiscountService:

    async def create_discount(self, db: AsyncSession, data: DiscountCreate) -> Discount:
        async with db_manager.transaction(db):
            existing = await db.scalar(select(Discount.id).where(Discount.code == data.code))
            if existing:
                raise ConflictError(f"Discount code {data.code} already exists", {"code": data.code})

            discount = Discount(
                code=data.code,
                percentage=data.percentage,
                valid_from=as_utc(data.valid_from),
                valid_to=as_utc(data.valid_to),
                description=data.description,
                usage_limit=data.usage_limit,
                used_count=0,
                is_active=True,
            )
            db.add(discount)
            await db.flush()

        logger.info(f"Discount code created: {discount.code} ({discount.percentage}%)")
        return discount

    async def list_discounts(self, db: AsyncSession, active_only: bool = False) -> List[Discount]:
        stmt = select(Discount).order_by(Discount.created_at.desc())
        if active_only:
            stmt = stmt.where(Discount.is_active.is_(True))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def deactivate_discount(self, db: AsyncSession, discount_id: UUID) -> Discount:
        async with db_manager.transaction(db):
            discount = await db.get(Discount, discount_id)
            if not discount:
                raise NotFoundError("Discount", discount_id)
            discount.is_active = False

        logger.info(f"Discount code deactivated: {discount.code}")
        return discount

    async def redeem(self, db: AsyncSession, code: str) -> Discount:
        """
        Consume one use of a discount code.

        The usage counter is bumped with a conditional update so a code with a
        usage limit is never redeemed past it. Must run inside the caller's
        transaction; rolling that back also gives the use back.
        """
        code = code.strip().upper()
        now = utcnow()
        result = await db.execute(
            update(_discounts)
            .where(
                _discounts.c.code == code,
                _discounts.c.is_active.is_(True),
                _discounts.c.valid_from <= now,
                _discounts.c.valid_to >= now,
                or_(
                    _discounts.c.usage_limit == 0,
                    _discounts.c.used_count < _discounts.c.usage_limit
                )
            )
            .values(used_count=_discounts.c.used_count + 1, updated_at=now)
        )
        if result.rowcount != 1:
            logger.info(f"Discount code rejected: {code}")
            raise InvalidDiscountError(code)

        stmt = (
            select(Discount)
            .where(Discount.code == code)
            .execution_options(populate_existing=True)
        )
        return (await db.execute(stmt)).scalar_one()


discount_service = DiscountService()
