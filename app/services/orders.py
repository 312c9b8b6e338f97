"""
Order Store

Persists orders and their line items. An order and all of its items are
committed together or not at all; any database error rolls the whole unit
back.

Input is validated by ``app.schemas.OrderCreate`` before anything here runs,
so quantity bounds, phone/card formats and total reconciliation are already
enforced.
"""

import logging
import time
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Order, OrderItem
from app.schemas import OrderCreate

logger = logging.getLogger(__name__)


class OrderPersistenceError(Exception):
    """The order could not be written; nothing was committed."""


def mask_card_number(card_digits: str) -> str:
    """Keep only the last four digits of a card number."""
    return f"**** **** **** {card_digits[-4:]}"


class OrderRepository:
    """
    Order persistence bound to one request's session.

    Example:
        >>> repo = OrderRepository(session)
        >>> order = await repo.create_order(order_data)
        >>> same = await repo.get_order(order.id)
    """

    def __init__(self, session: AsyncSession, enable_performance_logging: bool = False):
        self._session = session
        self._perf = enable_performance_logging

    def _log_timing(self, label: str, start: float) -> None:
        if self._perf:
            logger.info(f"⏱️  Database: {label} - {(time.perf_counter() - start) * 1000:.0f}ms")

    async def create_order(self, data: OrderCreate) -> Order:
        """
        Insert one order with all of its items in a single transaction.

        The stored total is recomputed from the items.

        Raises:
            OrderPersistenceError: The transaction failed and was rolled back
        """
        order = Order(
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            payment_reference=mask_card_number(data.credit_card),
            total_price=data.computed_total,
        )
        order.items = [
            OrderItem(
                item_name=item.name,
                item_price=round(item.price, 2),
                quantity=item.quantity,
                subtotal=item.subtotal,
            )
            for item in data.items
        ]

        start = time.perf_counter()
        try:
            self._session.add(order)
            await self._session.flush()
            self._log_timing(f"INSERT order + {len(order.items)} items", start)

            commit_start = time.perf_counter()
            await self._session.commit()
            self._log_timing("COMMIT", commit_start)
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error(f"Order transaction rolled back: {type(e).__name__}: {e}")
            raise OrderPersistenceError("Failed to create order") from e

        self._log_timing("Total transaction time", start)
        logger.info(f"Order #{order.id} created ({len(data.items)} items, ${order.total_price:.2f})")

        created = await self.get_order(order.id)
        if created is None:
            raise OrderPersistenceError(f"Order #{order.id} missing after commit")
        return created

    async def get_order(self, order_id: int) -> Optional[Order]:
        """Fetch one order with its items, or None."""
        start = time.perf_counter()
        result = await self._session.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items))
            .execution_options(populate_existing=True)
        )
        order = result.scalar_one_or_none()
        self._log_timing("Fetch order by ID", start)
        return order

    async def list_orders(self, skip: int = 0, limit: Optional[int] = None) -> list[Order]:
        """All orders, newest first, each with its items."""
        start = time.perf_counter()
        query = (
            select(Order)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self._session.execute(query)
        orders = list(result.scalars().all())
        self._log_timing(f"Fetch {len(orders)} orders", start)
        return orders

    async def count_orders(self) -> int:
        result = await self._session.execute(select(func.count(Order.id)))
        return result.scalar() or 0
