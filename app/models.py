"""
SQLAlchemy Database Models

Orders placed from the web menu. An Order owns its OrderItems and both are
written in a single transaction.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


MIN_ITEM_QUANTITY = 1
MAX_ITEM_QUANTITY = 9


class Order(Base):
    """
    Main Order table - one row per checkout.

    The card number is never persisted; ``payment_reference`` keeps a masked
    form suitable for receipts.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # =========================================================================
    # CUSTOMER INFORMATION
    # =========================================================================
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False, index=True)

    # =========================================================================
    # PAYMENT & PRICING
    # =========================================================================
    payment_reference = Column(String(32), nullable=False)
    total_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order #{self.id} - {self.first_name} {self.last_name} - ${self.total_price}>"


class OrderItem(Base):
    """A single line of an order: item, unit price, quantity and subtotal."""
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint(
            f"quantity BETWEEN {MIN_ITEM_QUANTITY} AND {MAX_ITEM_QUANTITY}",
            name="ck_order_items_quantity_range",
        ),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_name = Column(String(200), nullable=False)
    item_price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Numeric(10, 2, asdecimal=False), nullable=False)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem {self.item_name} x{self.quantity} (order #{self.order_id})>"
