"""
Gateway order created before checkout.

An order is bound to the user, event and quantity it was priced for. It is
claimed (created -> paid) in the same transaction that appends its tickets,
so a single payment can never mint tickets twice.
"""

import enum

from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint

from ticketing.db.base import Base, TimestampMixin


class OrderStatus(str, enum.Enum):
    CREATED = "created"
    PAID = "paid"


class PaymentOrder(Base, TimestampMixin):
    __tablename__ = "payment_orders"

    id = Column(String(64), primary_key=True)  # gateway order id
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    amount = Column(Integer, nullable=False)  # minor units
    currency = Column(String(3), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.CREATED.value)
    payment_id = Column(String(64), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_order_quantity_positive"),
        CheckConstraint("amount > 0", name="check_order_amount_positive"),
        CheckConstraint("status IN ('created', 'paid')", name="check_order_status"),
    )

    def __repr__(self) -> str:
        return f"<PaymentOrder(id={self.id}, event={self.event_id}, qty={self.quantity}, status={self.status})>"
