"""Customer payment and stock movement histories."""
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class CustomerPayment(Base):
    __tablename__ = "customer_payment"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    customer_id: Mapped[str] = mapped_column(String(36), ForeignKey("customer.id"), nullable=False, index=True)
    payment_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    document_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    paid_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    remaining: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)  # PAGAMENT when imported


class StockMovement(Base):
    __tablename__ = "stock_movement"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("product.id"), nullable=False, index=True)
    movement_date: Mapped[Optional[date]] = mapped_column("date", Date, nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)  # E = entry, S = exit
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False)
    unit_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    total: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    note_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)  # MOV_EST when imported
