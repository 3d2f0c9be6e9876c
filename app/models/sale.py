"""Sales (completed sales and open orders) and their line items."""
import enum
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class SaleStatus(str, enum.Enum):
    DRAFT = "draft"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Sale(Base):
    """
    Sale header. Legacy imports set (source, source_key) so a re-import
    updates the same row; sales entered in the back office leave both null.
    """

    __tablename__ = "sale"
    __table_args__ = (UniqueConstraint("source", "source_key", name="uq_sale_source_key"),)

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    emission_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    order_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    seller_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("seller.id"), nullable=True)
    customer_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("customer.id"), nullable=True)
    payment_term_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("payment_term.id"), nullable=True,
    )
    subtotal: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    discount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    total: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SaleStatus.COMPLETED.value,
        server_default=SaleStatus.COMPLETED.value,
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)  # VENDAS, PEDIDOS
    source_key: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)


class SaleItem(Base):
    __tablename__ = "sale_item"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    sale_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("sale.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("product.id"), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False)
    unit_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    total: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
