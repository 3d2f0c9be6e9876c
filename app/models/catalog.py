"""Reference entities shared with the back office: groups, products, customers, sellers, payment terms.

Each carries an optional legacy_code; when present it is unique and is the
natural key used by the legacy import to upsert instead of duplicating.
"""
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class ProductGroup(Base):
    __tablename__ = "product_group"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    legacy_code: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class Product(Base):
    __tablename__ = "product"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    legacy_code: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    barcode: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    group_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("product_group.id"), nullable=True,
    )
    min_stock: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 3), nullable=True)
    price_cash: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    price_base: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)


class Customer(Base):
    __tablename__ = "customer"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    legacy_code: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cpf: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)  # Brazilian tax id
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    uf: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    cep: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active", server_default="active",
    )
    credit_limit: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Seller(Base):
    __tablename__ = "seller"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    legacy_code: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class PaymentTerm(Base):
    __tablename__ = "payment_term"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    legacy_code: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
