"""Sales migration: expand denormalized VENDAS/PEDIDOS records into sale + sale_item rows.

A legacy sales record inlines up to seven product lines as parallel column
families (cod1..cod7, qtde1..qtde7, vlr1..vlr7, total1..total7). Completed
sales (VENDAS) and open orders (PEDIDOS) share that shape, so both go through
migrate_family() with a different SaleFamily.
"""
import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from app.db.upsert import upsert_statement
from app.legacy import sources
from app.legacy.lookups import LegacyMap, customer_map, payment_term_map, product_map, seller_map
from app.legacy.sources import SLOT_COUNT, LegacySource
from app.legacy.staging import staging_rows
from app.legacy.values import normalize_code, normalize_date, normalize_number
from app.models import Sale, SaleItem, SaleStatus

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class SlotItem:
    slot: int
    product_code: str
    quantity: Decimal
    unit_price: Decimal
    total: Decimal


@dataclass(frozen=True)
class SaleFamily:
    source: LegacySource
    status: str
    label: str  # prefix of mismatch messages
    count_key: str
    items_key: str
    refresh_status: bool  # overwrite status on re-import

    @property
    def source_label(self) -> str:
        """Value stored in sale.source, e.g. VENDAS."""
        return self.source.file.rsplit(".", 1)[0]


COMPLETED_SALES = SaleFamily(
    source=sources.VENDAS,
    status=SaleStatus.COMPLETED.value,
    label="Sale",
    count_key="sales",
    items_key="sale_items",
    # status of an imported sale may be changed in the back office (e.g. cancelled)
    refresh_status=False,
)
OPEN_ORDERS = SaleFamily(
    source=sources.PEDIDOS,
    status=SaleStatus.DRAFT.value,
    label="Order",
    count_key="orders",
    items_key="order_items",
    refresh_status=True,
)
SALE_FAMILIES: tuple[SaleFamily, ...] = (COMPLETED_SALES, OPEN_ORDERS)
SALE_SOURCE_LABELS: list[str] = [f.source_label for f in SALE_FAMILIES]


@dataclass
class SaleSummary:
    sales: int = 0
    sale_items: int = 0
    orders: int = 0
    order_items: int = 0
    mismatches: list[str] = field(default_factory=list)

    def add(self, key: str, amount: int = 1) -> None:
        setattr(self, key, getattr(self, key) + amount)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ReferenceMaps:
    sellers: LegacyMap
    customers: LegacyMap
    payment_terms: LegacyMap
    products: LegacyMap

    @classmethod
    def build(cls, db: Session) -> "ReferenceMaps":
        return cls(
            sellers=seller_map(db),
            customers=customer_map(db),
            payment_terms=payment_term_map(db),
            products=product_map(db),
        )


def extract_slot_items(row: dict[str, Any]) -> list[SlotItem]:
    """Slots with a non-empty product code, in slot order. Missing numbers count as 0."""
    items: list[SlotItem] = []
    for index in range(1, SLOT_COUNT + 1):
        code = normalize_code(row.get(f"cod{index}"))
        if code is None:
            continue
        items.append(SlotItem(
            slot=index,
            product_code=code,
            quantity=normalize_number(row.get(f"qtde{index}")) or ZERO,
            unit_price=normalize_number(row.get(f"vlr{index}")) or ZERO,
            total=normalize_number(row.get(f"total{index}")) or ZERO,
        ))
    return items


def _resolve(mapping: LegacyMap, value: Any) -> Optional[str]:
    code = normalize_code(value)
    return mapping.get(code) if code else None


def sale_header(row: dict[str, Any], source_key: str, family: SaleFamily, maps: ReferenceMaps) -> dict[str, Any]:
    return {
        "emission_date": normalize_date(row.get("emissao")),
        "order_number": source_key,
        "seller_id": _resolve(maps.sellers, row.get("cod_vend")),
        "customer_id": _resolve(maps.customers, row.get("cod_cli")),
        "payment_term_id": _resolve(maps.payment_terms, row.get("cod_fpg")),
        "subtotal": normalize_number(row.get("sub_total")),
        "discount": normalize_number(row.get("desconto")),
        "total": normalize_number(row.get("total_gera")),
        "status": family.status,
        "source": family.source_label,
        "source_key": source_key,
    }


def delete_imported_sales(db: Session, labels: list[str] = SALE_SOURCE_LABELS) -> int:
    """Remove sales (and their items) previously imported from the given sources."""
    sale_table = Sale.__table__
    item_table = SaleItem.__table__
    imported = select(sale_table.c.id).where(sale_table.c.source.in_(labels))
    db.execute(delete(item_table).where(item_table.c.sale_id.in_(imported)))
    result = db.execute(delete(sale_table).where(sale_table.c.source.in_(labels)))
    db.commit()
    return result.rowcount or 0


def migrate_family(db: Session, family: SaleFamily, maps: ReferenceMaps, summary: SaleSummary) -> None:
    update_columns = [
        "emission_date", "order_number", "seller_id", "customer_id",
        "payment_term_id", "subtotal", "discount", "total",
    ]
    if family.refresh_status:
        update_columns.append("status")
    upsert = upsert_statement(db, Sale, ["source", "source_key"], update_columns).returning(
        Sale.__table__.c.id
    )
    item_table = SaleItem.__table__

    for row in staging_rows(db, family.source):
        source_key = normalize_code(row.get("pedido"))
        if source_key is None:
            continue

        sale_id = db.execute(upsert, sale_header(row, source_key, family, maps)).scalar_one()
        db.execute(delete(item_table).where(item_table.c.sale_id == sale_id))

        items = []
        for slot in extract_slot_items(row):
            product_id = maps.products.get(slot.product_code)
            if product_id is None:
                summary.mismatches.append(
                    f"{family.label} {source_key}: product {slot.product_code} not found"
                )
                continue
            items.append({
                "sale_id": sale_id,
                "product_id": product_id,
                "quantity": slot.quantity,
                "unit_price": slot.unit_price,
                "total": slot.total,
            })
        if items:
            db.execute(insert(item_table), items)
        db.commit()

        summary.add(family.count_key)
        summary.add(family.items_key, len(items))

    logger.info(
        "[Sales %s] %d headers, %d items",
        family.source_label, getattr(summary, family.count_key), getattr(summary, family.items_key),
    )


def migrate_sales(db: Session, overwrite: bool = False) -> SaleSummary:
    """
    Migrate completed sales then open orders.

    With overwrite, sales previously imported from VENDAS/PEDIDOS are deleted
    first. Reference entities are never deleted here: they are merged by
    legacy code.
    """
    summary = SaleSummary()
    if overwrite:
        removed = delete_imported_sales(db)
        logger.info("[Sales] overwrite: removed %d previously imported sales", removed)

    maps = ReferenceMaps.build(db)
    for family in SALE_FAMILIES:
        migrate_family(db, family, maps, summary)
    return summary
