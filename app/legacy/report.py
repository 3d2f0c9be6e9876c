"""Reconciliation report: legacy (staging) counts vs migrated counts, plus mismatches.

The CSV is the auditable proof of a migration run. It is written for every
completed job, mismatches included; mismatches never fail a job.
"""
import csv
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Collection, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.legacy import sources
from app.legacy.history import PAYMENT_SOURCE, STOCK_SOURCE
from app.legacy.sales import COMPLETED_SALES, OPEN_ORDERS, SaleFamily, SaleSummary, extract_slot_items
from app.legacy.staging import count_staging, staging_rows
from app.legacy.values import normalize_code
from app.models import (
    Customer,
    CustomerPayment,
    PaymentTerm,
    Product,
    ProductGroup,
    Sale,
    SaleItem,
    Seller,
    StockMovement,
)

logger = logging.getLogger(__name__)

REPORT_HEADER = ["metric", "legacy_value", "imported_value", "notes"]


@dataclass(frozen=True)
class ReconciliationLine:
    metric: str
    legacy_value: int
    imported_value: int
    note: str = ""

    @property
    def difference(self) -> int:
        return self.imported_value - self.legacy_value

    @property
    def notes(self) -> str:
        if self.note:
            return self.note
        return "" if self.difference == 0 else f"difference {self.difference:+d}"


def _count(db: Session, stmt) -> int:
    return int(db.execute(stmt).scalar_one() or 0)


def _table_count(db: Session, model) -> int:
    return _count(db, select(func.count()).select_from(model))


def _sales_count(db: Session, family: SaleFamily) -> int:
    return _count(db, select(func.count()).select_from(Sale).where(Sale.source == family.source_label))


def _sale_items_count(db: Session, family: SaleFamily) -> int:
    return _count(
        db,
        select(func.count())
        .select_from(SaleItem)
        .join(Sale, Sale.id == SaleItem.sale_id)
        .where(Sale.source == family.source_label),
    )


def _history_count(db: Session, model, label: str) -> int:
    return _count(db, select(func.count()).select_from(model).where(model.source == label))


def _staged_slot_count(db: Session, family: SaleFamily) -> int:
    """Non-empty slots over staging rows that carry an order key."""
    return sum(
        len(extract_slot_items(row))
        for row in staging_rows(db, family.source)
        if normalize_code(row.get("pedido"))
    )


def _history_line(
    db: Session, metric: str, source: sources.LegacySource, model, label: str,
    supplied: Optional[Collection[str]],
) -> ReconciliationLine:
    imported = _history_count(db, model, label)
    if supplied is not None and source.file not in supplied:
        # histories are only replaced when their file is present
        return ReconciliationLine(metric, 0, imported, note=f"{source.file} not supplied; rows kept from earlier imports")
    return ReconciliationLine(metric, count_staging(db, source), imported)


def build_reconciliation_lines(
    db: Session, supplied: Optional[Collection[str]] = None,
) -> list[ReconciliationLine]:
    """supplied: legacy file names present in this run; None treats every source as supplied."""
    return [
        ReconciliationLine("product_groups", count_staging(db, sources.GRUPO), _table_count(db, ProductGroup)),
        ReconciliationLine("products", count_staging(db, sources.PRODUTO), _table_count(db, Product)),
        ReconciliationLine("customers", count_staging(db, sources.CLIENTES), _table_count(db, Customer)),
        ReconciliationLine("sellers", count_staging(db, sources.VENDEDOR), _table_count(db, Seller)),
        ReconciliationLine("payment_terms", count_staging(db, sources.FORMA_PG), _table_count(db, PaymentTerm)),
        ReconciliationLine("sales", count_staging(db, sources.VENDAS), _sales_count(db, COMPLETED_SALES)),
        ReconciliationLine(
            "sale_items", _staged_slot_count(db, COMPLETED_SALES), _sale_items_count(db, COMPLETED_SALES),
        ),
        ReconciliationLine("orders", count_staging(db, sources.PEDIDOS), _sales_count(db, OPEN_ORDERS)),
        ReconciliationLine(
            "order_items", _staged_slot_count(db, OPEN_ORDERS), _sale_items_count(db, OPEN_ORDERS),
        ),
        _history_line(db, "customer_payments", sources.PAGAMENT, CustomerPayment, PAYMENT_SOURCE, supplied),
        _history_line(db, "stock_movements", sources.MOV_EST, StockMovement, STOCK_SOURCE, supplied),
    ]


def write_report(path: Path, lines: list[ReconciliationLine], mismatches: list[str]) -> Path:
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh, lineterminator="\n")
        writer.writerow(REPORT_HEADER)
        for line in lines:
            writer.writerow([line.metric, line.legacy_value, line.imported_value, line.notes])
        for mismatch in mismatches:
            writer.writerow(["mismatch", "", "", mismatch])
    return path


def create_reconciliation_report(
    db: Session,
    session_dir: Union[str, Path],
    sale_summary: SaleSummary,
    supplied: Optional[Collection[str]] = None,
) -> Path:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
    path = Path(session_dir) / f"reconciliation_{stamp}.csv"
    lines = build_reconciliation_lines(db, supplied)
    write_report(path, lines, sale_summary.mismatches)
    logger.info(
        "[Report] %s: %d metrics, %d mismatches", path.name, len(lines), len(sale_summary.mismatches),
    )
    return path
