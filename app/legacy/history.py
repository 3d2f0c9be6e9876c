"""Customer payment and stock movement histories.

Lower-criticality data: a row whose customer/product cannot be resolved is
skipped without a mismatch entry. Histories have no natural key, so the rows
previously imported from the same legacy file are replaced on each run.
"""
import logging

from sqlalchemy import delete, insert
from sqlalchemy.orm import Session

from app.legacy import sources
from app.legacy.lookups import customer_map, product_map
from app.legacy.staging import staging_rows
from app.legacy.values import normalize_code, normalize_date, normalize_number, normalize_string
from app.models import CustomerPayment, StockMovement

logger = logging.getLogger(__name__)

PAYMENT_SOURCE = "PAGAMENT"
STOCK_SOURCE = "MOV_EST"


def _replace(db: Session, model, source_label: str, rows: list[dict]) -> int:
    table = model.__table__
    db.execute(delete(table).where(table.c.source == source_label))
    if rows:
        db.execute(insert(table), rows)
    db.commit()
    return len(rows)


def migrate_customer_payments(db: Session) -> int:
    customers = customer_map(db)
    rows = []
    skipped = 0
    for row in staging_rows(db, sources.PAGAMENT):
        code = normalize_code(row.get("cod_cli"))
        customer_id = customers.get(code) if code else None
        if customer_id is None:
            skipped += 1
            continue
        rows.append({
            "customer_id": customer_id,
            "payment_date": normalize_date(row.get("pagamento")),
            "document_value": normalize_number(row.get("valor_doc")),
            "paid_value": normalize_number(row.get("vlr_pago")),
            "remaining": normalize_number(row.get("restante")),
            "source": PAYMENT_SOURCE,
        })
    count = _replace(db, CustomerPayment, PAYMENT_SOURCE, rows)
    logger.info("[History payments] %d migrated, %d skipped", count, skipped)
    return count


def migrate_stock_movements(db: Session) -> int:
    products = product_map(db)
    rows = []
    skipped = 0
    for row in staging_rows(db, sources.MOV_EST):
        code = normalize_code(row.get("cod_prod"))
        product_id = products.get(code) if code else None
        if product_id is None:
            skipped += 1
            continue
        movement_type = normalize_string(row.get("tip_mov"))
        rows.append({
            "product_id": product_id,
            "date": normalize_date(row.get("data")),
            "type": movement_type.upper() if movement_type else None,
            "quantity": normalize_number(row.get("qtde")) or 0,
            "unit_value": normalize_number(row.get("valor")),
            "total": normalize_number(row.get("total")),
            "note_number": normalize_string(row.get("nf")),
            "source": STOCK_SOURCE,
        })
    count = _replace(db, StockMovement, STOCK_SOURCE, rows)
    logger.info("[History stock] %d migrated, %d skipped", count, skipped)
    return count
