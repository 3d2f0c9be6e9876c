"""Master data migration: staging -> product groups, products, customers, sellers, payment terms.

Every entity is upserted on legacy_code, so importing the same legacy system
twice updates rows in place. Runs before sales migration because sales resolve
their references through these tables.
"""
import logging
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from app.db.upsert import upsert_rows
from app.legacy import sources
from app.legacy.lookups import group_map
from app.legacy.sources import LegacySource
from app.legacy.staging import count_staging, staging_rows
from app.legacy.values import normalize_code, normalize_number, normalize_string
from app.models import Customer, PaymentTerm, Product, ProductGroup, Seller

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER_STATUS = "active"

RowMapper = Callable[[str, dict[str, Optional[str]]], dict[str, Any]]


def _keyed_rows(
    db: Session,
    source: LegacySource,
    code_column: str,
    mapper: RowMapper,
) -> list[dict[str, Any]]:
    """Map staging rows with a usable legacy code; a repeated code keeps the last row."""
    by_code: dict[str, dict[str, Any]] = {}
    for row in staging_rows(db, source):
        code = normalize_code(row.get(code_column))
        if code is None:
            continue
        if code in by_code:
            logger.debug("[Master %s] duplicate legacy code %s, keeping last row", source.table, code)
        by_code[code] = {"legacy_code": code, **mapper(code, row)}
    return list(by_code.values())


def _migrate(
    db: Session,
    model: Any,
    source: LegacySource,
    code_column: str,
    mapper: RowMapper,
) -> int:
    rows = _keyed_rows(db, source, code_column, mapper)
    upsert_rows(db, model, rows, key_columns=["legacy_code"])
    db.commit()
    staged = count_staging(db, source)
    logger.info("[Master %s] %d staged, %d upserted", model.__tablename__, staged, len(rows))
    return staged


def _product_group(code: str, row: dict) -> dict[str, Any]:
    return {"name": normalize_string(row.get("nome")) or code}


def _customer(code: str, row: dict) -> dict[str, Any]:
    status = normalize_string(row.get("status"))
    return {
        "name": normalize_string(row.get("nome")) or code,
        "cpf": normalize_string(row.get("cpf")),
        "address": normalize_string(row.get("endereco")),
        "city": normalize_string(row.get("cidade")),
        "uf": normalize_string(row.get("uf")),
        "cep": normalize_string(row.get("cep")),
        "phone": normalize_string(row.get("fone")),
        "status": status.lower() if status else DEFAULT_CUSTOMER_STATUS,
        "notes": normalize_string(row.get("obs")),
    }


def _named(name_column: str) -> RowMapper:
    def mapper(code: str, row: dict) -> dict[str, Any]:
        return {"name": normalize_string(row.get(name_column)) or code}
    return mapper


def migrate_product_groups(db: Session) -> int:
    return _migrate(db, ProductGroup, sources.GRUPO, "cod_grup", _product_group)


def migrate_products(db: Session) -> int:
    """Products resolve group_id through already-migrated group legacy codes (unknown -> NULL)."""
    groups = group_map(db)

    def mapper(code: str, row: dict) -> dict[str, Any]:
        group_code = normalize_code(row.get("cod_grup"))
        return {
            "name": normalize_string(row.get("nome_prod")) or code,
            "barcode": normalize_string(row.get("cod_barra")),
            "reference": normalize_string(row.get("referencia")),
            "min_stock": normalize_number(row.get("esto_min")),
            "price_cash": normalize_number(row.get("avista")),
            "price_base": normalize_number(row.get("preco_base")),
            "group_id": groups.get(group_code) if group_code else None,
        }

    return _migrate(db, Product, sources.PRODUTO, "cod_prod", mapper)


def migrate_customers(db: Session) -> int:
    return _migrate(db, Customer, sources.CLIENTES, "codigo", _customer)


def migrate_sellers(db: Session) -> int:
    return _migrate(db, Seller, sources.VENDEDOR, "codigo", _named("nome"))


def migrate_payment_terms(db: Session) -> int:
    return _migrate(db, PaymentTerm, sources.FORMA_PG, "cod_fpg", _named("forma"))


def migrate_master_data(db: Session) -> dict[str, int]:
    """Upsert all reference entities; returns staged row counts per entity."""
    return {
        "product_groups": migrate_product_groups(db),
        "products": migrate_products(db),
        "customers": migrate_customers(db),
        "sellers": migrate_sellers(db),
        "payment_terms": migrate_payment_terms(db),
    }
