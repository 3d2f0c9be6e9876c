"""Legacy-code -> id lookup maps built from already-migrated core tables."""
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Customer, PaymentTerm, Product, ProductGroup, Seller

LegacyMap = dict[str, str]


def build_legacy_map(db: Session, model) -> LegacyMap:
    """One pass over a reference table: {trimmed legacy_code: id}."""
    rows = db.execute(
        select(model.legacy_code, model.id).where(model.legacy_code.is_not(None))
    ).all()
    mapping: LegacyMap = {}
    for legacy_code, entity_id in rows:
        code = str(legacy_code).strip()
        if code:
            mapping[code] = entity_id
    return mapping


def group_map(db: Session) -> LegacyMap:
    return build_legacy_map(db, ProductGroup)


def product_map(db: Session) -> LegacyMap:
    return build_legacy_map(db, Product)


def customer_map(db: Session) -> LegacyMap:
    return build_legacy_map(db, Customer)


def seller_map(db: Session) -> LegacyMap:
    return build_legacy_map(db, Seller)


def payment_term_map(db: Session) -> LegacyMap:
    return build_legacy_map(db, PaymentTerm)
