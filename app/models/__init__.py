"""All SQLAlchemy models: single source of truth.

Import models from here:
    from app.models import Product, Sale, LegacyImport, ...
"""
from app.models.base import Base
from app.models.catalog import Customer, PaymentTerm, Product, ProductGroup, Seller
from app.models.history import CustomerPayment, StockMovement
from app.models.legacy_import import LegacyImport, LegacyImportLog, LegacyImportStatus
from app.models.sale import Sale, SaleItem, SaleStatus

__all__ = [
    "Base",
    "Customer",
    "CustomerPayment",
    "LegacyImport",
    "LegacyImportLog",
    "LegacyImportStatus",
    "PaymentTerm",
    "Product",
    "ProductGroup",
    "Sale",
    "SaleItem",
    "SaleStatus",
    "Seller",
    "StockMovement",
]
