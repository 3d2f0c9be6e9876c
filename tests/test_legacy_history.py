"""Tests for payment and stock history migration (app/legacy/history.py)."""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.legacy.files import prepare_legacy_files
from app.legacy.history import migrate_customer_payments, migrate_stock_movements
from app.legacy.master_data import migrate_master_data
from app.legacy.staging import load_staging
from app.models import CustomerPayment, StockMovement
from tests.dbf_fixtures import write_sample_export

PAYMENTS = [
    {"COD_CLI": "C1", "VALOR_DOC": 100, "VLR_PAGO": 60, "RESTANTE": 40, "PAGAMENTO": date(2023, 6, 1)},
    {"COD_CLI": "C9", "VALOR_DOC": 10, "VLR_PAGO": 10, "RESTANTE": 0},
    {"COD_CLI": "", "VALOR_DOC": 5},
]

MOVEMENTS = [
    {"TIP_MOV": "e", "DATA": date(2023, 4, 2), "COD_PROD": "P001", "QTDE": 12, "VALOR": 5, "TOTAL": 60, "NF": "778"},
    {"TIP_MOV": "S", "COD_PROD": "P002"},
    {"TIP_MOV": "S", "COD_PROD": "P404", "QTDE": 1},
]


def _prepare(db, directory):
    load_staging(db, prepare_legacy_files(directory))
    migrate_master_data(db)


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.mark.integration
class TestCustomerPayments:
    def test_unresolved_customers_are_skipped(self, db, tmp_path):
        _prepare(db, write_sample_export(tmp_path, PAGAMENT=PAYMENTS))
        assert migrate_customer_payments(db) == 1

        payment = db.execute(select(CustomerPayment)).scalar_one()
        assert payment.payment_date == date(2023, 6, 1)
        assert payment.document_value == Decimal("100.00")
        assert payment.remaining == Decimal("40.00")
        assert payment.source == "PAGAMENT"

    def test_reimport_replaces_history(self, db, tmp_path):
        _prepare(db, write_sample_export(tmp_path, PAGAMENT=PAYMENTS))
        migrate_customer_payments(db)
        migrate_customer_payments(db)
        assert _count(db, CustomerPayment) == 1


@pytest.mark.integration
class TestStockMovements:
    def test_movements(self, db, tmp_path):
        _prepare(db, write_sample_export(tmp_path, MOV_EST=MOVEMENTS))
        assert migrate_stock_movements(db) == 2

        entry, exit_ = db.execute(
            select(StockMovement).order_by(StockMovement.type)
        ).scalars().all()
        assert entry.type == "E"
        assert entry.movement_date == date(2023, 4, 2)
        assert entry.quantity == Decimal("12")
        assert entry.note_number == "778"
        assert exit_.type == "S"
        assert exit_.quantity == Decimal("0")
        assert exit_.movement_date is None

    def test_reimport_replaces_history(self, db, tmp_path):
        _prepare(db, write_sample_export(tmp_path, MOV_EST=MOVEMENTS))
        migrate_stock_movements(db)
        migrate_stock_movements(db)
        assert _count(db, StockMovement) == 2
