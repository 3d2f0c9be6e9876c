"""Tests for master data migration (app/legacy/master_data.py)."""
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.legacy.files import prepare_legacy_files
from app.legacy.master_data import migrate_master_data
from app.legacy.staging import load_staging
from app.models import Customer, PaymentTerm, Product, ProductGroup, Seller
from tests.conftest import make_customer
from tests.dbf_fixtures import SAMPLE_GROUPS, write_sample_export


def _stage(db, directory):
    load_staging(db, prepare_legacy_files(directory))


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def _by_code(db, model, code):
    return db.execute(select(model).where(model.legacy_code == code)).scalar_one()


@pytest.mark.integration
class TestMigrateMasterData:
    def test_sample_export(self, db, legacy_dir):
        _stage(db, legacy_dir)
        summary = migrate_master_data(db)

        assert summary == {
            "product_groups": 3,
            "products": 10,
            "customers": 2,
            "sellers": 1,
            "payment_terms": 0,
        }
        assert _count(db, ProductGroup) == 3
        assert _count(db, Product) == 10
        orphans = db.execute(
            select(func.count()).select_from(Product).where(Product.group_id.is_(None))
        ).scalar_one()
        assert orphans == 2

    def test_product_fields(self, db, legacy_dir):
        _stage(db, legacy_dir)
        migrate_master_data(db)

        product = _by_code(db, Product, "P002")
        group = _by_code(db, ProductGroup, "02")
        assert product.name == "Produto 2"
        assert product.group_id == group.id
        assert product.barcode == "7890000000002"
        assert product.price_cash == Decimal("21.00")
        assert product.min_stock == Decimal("5")

    def test_customer_fields(self, db, legacy_dir):
        _stage(db, legacy_dir)
        migrate_master_data(db)

        maria = _by_code(db, Customer, "C1")
        assert maria.name == "Maria Souza"
        assert maria.city == "São Paulo"
        assert maria.status == "ativo"
        joao = _by_code(db, Customer, "C2")
        assert joao.status == "active"
        assert joao.cpf is None

    def test_reimport_updates_in_place(self, db, tmp_path):
        _stage(db, write_sample_export(tmp_path / "first"))
        migrate_master_data(db)
        first_id = _by_code(db, ProductGroup, "01").id

        renamed = [dict(g, NOME="Bebidas Geladas") if g["COD_GRUP"] == "01" else g for g in SAMPLE_GROUPS]
        _stage(db, write_sample_export(tmp_path / "second", GRUPO=renamed))
        migrate_master_data(db)

        db.expire_all()
        assert _count(db, ProductGroup) == 3
        group = _by_code(db, ProductGroup, "01")
        assert group.id == first_id
        assert group.name == "Bebidas Geladas"

    def test_reimport_keeps_back_office_fields(self, db, legacy_dir):
        make_customer(db, "C1", name="Old name", credit_limit=Decimal("500.00"))
        _stage(db, legacy_dir)
        migrate_master_data(db)

        db.expire_all()
        customer = _by_code(db, Customer, "C1")
        assert customer.name == "Maria Souza"
        assert customer.credit_limit == Decimal("500.00")

    def test_blank_and_duplicate_codes(self, db, tmp_path):
        groups = [
            {"COD_GRUP": "01", "NOME": "First"},
            {"COD_GRUP": "  ", "NOME": "No code"},
            {"COD_GRUP": "01", "NOME": "Second"},
            {"COD_GRUP": "04", "NOME": ""},
        ]
        _stage(db, write_sample_export(tmp_path, GRUPO=groups))
        summary = migrate_master_data(db)

        assert summary["product_groups"] == 4
        assert _count(db, ProductGroup) == 2
        assert _by_code(db, ProductGroup, "01").name == "Second"
        assert _by_code(db, ProductGroup, "04").name == "04"

    def test_payment_terms_when_supplied(self, db, tmp_path):
        _stage(db, write_sample_export(tmp_path, FORMA_PG=[{"COD_FPG": "1", "FORMA": "A vista"}]))
        summary = migrate_master_data(db)
        assert summary["payment_terms"] == 1
        assert _by_code(db, PaymentTerm, "1").name == "A vista"
        assert _by_code(db, Seller, "V1").name == "Carlos"
