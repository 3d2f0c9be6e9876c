"""Pytest configuration and shared fixtures.

Set DATABASE_URL before any app module imports to use SQLite for tests.
Provides reusable fixtures: db session, file-backed engine for threaded tests,
legacy export directories, reference-data factories.
"""
import os
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Force SQLite before any app import
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///./test.db"
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("LEGACY_IMPORT_WORKER_ENABLED", "false")

from app.models.base import Base
import app.models  # noqa: F401
from app.db.session import build_engine, init_db
from app.models import Customer, Product, ProductGroup, Seller

from tests.dbf_fixtures import write_sample_export


# ── Database fixtures ────────────────────────────────────────────────

@pytest.fixture()
def db_engine():
    """In-memory SQLite engine with all tables."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(db_engine):
    """SQLAlchemy session bound to in-memory SQLite."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture()
def session_factory(db_engine):
    """Session factory sharing the in-memory database (same thread only)."""
    return sessionmaker(bind=db_engine)


@pytest.fixture()
def file_engine(tmp_path):
    """File-backed SQLite engine usable from the worker thread."""
    engine = build_engine(f"sqlite:///{(tmp_path / 'worker.db').as_posix()}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def file_session_factory(file_engine):
    return sessionmaker(bind=file_engine)


# ── Legacy export fixtures ───────────────────────────────────────────

@pytest.fixture()
def legacy_dir(tmp_path) -> Path:
    """Session directory holding the sample export (required files only)."""
    return write_sample_export(tmp_path / "session")


# ── Reference data factories ─────────────────────────────────────────

def make_group(db, legacy_code: str, name: str = "Grupo") -> ProductGroup:
    group = ProductGroup(legacy_code=legacy_code, name=name)
    db.add(group)
    db.commit()
    return group


def make_product(db, legacy_code: str, name: str = "Produto", **kwargs) -> Product:
    product = Product(legacy_code=legacy_code, name=name, **kwargs)
    db.add(product)
    db.commit()
    return product


def make_customer(db, legacy_code: str, name: str = "Cliente", **kwargs) -> Customer:
    customer = Customer(legacy_code=legacy_code, name=name, **kwargs)
    db.add(customer)
    db.commit()
    return customer


def make_seller(db, legacy_code: str, name: str = "Vendedor") -> Seller:
    seller = Seller(legacy_code=legacy_code, name=name)
    db.add(seller)
    db.commit()
    return seller


# ── Markers ──────────────────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks slow tests")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "unit: marks unit tests")
