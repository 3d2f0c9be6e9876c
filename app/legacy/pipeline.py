"""One legacy import run, stage by stage.

normalize files -> check required files -> staging -> master data -> sales ->
histories -> reconciliation report. Any exception aborts the run; the worker
turns it into a failed job. Committed upserts are not rolled back: re-running
the same upload converges because every write is keyed.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.legacy import sources
from app.legacy.dbf_reader import DEFAULT_ENCODING
from app.legacy.files import check_required_files, prepare_legacy_files
from app.legacy.history import migrate_customer_payments, migrate_stock_movements
from app.legacy.master_data import migrate_master_data
from app.legacy.report import create_reconciliation_report
from app.legacy.sales import migrate_sales
from app.legacy.staging import DEFAULT_BATCH_SIZE, LogFn, load_staging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LegacyImportJob:
    id: str
    session_id: str
    session_dir: str
    overwrite: bool = False
    created_by: Optional[str] = None


@dataclass
class ImportResult:
    summary: dict[str, Any]
    report_path: Path


def _default_log(level: str, message: str) -> None:
    logger.log(logging.WARNING if level == "warn" else logging.INFO, message)


def run_import(
    db: Session,
    job: LegacyImportJob,
    log: Optional[LogFn] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    encoding: str = DEFAULT_ENCODING,
) -> ImportResult:
    log = log or _default_log

    log("info", "Preparing legacy files for import")
    files = prepare_legacy_files(job.session_dir)
    # Nothing destructive may happen before this check
    check_required_files(files)
    log("info", f"Found {len(files)} files: {', '.join(sorted(files))}")

    staging_summary = load_staging(db, files, batch_size=batch_size, encoding=encoding, log=log)

    log("info", "Migrating master data (products, customers, sellers, payment terms)")
    master_summary = migrate_master_data(db)

    if job.overwrite:
        log("info", "Migrating sales and sale items (replacing previously imported sales)")
    else:
        log("info", "Migrating sales and sale items")
    sale_summary = migrate_sales(db, overwrite=job.overwrite)
    if sale_summary.mismatches:
        log("warn", f"{len(sale_summary.mismatches)} sale items reference unknown products")

    payments = 0
    if sources.PAGAMENT.file in files:
        log("info", "Migrating customer payments")
        payments = migrate_customer_payments(db)
    else:
        log("info", "Skipping customer payments: no payment history supplied")

    stock_movements = 0
    if sources.MOV_EST.file in files:
        log("info", "Migrating stock movements")
        stock_movements = migrate_stock_movements(db)
    else:
        log("info", "Skipping stock movements: no stock history supplied")

    log("info", "Generating reconciliation report")
    report_path = create_reconciliation_report(db, job.session_dir, sale_summary, supplied=files)

    summary = {
        "staging": staging_summary,
        "master": master_summary,
        "sales": sale_summary.to_dict(),
        "customer_payments": payments,
        "stock_movements": stock_movements,
        "report_path": str(report_path),
    }
    return ImportResult(summary=summary, report_path=report_path)
