"""Staging loader: copy legacy DBF rows into all-text stg_* tables.

Staging tables are built at runtime from the column manifest in
app.legacy.sources (they are not part of the Alembic schema) and are emptied at
the start of every run, so they only ever reflect the current upload.
"""
import logging
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import Column, MetaData, Table, Text, func, inspect, select, text
from sqlalchemy.orm import Session

from app.legacy.dbf_reader import DEFAULT_ENCODING, open_table
from app.legacy.sources import LEGACY_SOURCES, LegacySource
from app.legacy.values import to_staging_text

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500

# (level, message) -> None; the pipeline persists these as job log entries
LogFn = Callable[[str, str], None]

staging_metadata = MetaData()

STAGING_TABLES: dict[str, Table] = {
    source.table: Table(
        source.table,
        staging_metadata,
        *(Column(name, Text, nullable=True) for name in source.column_names),
    )
    for source in LEGACY_SOURCES
}


def staging_table(source: LegacySource) -> Table:
    return STAGING_TABLES[source.table]


def _noop_log(level: str, message: str) -> None:
    pass


def ensure_staging_tables(db: Session, sources: tuple[LegacySource, ...] = LEGACY_SOURCES) -> None:
    """Create missing staging tables/columns, then empty every staging table."""
    conn = db.connection()
    is_pg = conn.dialect.name == "postgresql"
    preparer = conn.dialect.identifier_preparer

    for source in sources:
        table = staging_table(source)
        table.create(bind=conn, checkfirst=True)

        existing = {c["name"] for c in inspect(conn).get_columns(source.table)}
        for name in source.column_names:
            if name not in existing:
                conn.execute(text(
                    f"ALTER TABLE {preparer.quote(source.table)} ADD COLUMN {preparer.quote(name)} TEXT"
                ))
                logger.info("Added missing staging column %s.%s", source.table, name)

        if is_pg:
            conn.execute(text(f"TRUNCATE TABLE {preparer.quote(source.table)}"))
        else:
            conn.execute(table.delete())
    db.commit()


def _field_lookup(field_names: list[str]) -> dict[str, str]:
    return {name.upper(): name for name in field_names}


def load_source(
    db: Session,
    source: LegacySource,
    files: dict[str, Path],
    batch_size: int = DEFAULT_BATCH_SIZE,
    encoding: str = DEFAULT_ENCODING,
    log: Optional[LogFn] = None,
) -> int:
    """
    Stream one legacy file into its staging table.

    Returns the number of rows staged; 0 with a warning when the file was not
    supplied. DecodeError from the reader propagates and aborts the job.
    """
    log = log or _noop_log
    file_path = files.get(source.file)
    if file_path is None:
        log("warn", f"Optional file {source.file} not provided; skipping.")
        return 0

    table = staging_table(source)
    dbf = open_table(file_path, encoding=encoding)

    lookup = _field_lookup(dbf.field_names)
    absent = [c.field for c in source.columns if c.field not in lookup]
    if absent:
        log("warn", f"{source.file} has no field(s) {', '.join(absent)}; staged as empty.")

    total = 0
    for batch in dbf.iter_batches(batch_size):
        rows = [
            {
                column.name: to_staging_text(record.get(lookup[column.field]))
                if column.field in lookup else None
                for column in source.columns
            }
            for record in batch
        ]
        db.execute(table.insert(), rows)
        db.commit()
        total += len(rows)
        logger.debug("[Staging %s] +%d rows (total %d)", source.table, len(rows), total)

    logger.info("[Staging %s] %d rows from %s", source.table, total, file_path.name)
    return total


def load_staging(
    db: Session,
    files: dict[str, Path],
    batch_size: int = DEFAULT_BATCH_SIZE,
    encoding: str = DEFAULT_ENCODING,
    log: Optional[LogFn] = None,
    sources: tuple[LegacySource, ...] = LEGACY_SOURCES,
) -> dict[str, int]:
    """Reset staging and load every configured source. Returns {table: rows}."""
    log = log or _noop_log
    ensure_staging_tables(db, sources)
    summary: dict[str, int] = {}
    for source in sources:
        log("info", f"Loading {source.file} into staging table {source.table}")
        summary[source.table] = load_source(
            db, source, files, batch_size=batch_size, encoding=encoding, log=log,
        )
    return summary


def count_staging(db: Session, source: LegacySource) -> int:
    return db.execute(select(func.count()).select_from(staging_table(source))).scalar_one()


def staging_rows(db: Session, source: LegacySource) -> list[dict[str, Optional[str]]]:
    """All staging rows of a source as plain dicts, in insertion order where the backend keeps it."""
    result = db.execute(select(staging_table(source)))
    return [dict(row) for row in result.mappings()]
