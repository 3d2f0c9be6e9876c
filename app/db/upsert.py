"""INSERT ... ON CONFLICT DO UPDATE for the two backends we run on."""
from typing import Any, Iterable, Optional

from sqlalchemy import Table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"Upsert not supported on dialect {dialect!r}")


def upsert_statement(
    db: Session,
    model: Any,
    key_columns: list[str],
    update_columns: Optional[Iterable[str]] = None,
):
    """
    Build an upsert on model's table keyed by key_columns.

    update_columns defaults to every column except the primary key and the
    conflict keys, i.e. a re-import overwrites all non-key data.
    """
    table: Table = model.__table__
    stmt = _insert_for(db)(table)
    if update_columns is None:
        update_columns = [
            c.name for c in table.columns
            if not c.primary_key and c.name not in key_columns
        ]
    set_ = {name: stmt.excluded[name] for name in update_columns}
    return stmt.on_conflict_do_update(index_elements=key_columns, set_=set_)


def upsert_rows(
    db: Session,
    model: Any,
    rows: list[dict[str, Any]],
    key_columns: list[str],
    update_columns: Optional[Iterable[str]] = None,
) -> int:
    """Upsert many rows in one executemany. Returns len(rows)."""
    if not rows:
        return 0
    if update_columns is None:
        # Only overwrite what the caller supplied; untouched columns keep app-managed values
        update_columns = [k for k in rows[0] if k not in key_columns]
    stmt = upsert_statement(db, model, key_columns, update_columns)
    db.execute(stmt, rows)
    return len(rows)
