"""Health check endpoints."""
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy import text

from app.db.session import check_db_connection, SessionLocal

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Health check with database connectivity, catalog counts, and last legacy import.
    Returns 503 if database is unreachable.
    """
    db_ok = check_db_connection()

    if not db_ok:
        raise HTTPException(
            status_code=503,
            detail={"status": "degraded", "db": "error"},
        )

    info: dict[str, Any] = {"status": "ok", "db": "ok"}

    try:
        db = SessionLocal()
        try:
            info["products"] = db.execute(text("SELECT COUNT(*) FROM product")).scalar() or 0
            info["sales"] = db.execute(text("SELECT COUNT(*) FROM sale")).scalar() or 0

            row = db.execute(
                text(
                    "SELECT session_id, status, created_at, finished_at "
                    "FROM legacy_imports ORDER BY created_at DESC LIMIT 1"
                )
            ).mappings().first()
            if row:
                info["last_import"] = {
                    "session_id": row["session_id"],
                    "status": row["status"],
                    "at": str(row["created_at"]),
                    "finished_at": str(row["finished_at"]) if row["finished_at"] else None,
                }
        finally:
            db.close()
    except Exception:
        # Don't fail health check if the schema hasn't been migrated yet
        pass

    return info
