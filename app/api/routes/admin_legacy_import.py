"""Legacy data import: upload DBF/zip files, poll job status, download the report."""
import logging
import re
import shutil
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse

from app.core.auth import require_admin_key
from app.core.config import settings
from app.legacy.sources import ALLOWED_UPLOAD_EXTENSIONS, REQUIRED_FILES
from app.legacy.worker import LegacyImportWorker, create_session

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/import/legacy",
    tags=["legacy-import"],
    dependencies=[Depends(require_admin_key)],
)

CONFIRMATION_PHRASE = "IMPORT LEGACY DATA NOW"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """Basename only, anything outside [a-zA-Z0-9._-] replaced by '_'."""
    base = Path(filename.replace("\\", "/")).name
    safe = _UNSAFE_CHARS.sub("_", base)
    if not safe or safe in (".", ".."):
        raise HTTPException(status_code=400, detail=f"Invalid filename: {filename!r}")
    return safe


def get_worker(request: Request) -> LegacyImportWorker:
    worker = getattr(request.app.state, "legacy_import_worker", None)
    if worker is None:
        raise HTTPException(status_code=503, detail="Legacy import worker not available")
    return worker


async def _store_upload(upload: UploadFile, session_dir: Path) -> str:
    filename = upload.filename or ""
    if Path(filename).suffix.lower() not in ALLOWED_UPLOAD_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {filename}")
    safe_name = sanitize_filename(filename)

    content = await upload.read()
    if len(content) > settings.legacy_import_max_file_size:
        raise HTTPException(
            status_code=400,
            detail=f"File too large: {filename} (max {settings.legacy_import_max_file_size} bytes)",
        )
    (session_dir / safe_name).write_bytes(content)
    return safe_name


@router.post("", status_code=202)
async def submit_legacy_import(
    files: list[UploadFile] = File(...),
    confirmation: str = Form(...),
    overwrite: bool = Form(False),
    requested_by: Optional[str] = Form(None),
    worker: LegacyImportWorker = Depends(get_worker),
) -> dict[str, Any]:
    """
    Queue a legacy import from uploaded .DBF/.DBT files and/or zip archives.
    Returns immediately; poll /{session_id}/status for progress.
    """
    if confirmation != CONFIRMATION_PHRASE:
        raise HTTPException(status_code=400, detail="Confirmation phrase mismatch")
    if not files:
        raise HTTPException(status_code=400, detail="At least one file is required")
    if len(files) > settings.legacy_import_max_files:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files (max {settings.legacy_import_max_files})",
        )

    session_id, session_dir = create_session(settings.import_path)
    stored: list[str] = []
    try:
        for upload in files:
            stored.append(await _store_upload(upload, session_dir))

        # Archives are only inspected by the worker
        if not any(name.lower().endswith(".zip") for name in stored):
            inventory = {name.upper() for name in stored}
            missing = [name for name in REQUIRED_FILES if name not in inventory]
            if missing:
                raise HTTPException(
                    status_code=400,
                    detail=f"Missing required legacy files: {', '.join(missing)}",
                )
    except HTTPException:
        shutil.rmtree(session_dir, ignore_errors=True)
        raise

    job = worker.enqueue(session_id, session_dir, overwrite=overwrite, created_by=requested_by)
    logger.info(
        "Legacy import %s requested by %s (%d files, overwrite=%s)",
        session_id, requested_by or "admin", len(stored), overwrite,
    )
    return {
        "status": "queued",
        "session_id": session_id,
        "import_id": job.id,
        "overwrite": overwrite,
        "files": stored,
        "message": "Legacy import request accepted. Processing will run asynchronously.",
    }


@router.get("/{session_id}/status")
async def legacy_import_status(
    session_id: str,
    worker: LegacyImportWorker = Depends(get_worker),
) -> dict[str, Any]:
    status = worker.get_status(session_id)
    if status is None:
        raise HTTPException(status_code=404, detail="Import session not found")
    return status


@router.get("/{session_id}/report")
async def legacy_import_report(
    session_id: str,
    worker: LegacyImportWorker = Depends(get_worker),
) -> FileResponse:
    report = worker.get_report(session_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Reconciliation report not available")
    return FileResponse(str(report), media_type="text/csv", filename=report.name)
