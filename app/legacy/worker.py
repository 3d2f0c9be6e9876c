"""Legacy import worker: persistent single-flight job queue.

One instance is created by the FastAPI lifespan (or a CLI script) and handed to
whoever submits or inspects imports. enqueue() only writes a `queued` row and
appends to an in-memory FIFO; a single daemon thread runs the jobs one at a
time, because every run truncates shared staging tables.

Job status only moves forward: queued -> running -> completed | failed. The one
exception is start(): jobs left `running` by a crash go back to `queued` and
are re-run from the beginning, which is safe because all writes are keyed.
"""
import logging
import queue
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.legacy.pipeline import LegacyImportJob, run_import
from app.models import LegacyImport, LegacyImportLog, LegacyImportStatus

logger = logging.getLogger(__name__)

LOG_LEVELS = ("info", "warn", "error")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def new_session_id() -> str:
    """Human-readable session id: session-<UTC timestamp>-<random suffix>."""
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
    return f"session-{stamp}-{uuid.uuid4().hex[:8]}"


def create_session(import_root: Union[str, Path, None] = None) -> tuple[str, Path]:
    """Create an empty session directory under import_root for an upload."""
    root = Path(import_root or settings.import_path).resolve()
    session_id = new_session_id()
    session_dir = root / session_id
    session_dir.mkdir(parents=True, exist_ok=False)
    return session_id, session_dir


def append_log(db: Session, import_id: str, level: str, message: str) -> None:
    """Persist one progress line (committed immediately) and mirror it to logging."""
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}")
    db.add(LegacyImportLog(import_id=import_id, level=level, message=message, created_at=_utcnow()))
    db.commit()
    py_level = {"info": logging.INFO, "warn": logging.WARNING, "error": logging.ERROR}[level]
    logger.log(py_level, "[Import %s] %s", import_id[:8], message)


class LegacyImportWorker:
    """Owns the job queue and the single thread that drains it."""

    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        batch_size: Optional[int] = None,
        encoding: Optional[str] = None,
    ):
        if session_factory is None:
            from app.db.session import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory
        self.batch_size = batch_size or settings.legacy_staging_batch_size
        self.encoding = encoding or settings.legacy_dbf_encoding
        self._queue: "queue.Queue[Optional[LegacyImportJob]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    # ── Lifecycle ────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def recover(self) -> list[LegacyImportJob]:
        """Reset crashed `running` jobs to `queued` and queue every queued job by age."""
        db = self._session_factory()
        try:
            result = db.execute(
                update(LegacyImport)
                .where(LegacyImport.status == LegacyImportStatus.RUNNING.value)
                .values(status=LegacyImportStatus.QUEUED.value, started_at=None)
            )
            db.commit()
            if result.rowcount:
                logger.warning("[Worker] Reset %d interrupted import(s) to queued", result.rowcount)

            rows = db.execute(
                select(LegacyImport)
                .where(LegacyImport.status == LegacyImportStatus.QUEUED.value)
                .order_by(LegacyImport.created_at)
            ).scalars().all()
            jobs = [self._job_from_row(row) for row in rows]
        finally:
            db.close()

        for job in jobs:
            self._queue.put(job)
        return jobs

    def start(self, recover: bool = True) -> None:
        with self._lock:
            if self.running:
                logger.warning("[Worker] Already running")
                return
            if recover:
                jobs = self.recover()
                if jobs:
                    logger.info("[Worker] Resuming %d queued import(s)", len(jobs))
            self._thread = threading.Thread(target=self._drain, name="legacy-import-worker", daemon=True)
            self._thread.start()
            logger.info("[Worker] Started")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Finish the jobs already queued, then stop the thread."""
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            self._queue.put(None)
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("[Worker] Still busy after %.1fs; leaving thread running", timeout or 0)
                return
            self._thread = None
            logger.info("[Worker] Stopped")

    # ── Submission ───────────────────────────────────────────────────

    def enqueue(
        self,
        session_id: str,
        session_dir: Union[str, Path],
        overwrite: bool = False,
        created_by: Optional[str] = None,
    ) -> LegacyImportJob:
        """Persist a queued job and hand it to the worker thread. Returns immediately."""
        db = self._session_factory()
        try:
            record = LegacyImport(
                session_id=session_id,
                session_dir=str(session_dir),
                overwrite=overwrite,
                status=LegacyImportStatus.QUEUED.value,
                created_by=created_by,
                created_at=_utcnow(),
            )
            db.add(record)
            db.commit()
            job = self._job_from_row(record)
        finally:
            db.close()

        self._queue.put(job)
        logger.info("[Worker] Queued import %s (session %s, overwrite=%s)", job.id, session_id, overwrite)
        return job

    # ── Execution ────────────────────────────────────────────────────

    def _drain(self) -> None:
        while True:
            job = self._queue.get()
            try:
                if job is None:
                    return
                self.run_job(job)
            except Exception:
                # run_job records failures itself; this only keeps the thread alive
                logger.exception("[Worker] Unhandled error while processing %s", job.id if job else None)
            finally:
                self._queue.task_done()

    def run_job(self, job: LegacyImportJob) -> str:
        """Run one job synchronously and return its final status."""
        db = self._session_factory()
        try:
            record = db.get(LegacyImport, job.id)
            if record is None:
                logger.warning("[Worker] Import %s no longer exists; skipping", job.id)
                return "missing"
            if record.status != LegacyImportStatus.QUEUED.value:
                logger.warning("[Worker] Import %s is %s, not queued; skipping", job.id, record.status)
                return record.status

            record.status = LegacyImportStatus.RUNNING.value
            record.started_at = _utcnow()
            db.commit()

            def log(level: str, message: str) -> None:
                append_log(db, job.id, level, message)

            try:
                result = run_import(db, job, log=log, batch_size=self.batch_size, encoding=self.encoding)
            except Exception as e:
                logger.exception("[Worker] Import %s failed", job.id)
                db.rollback()
                self._mark_failed(db, job, str(e) or type(e).__name__)
                return LegacyImportStatus.FAILED.value

            record = db.get(LegacyImport, job.id)
            record.status = LegacyImportStatus.COMPLETED.value
            record.finished_at = _utcnow()
            record.summary = result.summary
            record.report_path = str(result.report_path)
            record.error_message = None
            db.commit()
            append_log(db, job.id, "info", "Legacy data import completed successfully")
            return LegacyImportStatus.COMPLETED.value
        finally:
            db.close()

    def _mark_failed(self, db: Session, job: LegacyImportJob, message: str) -> None:
        try:
            append_log(db, job.id, "error", message)
            db.execute(
                update(LegacyImport)
                .where(LegacyImport.id == job.id)
                .values(
                    status=LegacyImportStatus.FAILED.value,
                    finished_at=_utcnow(),
                    error_message=message,
                )
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("[Worker] Could not record failure of import %s", job.id)

    # ── Queries ──────────────────────────────────────────────────────

    def get_status(self, session_id: str) -> Optional[dict[str, Any]]:
        """Polling document for one session, or None when unknown."""
        db = self._session_factory()
        try:
            record = db.execute(
                select(LegacyImport).where(LegacyImport.session_id == session_id)
            ).scalar_one_or_none()
            if record is None:
                return None
            logs = db.execute(
                select(LegacyImportLog)
                .where(LegacyImportLog.import_id == record.id)
                .order_by(LegacyImportLog.id)
            ).scalars().all()
            return {
                "import_id": record.id,
                "session_id": record.session_id,
                "status": record.status,
                "overwrite": record.overwrite,
                "created_by": record.created_by,
                "created_at": _iso(record.created_at),
                "started_at": _iso(record.started_at),
                "finished_at": _iso(record.finished_at),
                "summary": record.summary,
                "error": record.error_message,
                "report_available": bool(record.report_path),
                "logs": [
                    {"level": log.level, "message": log.message, "created_at": _iso(log.created_at)}
                    for log in logs
                ],
            }
        finally:
            db.close()

    def get_report(self, session_id: str) -> Optional[Path]:
        """Path of the reconciliation report, if the job produced one that still exists."""
        db = self._session_factory()
        try:
            report_path = db.execute(
                select(LegacyImport.report_path).where(LegacyImport.session_id == session_id)
            ).scalar_one_or_none()
        finally:
            db.close()
        if not report_path:
            return None
        path = Path(report_path)
        return path if path.is_file() else None

    @staticmethod
    def _job_from_row(row: LegacyImport) -> LegacyImportJob:
        return LegacyImportJob(
            id=row.id,
            session_id=row.session_id,
            session_dir=row.session_dir,
            overwrite=bool(row.overwrite),
            created_by=row.created_by,
        )
