#!/usr/bin/env python3
"""
Run one legacy import synchronously from a directory of .DBF files and/or zip archives.

The source directory is copied into a fresh session under IMPORT_PATH (the
session directory is modified by archive extraction), the job is recorded like
an uploaded one and executed in this process. Exit code 0 on success, 1 on failure.

Example: python scripts/run_legacy_import.py /mnt/legacy/export --overwrite
"""
import argparse
import json
import logging
import shutil
import sys
from pathlib import Path

# Project root
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.utils.env import load_env_if_present

load_env_if_present()

from app.core.config import settings
from app.core.logging import setup_logging
from app.legacy.worker import LegacyImportWorker, create_session

logger = logging.getLogger("run_legacy_import")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Import a legacy DBF export into the back office database.")
    p.add_argument("source", type=Path, help="Directory holding the legacy .DBF/.DBT files or .zip archives")
    p.add_argument("--overwrite", action="store_true", help="Replace previously imported sales and orders")
    p.add_argument("--requested-by", default="cli", help="Recorded as the job creator (default: cli)")
    p.add_argument("--import-path", default=None, help=f"Session root (default: {settings.import_path})")
    p.add_argument("--init-db", action="store_true", help="Create missing tables before importing")
    return p.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging()

    source: Path = args.source
    if not source.is_dir():
        logger.error("Source directory not found: %s", source)
        return 1

    if args.init_db:
        from app.db.session import init_db
        init_db()

    session_id, session_dir = create_session(args.import_path or settings.import_path)
    shutil.copytree(source, session_dir, dirs_exist_ok=True)
    logger.info("Copied %s into session %s", source, session_id)

    worker = LegacyImportWorker()
    job = worker.enqueue(session_id, session_dir, overwrite=args.overwrite, created_by=args.requested_by)
    final_status = worker.run_job(job)

    status = worker.get_status(session_id) or {}
    if final_status != "completed":
        logger.error("Import %s %s: %s", session_id, final_status, status.get("error"))
        return 1

    print(json.dumps(status.get("summary"), indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
