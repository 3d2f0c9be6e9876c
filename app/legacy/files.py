"""Flatten an import session directory into a {FILENAME: path} index.

Uploads may mix loose .DBF files with zip archives (archives can contain
further archives). Every archive is extracted next to itself into a directory
named after it and then removed, so a re-run over the same session sees the
already-extracted files.
"""
import logging
import zipfile
from pathlib import Path
from typing import Union

from app.legacy.exceptions import LegacyArchiveError, MissingLegacyFileError
from app.legacy.sources import REQUIRED_FILES

logger = logging.getLogger(__name__)

# Nested archive levels expanded below the session directory
MAX_ARCHIVE_DEPTH = 3


def _is_archive(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() == ".zip"


def _extraction_dir(archive: Path) -> Path:
    target = archive.parent / archive.stem
    if target.exists() and not target.is_dir():
        target = archive.parent / f"{archive.stem}_zip"
    return target


def extract_archive(archive: Path) -> Path:
    """Extract one archive beside itself, delete it, return the extraction dir."""
    target = _extraction_dir(archive)
    target.mkdir(parents=True, exist_ok=True)
    root = target.resolve()
    try:
        with zipfile.ZipFile(archive) as zf:
            for member in zf.infolist():
                destination = (target / member.filename).resolve()
                if destination != root and not destination.is_relative_to(root):
                    raise LegacyArchiveError(
                        f"Archive {archive.name} contains unsafe path {member.filename!r}"
                    )
            zf.extractall(target)
    except zipfile.BadZipFile as e:
        raise LegacyArchiveError(f"Archive {archive.name} is corrupt: {e}") from e
    archive.unlink()
    logger.info("Extracted %s into %s", archive.name, target)
    return target


def _expand_archives(directory: Path, depth: int) -> None:
    archives = sorted(p for p in directory.rglob("*") if _is_archive(p))
    for archive in archives:
        target = extract_archive(archive)
        if depth < MAX_ARCHIVE_DEPTH:
            _expand_archives(target, depth + 1)
        else:
            logger.warning("Not expanding archives nested deeper than %d levels in %s", depth, target)


def index_files(root: Path) -> dict[str, Path]:
    files: dict[str, Path] = {}
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        key = path.name.upper()
        if key in files:
            logger.warning("Duplicate legacy file %s: using %s over %s", key, path, files[key])
        files[key] = path
    return files


def prepare_legacy_files(session_dir: Union[str, Path]) -> dict[str, Path]:
    """Expand every archive under session_dir and index files by upper-cased name."""
    root = Path(session_dir)
    if not root.is_dir():
        raise LegacyArchiveError(f"Session directory {root} does not exist")
    _expand_archives(root, depth=1)
    return index_files(root)


def missing_required_files(files: dict[str, Path], required: list[str] = REQUIRED_FILES) -> list[str]:
    return [name for name in required if name not in files]


def check_required_files(files: dict[str, Path], required: list[str] = REQUIRED_FILES) -> None:
    missing = missing_required_files(files, required)
    if missing:
        raise MissingLegacyFileError(missing)
