"""Logging setup shared by the API process and CLI scripts."""
import logging
from typing import Optional

from app.core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once; later calls only adjust the level."""
    resolved = (level or settings.log_level or "INFO").upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S")
    root.setLevel(resolved)
    # python-multipart logs every part at DEBUG
    logging.getLogger("multipart").setLevel(logging.WARNING)
