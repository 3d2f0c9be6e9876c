"""Environment variable loading for CLI scripts."""
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def load_env_if_present(env_file: Optional[str] = None) -> bool:
    """
    Load a .env file into os.environ if it exists.

    Args:
        env_file: Path to .env file (default: .env in project root)

    Returns:
        True if variables were loaded, False if the file is absent or empty.

    Existing environment variables win over the file. Never logs values.
    """
    if env_file is None:
        # app/utils/env.py -> project root
        project_root = Path(__file__).resolve().parent.parent.parent
        env_file = str(project_root / ".env")

    if not Path(env_file).exists():
        return False

    loaded = load_dotenv(env_file, override=False)
    if loaded:
        logger.debug("Loaded environment variables from %s", env_file)
    return loaded
