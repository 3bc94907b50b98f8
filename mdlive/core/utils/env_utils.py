"""Environment loading helpers."""

from pathlib import Path

from dotenv import load_dotenv
from loguru import logger


def load_env(path: str | Path | None = None, override: bool = False) -> bool:
    """Load variables from a ``.env`` file, searching upwards from the cwd when no path is given."""
    if path is None:
        for parent in [Path.cwd(), *Path.cwd().parents]:
            candidate = parent / ".env"
            if candidate.is_file():
                path = candidate
                break
        else:
            return False

    loaded = load_dotenv(path, override=override)
    if loaded:
        logger.debug(f"Loaded environment from {path}")
    return loaded
