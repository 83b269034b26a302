# WORKFLOW: Local cache of raw API responses under the .dank data directory.
# Used by: Socrata client (fresh-cache short circuit), pipeline --no-fetch mode
# Functions:
# 1. set_root() / get_dank_dir() / ensure_dank_dir() - data directory management
# 2. check_cache_file() - Read a cache file if present and young enough
# 3. write_cache_file() - Store a fetched payload
#
# Cache flow: fetch -> write_cache_file(); next run -> check_cache_file(max_age) -> hit or refetch

"""
Local cache of raw API responses under the .dank data directory.
"""

import logging
import time
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union

from core.config import DANK_DIRNAME

logger = logging.getLogger(__name__)

_dank_root = Path(".")


class CacheError(RuntimeError):
    """Raised when a cache file is missing, stale or unreadable."""


def set_root(root: Union[str, Path]) -> None:
    """Set the directory that holds the .dank data directory."""
    global _dank_root
    _dank_root = Path(root)


def get_dank_dir() -> Path:
    return _dank_root / DANK_DIRNAME


def ensure_dank_dir() -> Path:
    """Create the .dank data directory if needed and return it."""
    dank_dir = get_dank_dir()
    dank_dir.mkdir(parents=True, exist_ok=True)
    return dank_dir


def cache_path(filename: str) -> Path:
    return get_dank_dir() / filename


def check_cache_file(filename: str, max_age: Optional[timedelta] = None) -> bytes:
    """
    Read a cache file.

    Args:
        filename: Cache file name inside the data directory
        max_age: Maximum file age; None or zero accepts any age

    Returns:
        Raw file contents

    Raises:
        CacheError: If the file is missing, stale or unreadable
    """
    path = cache_path(filename)
    try:
        modified = path.stat().st_mtime
    except FileNotFoundError:
        raise CacheError(f"Cache file not found: {path}") from None

    if max_age and time.time() - modified > max_age.total_seconds():
        raise CacheError(f"Cache file is stale: {path}")

    try:
        return path.read_bytes()
    except OSError as e:
        raise CacheError(f"Failed to read cache file {path}: {e}") from e


def write_cache_file(filename: str, data: bytes) -> Path:
    """
    Write a cache file, creating the data directory if needed.

    Args:
        filename: Cache file name inside the data directory
        data: Payload to store

    Returns:
        Path of the written file
    """
    ensure_dank_dir()
    path = cache_path(filename)
    path.write_bytes(data)
    logger.debug(f"Cached {len(data)} bytes to {path}")
    return path
