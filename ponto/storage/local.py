"""File-backed local key-value cache."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from dotenv import load_dotenv

from ponto.storage.base import KeyValueStore, StoreUnavailable

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = os.getenv("PONTO_CACHE_DIR", "./.ponto_cache")


class FileKeyValueStore(KeyValueStore):
    """One file per key under a cache directory.

    Writes go to a temporary file that replaces the target atomically, so a
    crash never leaves a half-written entry behind.
    """

    def __init__(self, directory: Optional[str] = None):
        self.directory = Path(directory or DEFAULT_CACHE_DIR)

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read cache entry {key}: {type(e).__name__}: {str(e)}")
            raise StoreUnavailable(str(e)) from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.directory), suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Failed to write cache entry {key}: {type(e).__name__}: {str(e)}")
            raise StoreUnavailable(str(e)) from e
