"""Remote document store mirrored into a local cache.

Reads go to the remote store first and refresh the cache; when the remote is
unavailable the cached copy is served. Writes go to the cache first, then to
the remote; keys whose remote write failed are queued and served from the
cache until `flush_pending()` pushes them.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ponto.storage.base import DocumentNotFound, DocumentStore, KeyValueStore, StoreUnavailable

logger = logging.getLogger(__name__)

PENDING_SYNC_KEY = "__pending_sync__"


class MirroredStore:
    """Document access with offline fallback."""

    def __init__(self, remote: DocumentStore, local: KeyValueStore):
        self.remote = remote
        self.local = local

    def _pending(self) -> List[str]:
        try:
            raw = self.local.get(PENDING_SYNC_KEY)
        except StoreUnavailable:
            return []
        if not raw:
            return []
        try:
            keys = json.loads(raw)
        except ValueError:
            logger.warning("Pending sync list is corrupt; ignoring it")
            return []
        return [k for k in keys if isinstance(k, str)] if isinstance(keys, list) else []

    def _set_pending(self, keys: List[str]) -> None:
        self.local.set(PENDING_SYNC_KEY, json.dumps(sorted(set(keys))))

    def _read_cache(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.local.get(key)
        if raw is None:
            return None
        try:
            document = json.loads(raw)
        except ValueError:
            logger.warning(f"Cached document {key} is corrupt; treating it as missing")
            return None
        if not isinstance(document, dict):
            logger.warning(f"Cached document {key} is not an object; treating it as missing")
            return None
        return document

    def _write_cache(self, key: str, document: Dict[str, Any]) -> bool:
        try:
            self.local.set(key, json.dumps(document, ensure_ascii=False))
            return True
        except StoreUnavailable as e:
            logger.warning(f"Local cache unavailable for {key}: {str(e)}")
            return False

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Load a document, or None if it does not exist anywhere.

        Raises:
            StoreUnavailable: If neither store can serve the key
        """
        if key in self._pending():
            # Local copy is newer than the remote one
            cached = self._read_cache(key)
            if cached is not None:
                return cached

        try:
            document = self.remote.get(key)
        except DocumentNotFound:
            return None
        except StoreUnavailable as e:
            logger.warning(f"Remote store unavailable reading {key}, using local cache: {str(e)}")
            return self._read_cache(key)

        self._write_cache(key, document)
        return document

    def put(self, key: str, document: Dict[str, Any]) -> None:
        """Store a document in both stores.

        Raises:
            StoreUnavailable: If neither store accepted the write
        """
        cached = self._write_cache(key, document)
        try:
            self.remote.put(key, document)
        except StoreUnavailable as e:
            if not cached:
                logger.error(f"Failed to store {key}: remote and local stores unavailable")
                raise
            logger.warning(f"Remote store unavailable writing {key}, queued for sync: {str(e)}")
            self._set_pending(self._pending() + [key])
            return

        pending = self._pending()
        if key in pending:
            self._set_pending([k for k in pending if k != key])

    def flush_pending(self) -> List[str]:
        """Push queued local writes to the remote store.

        Returns:
            Keys that were synced
        """
        pending = self._pending()
        synced: List[str] = []
        for key in pending:
            document = self._read_cache(key)
            if document is None:
                logger.warning(f"Queued document {key} missing from cache; dropping it from the queue")
                synced.append(key)
                continue
            try:
                self.remote.put(key, document)
            except StoreUnavailable as e:
                logger.warning(f"Remote store still unavailable, stopping sync: {str(e)}")
                break
            synced.append(key)
        if synced:
            self._set_pending([k for k in pending if k not in synced])
            logger.debug(f"Synced {len(synced)} queued documents")
        return synced
