"""Storage collaborator interfaces for ponto.

The remote document store and the local key-value cache are external
collaborators. Concrete implementations live in ponto.database.document_store
and ponto.storage.local.
"""

from typing import Any, Dict, Optional


class StoreUnavailable(Exception):
    """The store could not be reached or failed to complete the operation."""


class DocumentNotFound(LookupError):
    """No document is stored under the requested key."""


class DocumentStore:
    """Key -> document storage (eventually consistent)."""

    def get(self, collection_id: str) -> Dict[str, Any]:
        raise NotImplementedError

    def put(self, collection_id: str, document: Dict[str, Any]) -> None:
        raise NotImplementedError


class KeyValueStore:
    """Key -> string storage used as offline cache."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError
