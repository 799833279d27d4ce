"""SQL-backed document store for ponto."""

import logging
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ponto.database.models import DocumentDB
from ponto.storage.base import DocumentNotFound, DocumentStore, StoreUnavailable

logger = logging.getLogger(__name__)


class SqlDocumentStore(DocumentStore):
    """Document store over the `documents` table."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, collection_id: str) -> Dict[str, Any]:
        """Get a document by key.

        Raises:
            DocumentNotFound: If no document is stored under the key
            StoreUnavailable: If the database cannot be reached
        """
        try:
            row = self.db.query(DocumentDB).filter(DocumentDB.collection_id == collection_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to read document {collection_id}: {type(e).__name__}: {str(e)}")
            raise StoreUnavailable(str(e)) from e
        if row is None:
            raise DocumentNotFound(collection_id)
        return dict(row.data or {})

    def put(self, collection_id: str, document: Dict[str, Any]) -> None:
        """Create or replace a document."""
        try:
            row = self.db.query(DocumentDB).filter(DocumentDB.collection_id == collection_id).first()
            if row is None:
                self.db.add(DocumentDB(collection_id=collection_id, data=document))
            else:
                row.data = document
            self.db.commit()
            logger.debug(f"Stored document {collection_id}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store document {collection_id}: {type(e).__name__}: {str(e)}")
            raise StoreUnavailable(str(e)) from e
