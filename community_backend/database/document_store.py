"""
Collection-oriented access layer over the Supabase client.

Each collection is a Supabase table keyed by a text ``id`` column. Ids are
generated here (uuid4) so callers know a record's id before it is written.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from postgrest.exceptions import APIError
from supabase import Client

from community_backend.core.exceptions import (
    DocumentStoreError,
    DuplicateRecordError,
    RecordNotFoundError,
)
from community_backend.database.supabase_client import get_service_supabase

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def new_document_id() -> str:
    return uuid.uuid4().hex


def _translate(exc: Exception, action: str, collection: str) -> DocumentStoreError:
    if isinstance(exc, DocumentStoreError):
        return exc
    if isinstance(exc, APIError) and exc.code == UNIQUE_VIOLATION:
        return DuplicateRecordError(f"Duplicate record in {collection}: {exc.message}")
    return DocumentStoreError(f"Failed to {action} {collection}: {exc}")


class WriteBatch:
    """Queued creates and deletes, written on commit.

    All creates for a collection go out as one bulk insert and all deletes for
    a collection as one bulk delete, so a batch touching a single collection
    with a single kind of operation is one atomic statement.
    """

    def __init__(self, client: Client):
        self._client = client
        self._creates: Dict[str, List[Dict[str, Any]]] = {}
        self._deletes: Dict[str, List[str]] = {}
        self._committed = False

    def create(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = new_document_id()
        self._creates.setdefault(collection, []).append({**data, "id": doc_id})
        return doc_id

    def delete(self, collection: str, doc_id: str) -> None:
        self._deletes.setdefault(collection, []).append(doc_id)

    def __len__(self) -> int:
        return sum(len(v) for v in self._creates.values()) + sum(len(v) for v in self._deletes.values())

    def commit(self) -> None:
        if self._committed:
            raise DocumentStoreError("Batch has already been committed")
        self._committed = True
        for collection, rows in self._creates.items():
            try:
                self._client.table(collection).insert(rows).execute()
            except Exception as e:
                raise _translate(e, "batch insert into", collection)
        for collection, ids in self._deletes.items():
            try:
                self._client.table(collection).delete().in_("id", ids).execute()
            except Exception as e:
                raise _translate(e, "batch delete from", collection)


class DocumentStore:
    def __init__(self, client: Client):
        self.client = client

    def query(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        in_filters: Optional[Dict[str, List[Any]]] = None,
        order_by: Optional[List[Tuple[str, bool]]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return records matching equality and membership filters.

        ``order_by`` is a list of ``(column, descending)`` pairs applied in order.
        """
        if in_filters and any(len(values) == 0 for values in in_filters.values()):
            return []
        try:
            query = self.client.table(collection).select("*")
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            for column, values in (in_filters or {}).items():
                query = query.in_(column, values)
            for column, desc in (order_by or []):
                query = query.order(column, desc=desc)
            if limit is not None:
                query = query.limit(limit)
            if offset:
                query = query.offset(offset)
            result = query.execute()
            return result.data or []
        except Exception as e:
            raise _translate(e, "query", collection)

    def find_one(self, collection: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        records = self.query(collection, filters=filters, limit=1)
        return records[0] if records else None

    def get(self, collection: str, doc_id: str) -> Dict[str, Any]:
        record = self.find_one(collection, {"id": doc_id})
        if record is None:
            raise RecordNotFoundError(collection, doc_id)
        return record

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert one record and return its generated id"""
        doc_id = new_document_id()
        try:
            result = self.client.table(collection).insert({**data, "id": doc_id}).execute()
        except Exception as e:
            raise _translate(e, "insert into", collection)
        if not result.data:
            raise DocumentStoreError(f"Insert into {collection} returned no data")
        return result.data[0].get("id", doc_id)

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = self.client.table(collection)\
                .update(data)\
                .eq("id", doc_id)\
                .execute()
        except Exception as e:
            raise _translate(e, "update", collection)
        if not result.data:
            raise RecordNotFoundError(collection, doc_id)
        return result.data[0]

    def batch(self) -> WriteBatch:
        return WriteBatch(self.client)


def get_document_store(supabase: Client = Depends(get_service_supabase)) -> DocumentStore:
    return DocumentStore(supabase)
