"""
Thin async wrapper around the Firestore client.

Every operation reports its outcome as a tuple instead of raising:
reads return ``(success, data, error)`` and writes without a payload
return ``(success, error)``. Blocking client calls are pushed onto a
worker thread so that callers can fan out several queries at once.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from firebase_admin import firestore
from google.cloud.firestore_v1 import FieldFilter, Query

from ..core.firebase_init import initialize_firebase

logger = logging.getLogger(__name__)

# Firestore caps a write batch at 500 operations
MAX_BATCH_SIZE = 500

Filter = Tuple[str, str, Any]
OrderBy = Union[str, Sequence[Tuple[str, str]]]


class DatabaseService:
    def __init__(self):
        self._client = None

    def get_client(self):
        """Return the Firestore client, initializing Firebase on first use"""
        if self._client is None:
            initialize_firebase()
            self._client = firestore.client()
        return self._client

    def _build_query(
        self,
        collection: str,
        filters: Optional[List[Filter]] = None,
        limit: Optional[int] = None,
        order_by: Optional[OrderBy] = None,
    ):
        query = self.get_client().collection(collection)

        for field, op, value in filters or []:
            query = query.where(filter=FieldFilter(field, op, value))

        if isinstance(order_by, str):
            query = query.order_by(order_by)
        elif order_by:
            for field, direction in order_by:
                query = query.order_by(
                    field,
                    direction=Query.DESCENDING if direction == 'desc' else Query.ASCENDING,
                )

        if limit:
            query = query.limit(limit)
        return query

    @staticmethod
    def _snapshot_to_dict(doc) -> Dict[str, Any]:
        data = doc.to_dict() or {}
        data['id'] = doc.id
        return data

    def _run_query(self, collection, filters, limit, order_by) -> List[Dict[str, Any]]:
        query = self._build_query(collection, filters, limit, order_by)
        return [self._snapshot_to_dict(doc) for doc in query.stream()]

    async def query_documents(
        self,
        collection: str,
        filters: Optional[List[Filter]] = None,
        limit: Optional[int] = None,
        order_by: Optional[OrderBy] = None,
    ) -> Tuple[bool, List[Dict[str, Any]], Optional[str]]:
        """Query a collection with (field, op, value) filters"""
        try:
            docs = await asyncio.to_thread(self._run_query, collection, filters, limit, order_by)
            return True, docs, None
        except Exception as e:
            logger.error(f"Error querying {collection}: {str(e)}")
            return False, [], str(e)

    async def get_all_documents(self, collection: str) -> Tuple[bool, List[Dict[str, Any]], Optional[str]]:
        return await self.query_documents(collection)

    async def count_documents(
        self, collection: str, filters: Optional[List[Filter]] = None
    ) -> Tuple[bool, int, Optional[str]]:
        """Count documents server-side without fetching them"""
        def _count():
            result = self._build_query(collection, filters).count().get()
            return int(result[0][0].value)

        try:
            return True, await asyncio.to_thread(_count), None
        except Exception as e:
            logger.error(f"Error counting {collection}: {str(e)}")
            return False, 0, str(e)

    async def get_document(self, collection: str, doc_id: str) -> Tuple[bool, Optional[Dict[str, Any]], Optional[str]]:
        def _get():
            return self.get_client().collection(collection).document(doc_id).get()

        try:
            doc = await asyncio.to_thread(_get)
            if not doc.exists:
                return False, None, "Document not found"
            return True, self._snapshot_to_dict(doc), None
        except Exception as e:
            logger.error(f"Error getting {collection}/{doc_id}: {str(e)}")
            return False, None, str(e)

    async def create_document(
        self, collection: str, data: Dict[str, Any], document_id: Optional[str] = None
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        def _create():
            ref = self.get_client().collection(collection).document(document_id)
            ref.set(data)
            return ref.id

        try:
            doc_id = await asyncio.to_thread(_create)
            return True, doc_id, None
        except Exception as e:
            logger.error(f"Error creating document in {collection}: {str(e)}")
            return False, None, str(e)

    async def set_document(
        self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False
    ) -> Tuple[bool, Optional[str]]:
        def _set():
            self.get_client().collection(collection).document(doc_id).set(data, merge=merge)

        try:
            await asyncio.to_thread(_set)
            return True, None
        except Exception as e:
            logger.error(f"Error setting {collection}/{doc_id}: {str(e)}")
            return False, str(e)

    async def update_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
        def _update():
            self.get_client().collection(collection).document(doc_id).update(data)

        try:
            await asyncio.to_thread(_update)
            return True, None
        except Exception as e:
            logger.error(f"Error updating {collection}/{doc_id}: {str(e)}")
            return False, str(e)

    async def delete_document(self, collection: str, doc_id: str) -> Tuple[bool, Optional[str]]:
        def _delete():
            self.get_client().collection(collection).document(doc_id).delete()

        try:
            await asyncio.to_thread(_delete)
            return True, None
        except Exception as e:
            logger.error(f"Error deleting {collection}/{doc_id}: {str(e)}")
            return False, str(e)

    async def batch_write(self, writes: List[Tuple[str, str, Optional[str], Optional[Dict[str, Any]]]]) -> Tuple[bool, Optional[str]]:
        """
        Commit (op, collection, doc_id, data) writes in batches.

        ``op`` is one of ``set``, ``update`` or ``delete``; a ``set`` with no
        doc_id gets an auto-generated document id.
        """
        def _commit():
            client = self.get_client()
            for start in range(0, len(writes), MAX_BATCH_SIZE):
                batch = client.batch()
                for op, collection, doc_id, data in writes[start:start + MAX_BATCH_SIZE]:
                    ref = client.collection(collection).document(doc_id)
                    if op == 'set':
                        batch.set(ref, data)
                    elif op == 'update':
                        batch.update(ref, data)
                    elif op == 'delete':
                        batch.delete(ref)
                    else:
                        raise ValueError(f"Unsupported batch operation: {op}")
                batch.commit()

        try:
            if writes:
                await asyncio.to_thread(_commit)
            return True, None
        except Exception as e:
            logger.error(f"Error committing batch of {len(writes)} writes: {str(e)}")
            return False, str(e)

    async def batch_delete(self, collection: str, doc_ids: List[str]) -> Tuple[bool, Optional[str]]:
        return await self.batch_write([('delete', collection, doc_id, None) for doc_id in doc_ids])


database_service = DatabaseService()
