import pytest


def _compare(stored, op, value):
    if op == '==':
        return stored == value
    if op == '!=':
        return stored is not None and stored != value
    if op == 'in':
        return stored in value
    if op == 'not-in':
        return stored is not None and stored not in value
    if op == 'array_contains':
        return isinstance(stored, list) and value in stored
    if stored is None:
        return False
    try:
        if op == '<':
            return stored < value
        if op == '<=':
            return stored <= value
        if op == '>':
            return stored > value
        if op == '>=':
            return stored >= value
    except TypeError:
        return False
    raise ValueError(f"Unsupported operator {op}")


class FakeDB:
    """In-memory stand-in for DatabaseService with the same tuple contract"""

    def __init__(self):
        self.collections = {}
        self.doc_counter = 0
        self.failing = set()
        self.query_calls = []

    def _get_next_id(self):
        self.doc_counter += 1
        return f"doc_{self.doc_counter}"

    def seed(self, collection, doc_id, data):
        self.collections.setdefault(collection, {})[doc_id] = dict(data)
        return doc_id

    def docs(self, collection):
        return [{**data, 'id': doc_id} for doc_id, data in self.collections.get(collection, {}).items()]

    async def query_documents(self, collection, filters=None, limit=None, order_by=None):
        self.query_calls.append({'collection': collection, 'filters': list(filters or []), 'limit': limit})
        if collection in self.failing:
            return False, [], f"{collection} unavailable"

        docs = self.docs(collection)
        for field, op, value in filters or []:
            docs = [d for d in docs if _compare(d.get(field), op, value)]
        if limit:
            docs = docs[:limit]
        return True, docs, None

    async def get_all_documents(self, collection):
        return await self.query_documents(collection)

    async def count_documents(self, collection, filters=None):
        success, docs, error = await self.query_documents(collection, filters)
        return success, len(docs), error

    async def get_document(self, collection, doc_id):
        if collection in self.failing:
            return False, None, f"{collection} unavailable"
        doc = self.collections.get(collection, {}).get(doc_id)
        if doc is None:
            return False, None, "Document not found"
        return True, {**doc, 'id': doc_id}, None

    async def create_document(self, collection, data, document_id=None):
        if collection in self.failing:
            return False, None, f"{collection} unavailable"
        doc_id = document_id or self._get_next_id()
        self.seed(collection, doc_id, data)
        return True, doc_id, None

    async def set_document(self, collection, doc_id, data, merge=False):
        if collection in self.failing:
            return False, f"{collection} unavailable"
        existing = self.collections.get(collection, {}).get(doc_id, {}) if merge else {}
        self.seed(collection, doc_id, {**existing, **data})
        return True, None

    async def update_document(self, collection, doc_id, data):
        if collection in self.failing:
            return False, f"{collection} unavailable"
        if doc_id not in self.collections.get(collection, {}):
            return False, "Document not found"
        self.collections[collection][doc_id].update(data)
        return True, None

    async def delete_document(self, collection, doc_id):
        self.collections.get(collection, {}).pop(doc_id, None)
        return True, None

    async def batch_write(self, writes):
        if any(collection in self.failing for _, collection, _, _ in writes):
            return False, "batch rejected"
        for op, collection, doc_id, data in writes:
            if op == 'set':
                self.seed(collection, doc_id or self._get_next_id(), data)
            elif op == 'update':
                self.collections.setdefault(collection, {}).setdefault(doc_id, {}).update(data)
            elif op == 'delete':
                self.collections.get(collection, {}).pop(doc_id, None)
        return True, None

    async def batch_delete(self, collection, doc_ids):
        return await self.batch_write([('delete', collection, doc_id, None) for doc_id in doc_ids])


@pytest.fixture
def fake_db():
    return FakeDB()
