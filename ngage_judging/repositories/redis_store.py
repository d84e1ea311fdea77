"""
Redis Document Store - Ngage Judging Engine
ngage_judging/repositories/redis_store.py

DocumentStore backed by Redis. Each document is a JSON string at
{prefix}:{collection}:{id}; a set at {prefix}:{collection}:__ids__ indexes
the collection for queries.
"""

import json
import logging
from contextlib import contextmanager
from typing import Generator, List, Optional, Sequence, Tuple

import redis

from ngage_judging.core.exceptions import (
    DatabaseConnectionException,
    DuplicateEntityException,
    EntityNotFoundException,
    RepositoryException,
)
from ngage_judging.repositories.base import (
    Document,
    DocumentStore,
    Filter,
    WriteOperation,
    apply_query,
)

logger = logging.getLogger(__name__)

MAX_WATCH_RETRIES = 5


class RedisDocumentStore(DocumentStore):
    """DocumentStore on Redis strings plus per-collection id sets."""

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        prefix: str = "ngage",
        in_query_limit: int = 10,
        client: Optional[redis.Redis] = None,
    ):
        super().__init__(in_query_limit)
        self.prefix = prefix
        self.client = client or redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=5,
        )

    def _key(self, collection: str, document_id: str) -> str:
        return f"{self.prefix}:{collection}:{document_id}"

    def _index_key(self, collection: str) -> str:
        return f"{self.prefix}:{collection}:__ids__"

    @contextmanager
    def _translate_errors(self) -> Generator[None, None, None]:
        """Map redis transport errors onto repository exceptions."""
        try:
            yield
        except (redis.ConnectionError, redis.TimeoutError) as e:
            raise DatabaseConnectionException(f"Failed to reach Redis: {e}")
        except redis.WatchError:
            raise
        except redis.RedisError as e:
            raise RepositoryException(f"Redis error: {e}")

    def get(self, collection: str, document_id: str) -> Optional[Document]:
        with self._translate_errors():
            raw = self.client.get(self._key(collection, document_id))
        return json.loads(raw) if raw is not None else None

    def set(self, collection: str, document_id: str, document: Document) -> None:
        with self._translate_errors():
            pipe = self.client.pipeline(transaction=True)
            pipe.set(self._key(collection, document_id), json.dumps(document))
            pipe.sadd(self._index_key(collection), document_id)
            pipe.execute()

    def create(self, collection: str, document_id: str, document: Document) -> None:
        with self._translate_errors():
            created = self.client.set(
                self._key(collection, document_id), json.dumps(document), nx=True
            )
            if not created:
                raise DuplicateEntityException(
                    f"{collection}/{document_id} already exists", entity_id=document_id
                )
            self.client.sadd(self._index_key(collection), document_id)

    def update(self, collection: str, document_id: str, partial: Document) -> Document:
        key = self._key(collection, document_id)
        for attempt in range(MAX_WATCH_RETRIES):
            try:
                with self._translate_errors(), self.client.pipeline() as pipe:
                    pipe.watch(key)
                    raw = pipe.get(key)
                    if raw is None:
                        pipe.unwatch()
                        raise EntityNotFoundException(collection, document_id)
                    merged = json.loads(raw)
                    merged.update(partial)
                    pipe.multi()
                    pipe.set(key, json.dumps(merged))
                    pipe.execute()
                    return merged
            except redis.WatchError:
                logger.debug(
                    "redis_update_retry",
                    extra={"key": key, "attempt": attempt + 1},
                )
        raise RepositoryException(f"Concurrent modification of {collection}/{document_id}")

    def delete(self, collection: str, document_id: str) -> None:
        with self._translate_errors():
            pipe = self.client.pipeline(transaction=True)
            pipe.delete(self._key(collection, document_id))
            pipe.srem(self._index_key(collection), document_id)
            pipe.execute()

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
    ) -> List[Tuple[str, Document]]:
        self.validate_filters(filters)
        with self._translate_errors():
            ids = sorted(self.client.smembers(self._index_key(collection)))
            if not ids:
                return []
            raws = self.client.mget([self._key(collection, doc_id) for doc_id in ids])

        # Index entries whose document vanished are skipped
        items = [
            (doc_id, json.loads(raw))
            for doc_id, raw in zip(ids, raws)
            if raw is not None
        ]
        return apply_query(items, filters, order_by, descending, limit, start_after)

    def batched_write(self, operations: Sequence[WriteOperation]) -> None:
        keys = [self._key(op.collection, op.document_id) for op in operations]
        for attempt in range(MAX_WATCH_RETRIES):
            try:
                with self._translate_errors(), self.client.pipeline() as pipe:
                    if keys:
                        pipe.watch(*keys)
                    current = {key: pipe.get(key) for key in keys}
                    staged = {}
                    for op, key in zip(operations, keys):
                        existing = staged[key] if key in staged else current[key]
                        staged[key] = self._stage(op, existing)
                    pipe.multi()
                    for op, key in zip(operations, keys):
                        if staged[key] is None:
                            pipe.delete(key)
                            pipe.srem(self._index_key(op.collection), op.document_id)
                        else:
                            pipe.set(key, staged[key])
                            pipe.sadd(self._index_key(op.collection), op.document_id)
                    pipe.execute()
                    return
            except redis.WatchError:
                logger.debug("redis_batch_retry", extra={"attempt": attempt + 1})
        raise RepositoryException("Concurrent modification during batched write")

    @staticmethod
    def _stage(operation: WriteOperation, existing: Optional[str]) -> Optional[str]:
        """Resulting raw value of one operation given the current raw value."""
        if operation.kind == "set":
            return json.dumps(operation.data)
        if operation.kind == "create":
            if existing is not None:
                raise DuplicateEntityException(
                    f"{operation.collection}/{operation.document_id} already exists",
                    entity_id=operation.document_id,
                )
            return json.dumps(operation.data)
        if operation.kind == "update":
            if existing is None:
                raise EntityNotFoundException(operation.collection, operation.document_id)
            merged = json.loads(existing)
            merged.update(operation.data)
            return json.dumps(merged)
        if operation.kind == "delete":
            return None
        raise ValueError(f"Unknown write operation '{operation.kind}'")
