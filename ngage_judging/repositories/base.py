"""
Base Repository - Ngage Judging Engine
ngage_judging/repositories/base.py

Document store contract, an in-memory store, and the base repository class
with the query helpers the concrete repositories share.
"""

import copy
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterable, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar

from ngage_judging.core.exceptions import DuplicateEntityException, EntityNotFoundException
from ngage_judging.models.common import DocumentModel

Document = Dict[str, Any]
Filter = Tuple[str, str, Any]  # (field, op, value); op is "==" or "in"

SUPPORTED_OPS = ("==", "in")


@dataclass
class WriteOperation:
    """One write inside DocumentStore.batched_write."""

    kind: str  # "set", "create", "update" or "delete"
    collection: str
    document_id: str
    data: Optional[Document] = None


class DocumentStore(ABC):
    """
    Minimal document database contract.

    Documents are JSON-compatible dicts addressed by (collection, id).
    """

    def __init__(self, in_query_limit: int = 10):
        self.in_query_limit = in_query_limit

    @abstractmethod
    def get(self, collection: str, document_id: str) -> Optional[Document]:
        """Return the document or None."""

    @abstractmethod
    def set(self, collection: str, document_id: str, document: Document) -> None:
        """Write the document, replacing any existing one."""

    @abstractmethod
    def create(self, collection: str, document_id: str, document: Document) -> None:
        """Write a new document; DuplicateEntityException if the id exists."""

    @abstractmethod
    def update(self, collection: str, document_id: str, partial: Document) -> Document:
        """Shallow-merge fields into an existing document; EntityNotFoundException if missing."""

    @abstractmethod
    def delete(self, collection: str, document_id: str) -> None:
        """Remove the document if present."""

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
    ) -> List[Tuple[str, Document]]:
        """Return (id, document) pairs matching every filter."""

    @abstractmethod
    def batched_write(self, operations: Sequence[WriteOperation]) -> None:
        """Apply every operation or none of them."""

    def validate_filters(self, filters: Sequence[Filter]) -> None:
        for field, op, value in filters:
            if op not in SUPPORTED_OPS:
                raise ValueError(f"Unsupported filter operator '{op}' on '{field}'")
            if op == "in" and len(value) > self.in_query_limit:
                raise ValueError(
                    f"'in' filter on '{field}' accepts at most {self.in_query_limit} "
                    f"values, got {len(value)}"
                )


def _matches(document: Document, filters: Sequence[Filter]) -> bool:
    for field, op, value in filters:
        actual = document.get(field)
        if op == "==" and actual != value:
            return False
        if op == "in" and actual not in value:
            return False
    return True


def apply_query(
    items: Iterable[Tuple[str, Document]],
    filters: Sequence[Filter] = (),
    order_by: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
    start_after: Optional[str] = None,
) -> List[Tuple[str, Document]]:
    """
    Filter, order and page (id, document) pairs in process.

    Documents lacking the order_by field sort last. start_after is the id of
    the last document of the previous page.
    """
    matched = sorted(
        ((doc_id, doc) for doc_id, doc in items if _matches(doc, filters)),
        key=lambda item: item[0],
    )

    if order_by:
        present = [item for item in matched if item[1].get(order_by) is not None]
        missing = [item for item in matched if item[1].get(order_by) is None]
        present.sort(key=lambda item: item[1][order_by], reverse=descending)
        matched = present + missing

    if start_after is not None:
        ids = [doc_id for doc_id, _ in matched]
        if start_after in ids:
            matched = matched[ids.index(start_after) + 1:]

    if limit is not None:
        matched = matched[:limit]

    return matched


class InMemoryDocumentStore(DocumentStore):
    """Process-local DocumentStore. Documents are deep-copied in and out."""

    def __init__(self, in_query_limit: int = 10):
        super().__init__(in_query_limit)
        self._collections: Dict[str, Dict[str, Document]] = {}
        self._lock = threading.RLock()

    def get(self, collection: str, document_id: str) -> Optional[Document]:
        with self._lock:
            document = self._collections.get(collection, {}).get(document_id)
            return copy.deepcopy(document) if document is not None else None

    def set(self, collection: str, document_id: str, document: Document) -> None:
        with self._lock:
            self._apply(self._collections, WriteOperation("set", collection, document_id, document))

    def create(self, collection: str, document_id: str, document: Document) -> None:
        with self._lock:
            self._apply(self._collections, WriteOperation("create", collection, document_id, document))

    def update(self, collection: str, document_id: str, partial: Document) -> Document:
        with self._lock:
            self._apply(self._collections, WriteOperation("update", collection, document_id, partial))
            return copy.deepcopy(self._collections[collection][document_id])

    def delete(self, collection: str, document_id: str) -> None:
        with self._lock:
            self._apply(self._collections, WriteOperation("delete", collection, document_id))

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
        with self._lock:
            items = list(self._collections.get(collection, {}).items())
            results = apply_query(items, filters, order_by, descending, limit, start_after)
            return [(doc_id, copy.deepcopy(doc)) for doc_id, doc in results]

    def batched_write(self, operations: Sequence[WriteOperation]) -> None:
        with self._lock:
            staged = copy.deepcopy(self._collections)
            for operation in operations:
                self._apply(staged, operation)
            self._collections = staged

    def clear(self) -> None:
        with self._lock:
            self._collections.clear()

    @staticmethod
    def _apply(collections: Dict[str, Dict[str, Document]], operation: WriteOperation) -> None:
        documents = collections.setdefault(operation.collection, {})
        doc_id = operation.document_id

        if operation.kind == "set":
            documents[doc_id] = copy.deepcopy(operation.data)
        elif operation.kind == "create":
            if doc_id in documents:
                raise DuplicateEntityException(
                    f"{operation.collection}/{doc_id} already exists", entity_id=doc_id
                )
            documents[doc_id] = copy.deepcopy(operation.data)
        elif operation.kind == "update":
            if doc_id not in documents:
                raise EntityNotFoundException(operation.collection, doc_id)
            documents[doc_id].update(copy.deepcopy(operation.data))
        elif operation.kind == "delete":
            documents.pop(doc_id, None)
        else:
            raise ValueError(f"Unknown write operation '{operation.kind}'")


M = TypeVar("M", bound=DocumentModel)


class BaseRepository(Generic[M]):
    """Base repository over a DocumentStore collection."""

    COLLECTION: str = ""
    ENTITY_TYPE: str = "Entity"
    MODEL: Type[M]

    def __init__(self, store: DocumentStore):
        self.store = store

    def _to_model(self, document: Document) -> M:
        return self.MODEL.from_document(document)

    def _get(self, document_id: str) -> Optional[M]:
        document = self.store.get(self.COLLECTION, document_id)
        if document is None:
            return None
        return self._to_model(document)

    def _find(
        self,
        filters: Sequence[Filter],
        order_by: Optional[str] = "createdAt",
        descending: bool = True,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
    ) -> List[M]:
        rows = self.store.query(
            self.COLLECTION,
            filters=filters,
            order_by=order_by,
            descending=descending,
            limit=limit,
            start_after=start_after,
        )
        return [self._to_model(document) for _, document in rows]

    def _create(self, model: M) -> M:
        self.store.create(self.COLLECTION, model.id, model.to_document())
        return model

    def _replace(self, model: M) -> M:
        """Whole-record replace of an existing document."""
        if self.store.get(self.COLLECTION, model.id) is None:
            raise EntityNotFoundException(self.ENTITY_TYPE, model.id)
        self.store.update(self.COLLECTION, model.id, model.to_document())
        return model

    @staticmethod
    def chunked(values: Sequence[Any], size: int) -> Iterator[List[Any]]:
        """Split values into lists of at most size items."""
        for start in range(0, len(values), size):
            yield list(values[start:start + size])
