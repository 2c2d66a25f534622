from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from colored_logger import get_colored_logger
from .errors import NotFoundError

logger = get_colored_logger(__name__)


@dataclass
class Document:
    """
    A single note as held by the store.

    Everything but ``deleted`` is fixed once created; an update replaces the
    whole record.
    """

    id: str
    created: datetime
    tags: FrozenSet[str] = frozenset()
    body: str = ""
    deleted: bool = False

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("Document id must be a non-empty string")
        self.tags = frozenset(self.tags)
        # Naive timestamps are taken to be UTC
        if self.created.tzinfo is None:
            self.created = self.created.replace(tzinfo=timezone.utc)


class DocumentStore:
    """
    System of record for documents, keyed by id.

    Answers deletion-state and date-range questions directly, and remembers the
    order in which ids were first stored so results can be ordered stably.
    """

    def __init__(self):
        self._documents: Dict[str, Document] = {}
        self._sequence: Dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, doc_id: str) -> bool:
        return doc_id in self._documents

    def put(self, doc: Document) -> None:
        """Insert or replace the record for ``doc.id`` (last write wins)."""
        if doc.id in self._documents:
            logger.debug("Replacing document %s", doc.id)
        else:
            self._sequence[doc.id] = len(self._sequence)
        self._documents[doc.id] = doc

    def get(self, doc_id: str) -> Optional[Document]:
        return self._documents.get(doc_id)

    def mark_deleted(self, doc_id: str) -> Document:
        """
        Tombstone a document.

        Raises:
            NotFoundError: if ``doc_id`` is not in the store
        """
        doc = self._documents.get(doc_id)
        if doc is None:
            raise NotFoundError("delete", doc_id)
        doc.deleted = True
        return doc

    def query_by_date(self, cutoff: datetime) -> Set[str]:
        """Ids of live documents created at or after ``cutoff``."""
        return {
            doc.id
            for doc in self._documents.values()
            if not doc.deleted and doc.created >= cutoff
        }

    def live_count(self) -> int:
        return sum(1 for doc in self._documents.values() if not doc.deleted)

    def order(self, doc_ids: Iterable[str]) -> List[str]:
        """
        Sort ids by creation time ascending.

        Ties keep the order in which ids were first stored. Unknown ids are
        dropped.
        """
        known = [doc_id for doc_id in doc_ids if doc_id in self._documents]
        return sorted(
            known,
            key=lambda doc_id: (
                self._documents[doc_id].created,
                self._sequence[doc_id],
            ),
        )
