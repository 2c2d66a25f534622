import re
from typing import Any, Dict, Iterable, List, Set

import psutil

from colored_logger import get_colored_logger
from .document_store import Document, DocumentStore
from .errors import NotFoundError
from .query import QueryEvaluator
from .record_parser import NoteRecord
from .ternary_tree import TernaryTree

logger = get_colored_logger(__name__)

# Anything that is not a letter, digit or apostrophe separates tokens
_TOKEN_SEPARATOR = re.compile(r"(?:[^\w']|_)+")


def tokenize(text: str) -> List[str]:
    """Split note content into lowercase tokens, dropping empty ones."""
    return [token.lower() for token in _TOKEN_SEPARATOR.split(text) if token]


def normalize_tags(tags: Iterable[str]) -> Set[str]:
    return {tag.strip().lower() for tag in tags if tag and tag.strip()}


def document_from_record(record: NoteRecord) -> Document:
    return Document(
        id=record.guid,
        created=record.created,
        tags=normalize_tags(record.tags),
        body=record.content,
    )


class NoteSession:
    """
    One independent index: the document store plus the content and tag trees.

    Every lifecycle and query operation goes through a session; nothing is
    kept at module level, so several sessions can coexist.
    """

    def __init__(self, date_format: str = "%Y%m%d"):
        self.store = DocumentStore()
        self.content_index = TernaryTree("content")
        self.tag_index = TernaryTree("tags")
        self.evaluator = QueryEvaluator(
            self.store, self.content_index, self.tag_index, date_format=date_format
        )

    def create(self, doc: Document) -> Document:
        """
        Store ``doc`` and index its tags and content tokens.

        Creating over a live id replaces it: the previous version's index
        entries are swept first so only the new content is searchable.
        """
        existing = self.store.get(doc.id)
        if existing is not None and not existing.deleted:
            logger.warning("Document %s already exists; replacing it", doc.id)
            self._sweep(doc.id)

        self.store.put(doc)

        for tag in doc.tags:
            self.tag_index.insert(tag, doc.id)
        tokens = tokenize(doc.body)
        for token in tokens:
            self.content_index.insert(token, doc.id)

        logger.debug(
            "Created %s (%d tag(s), %d token(s))", doc.id, len(doc.tags), len(tokens)
        )
        return doc

    def create_from_record(self, record: NoteRecord) -> Document:
        return self.create(document_from_record(record))

    def delete(self, doc_id: str) -> Document:
        """
        Tombstone ``doc_id`` and strip it from both indexes.

        Raises:
            NotFoundError: if the id was never created
        """
        doc = self.store.mark_deleted(doc_id)
        self._sweep(doc_id)
        logger.debug("Deleted %s", doc_id)
        return doc

    def update(self, doc: Document) -> Document:
        """Replace a document: delete the current version if any, then create."""
        try:
            self.delete(doc.id)
        except NotFoundError:
            logger.debug("Update of unknown document %s; creating it", doc.id)
        return self.create(doc)

    def update_from_record(self, record: NoteRecord) -> Document:
        return self.update(document_from_record(record))

    def search(self, query: str) -> List[str]:
        """Ids matching every term of ``query``, oldest first."""
        return self.evaluator.search(query)

    def stats(self, include_process: bool = True) -> Dict[str, Any]:
        """Index size figures, plus process memory when ``include_process`` is set."""
        live = self.store.live_count()
        stats = {
            "documents": len(self.store),
            "live_documents": live,
            "deleted_documents": len(self.store) - live,
            "content_nodes": len(self.content_index),
            "content_words": self.content_index.word_count(),
            "tag_nodes": len(self.tag_index),
            "tag_words": self.tag_index.word_count(),
        }

        if include_process:
            memory = psutil.Process().memory_info()
            stats["process_rss_mb"] = round(memory.rss / (1024**2), 2)
            stats["system_memory_percent"] = psutil.virtual_memory().percent

        return stats

    def _sweep(self, doc_id: str) -> None:
        self.tag_index.tombstone(doc_id)
        self.content_index.tombstone(doc_id)
