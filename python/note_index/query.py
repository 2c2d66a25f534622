from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Set

from colored_logger import get_colored_logger
from .document_store import DocumentStore
from .errors import EmptyQueryTermError, MalformedQueryError
from .ternary_tree import TernaryTree

logger = get_colored_logger(__name__)

TAG_MARKER = "tag:"
DATE_MARKER = "created:"
WILDCARD = "*"

KIND_CONTENT = "content"
KIND_TAG = "tag"
KIND_DATE = "date"


@dataclass
class QueryTerm:
    """
    One whitespace-delimited unit of a search query.
    """

    raw: str
    kind: str
    value: str
    prefix: bool = False

    @classmethod
    def parse(cls, raw: str) -> "QueryTerm":
        """
        Classify a single term, case-insensitively.

        ``tag:<v>`` and ``created:<YYYYMMDD>`` select the tag index and the
        date filter; anything else is a content word. A ``*`` makes the text
        before it a prefix match.

        Raises:
            EmptyQueryTermError: if nothing is left after stripping the marker
        """
        term = raw.strip().lower()
        if term.startswith(TAG_MARKER):
            kind, value = KIND_TAG, term[len(TAG_MARKER) :]
        elif term.startswith(DATE_MARKER):
            kind, value = KIND_DATE, term[len(DATE_MARKER) :]
        else:
            kind, value = KIND_CONTENT, term

        if not value:
            raise EmptyQueryTermError(raw)

        prefix = False
        if kind != KIND_DATE and WILDCARD in value:
            value = value[: value.index(WILDCARD)]
            prefix = True

        return cls(raw=raw, kind=kind, value=value, prefix=prefix)


class QueryEvaluator:
    """
    Resolves queries against the content index, the tag index and the store.

    Terms are combined with AND: the result is the intersection of every
    term's id set, taken in term order. The evaluator never mutates the
    indexes it reads.
    """

    def __init__(
        self,
        store: DocumentStore,
        content_index: TernaryTree,
        tag_index: TernaryTree,
        date_format: str = "%Y%m%d",
    ):
        self.store = store
        self.content_index = content_index
        self.tag_index = tag_index
        self.date_format = date_format

    def parse(self, query: str) -> List[Optional[QueryTerm]]:
        """Split and classify; empty terms become None."""
        terms = []
        for raw in query.split():
            try:
                terms.append(QueryTerm.parse(raw))
            except EmptyQueryTermError as e:
                logger.debug("%s; it matches nothing", e)
                terms.append(None)
        return terms

    def evaluate(self, query: str) -> Set[str]:
        """
        Evaluate ``query`` and return the matching document ids (unordered).

        Raises:
            MalformedQueryError: if a ``created:`` term is not a valid date
        """
        terms = self.parse(query)
        if not terms:
            return set()

        result: Optional[Set[str]] = None
        for term in terms:
            ids = self.resolve(term) if term is not None else set()
            if result is None:
                result = set(ids)
            else:
                result &= ids

        logger.debug("Query '%s' matched %d document(s)", query, len(result))
        return result

    def search(self, query: str) -> List[str]:
        """Evaluate ``query`` and order the ids by creation time ascending."""
        return self.store.order(self.evaluate(query))

    def resolve(self, term: QueryTerm) -> Set[str]:
        """Id set for a single term."""
        if term.kind == KIND_DATE:
            return self.store.query_by_date(self._parse_date(term))

        index = self.tag_index if term.kind == KIND_TAG else self.content_index
        if term.prefix:
            ids: Set[str] = set()
            for node in index.enumerate_prefix(term.value):
                ids.update(node.ids)
            return ids

        node = index.lookup_exact(term.value)
        return set(node.ids) if node is not None else set()

    def _parse_date(self, term: QueryTerm) -> datetime:
        try:
            cutoff = datetime.strptime(term.value, self.date_format)
        except ValueError as e:
            raise MalformedQueryError(term.raw, str(e)) from e
        return cutoff.replace(tzinfo=timezone.utc)
