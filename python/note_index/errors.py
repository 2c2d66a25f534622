class NoteIndexError(Exception):
    """Base class for recoverable note-index errors."""

    pass


class MalformedRecordError(NoteIndexError):
    """Raised when a note record is missing a required field or cannot be parsed."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Malformed note record: <{field}> {reason}")


class NotFoundError(NoteIndexError):
    """Raised when an operation targets a document id that is not in the store."""

    def __init__(self, operation: str, doc_id: str):
        self.operation = operation
        self.doc_id = doc_id
        super().__init__(f"{operation}: no document with id '{doc_id}'")


class EmptyQueryTermError(NoteIndexError):
    """Raised when a query term is empty once its prefix marker is stripped."""

    def __init__(self, term: str):
        self.term = term
        super().__init__(f"Empty query term: '{term}'")


class MalformedQueryError(NoteIndexError):
    """Raised when a query term value cannot be interpreted (e.g. a bad date)."""

    def __init__(self, term: str, reason: str):
        self.term = term
        self.reason = reason
        super().__init__(f"Malformed query term '{term}': {reason}")
