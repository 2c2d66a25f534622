"""
Note-Index Module

In-memory search index over short notes with exact-word, prefix, tag and
date queries, driven by a line-oriented command protocol.

Key Components:
- TernaryTree: character-keyed ternary search tree mapping words to note ids
- DocumentStore: system of record for notes and their deletion state
- QueryEvaluator: classifies query terms and intersects their results
- NoteSession: one independent index (store plus content and tag trees)
- NoteRecordParser: reads <note> records from the command stream
- CommandProcessor: CREATE / SEARCH / UPDATE / DELETE dispatch loop
"""

from .errors import (
    EmptyQueryTermError,
    MalformedQueryError,
    MalformedRecordError,
    NoteIndexError,
    NotFoundError,
)
from .ternary_tree import Node, TernaryTree
from .document_store import Document, DocumentStore
from .query import QueryEvaluator, QueryTerm
from .record_parser import NoteRecord, NoteRecordParser
from .session import NoteSession, tokenize
from .protocol import CommandProcessor, ProtocolSummary, format_results

__all__ = [
    "NoteIndexError",
    "MalformedRecordError",
    "MalformedQueryError",
    "NotFoundError",
    "EmptyQueryTermError",
    "Node",
    "TernaryTree",
    "Document",
    "DocumentStore",
    "QueryEvaluator",
    "QueryTerm",
    "NoteRecord",
    "NoteRecordParser",
    "NoteSession",
    "tokenize",
    "CommandProcessor",
    "ProtocolSummary",
    "format_results",
]
