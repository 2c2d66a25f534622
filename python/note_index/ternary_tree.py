from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

# Sentinel index for an absent child
NIL = -1


@dataclass
class Node:
    """
    A single character of an indexed word.

    ``eq`` advances to the next character; ``lo`` and ``hi`` hold alternative
    characters at the same depth, ordered by character value. ``ids`` is the
    set of document ids for which the root-to-node path is a complete word.
    Children are indices into the owning tree's node arena.
    """

    key: str
    lo: int = NIL
    eq: int = NIL
    hi: int = NIL
    ids: Set[str] = field(default_factory=set)

    @property
    def terminal(self) -> bool:
        return bool(self.ids)


class TernaryTree:
    """
    Character-keyed ternary search tree mapping words to document id sets.

    Nodes are stored in a flat arena and addressed by index, and every
    traversal is iterative, so neither word length nor tree size is bounded by
    the interpreter recursion limit. Nodes are never removed: deleting a
    document only strips its id from node sets (see ``tombstone``).
    """

    def __init__(self, name: str = "tree"):
        self.name = name
        self._nodes: List[Node] = []
        self._root = NIL

    def __len__(self) -> int:
        return len(self._nodes)

    def node(self, index: int) -> Node:
        return self._nodes[index]

    def insert(self, word: str, doc_id: str) -> Node:
        """
        Index ``doc_id`` under ``word``, creating nodes as needed.

        Args:
            word: Non-empty, already normalized word
            doc_id: Document identifier

        Returns:
            The terminal node for ``word``
        """
        if not word:
            raise ValueError("Cannot insert an empty word")

        if self._root == NIL:
            self._root = self._new_node(word[0])

        index = self._root
        i = 0
        while True:
            node = self._nodes[index]
            c = word[i]
            if c < node.key:
                if node.lo == NIL:
                    node.lo = self._new_node(c)
                index = node.lo
            elif c > node.key:
                if node.hi == NIL:
                    node.hi = self._new_node(c)
                index = node.hi
            elif i < len(word) - 1:
                i += 1
                if node.eq == NIL:
                    node.eq = self._new_node(word[i])
                index = node.eq
            else:
                node.ids.add(doc_id)
                logger.trace("%s: indexed '%s' -> %s", self.name, word, doc_id)
                return node

    def lookup_exact(self, word: str) -> Optional[Node]:
        """
        Find the node at the end of ``word``'s path.

        Returns None when the path does not exist. A returned node may still
        have no ids if ``word`` is only a prefix of indexed words or all of its
        documents were deleted.
        """
        index = self._find(word)
        return None if index == NIL else self._nodes[index]

    def enumerate_prefix(self, prefix: str) -> List[Node]:
        """
        Collect every word-terminating node whose word starts with ``prefix``.

        The node for ``prefix`` itself is included when it terminates a word.
        An empty prefix enumerates the whole tree.
        """
        if not prefix:
            return list(self._walk(self._root, terminal_only=True))

        index = self._find(prefix)
        if index == NIL:
            return []

        node = self._nodes[index]
        found = [node] if node.terminal else []
        found.extend(self._walk(node.eq, terminal_only=True))
        return found

    def tombstone(self, doc_id: str) -> int:
        """
        Remove ``doc_id`` from every node of the tree.

        Nodes are kept even when their id set becomes empty. Calling this again
        for the same id changes nothing.

        Returns:
            Number of nodes the id was removed from
        """
        removed = 0
        for node in self._walk(self._root, terminal_only=True):
            if doc_id in node.ids:
                node.ids.discard(doc_id)
                removed += 1

        logger.debug("%s: tombstoned %s in %d node(s)", self.name, doc_id, removed)
        return removed

    def word_count(self) -> int:
        """Number of nodes that currently terminate at least one live word."""
        return sum(1 for _ in self._walk(self._root, terminal_only=True))

    def _new_node(self, key: str) -> int:
        self._nodes.append(Node(key))
        return len(self._nodes) - 1

    def _find(self, word: str) -> int:
        if not word:
            return NIL

        index = self._root
        i = 0
        while index != NIL:
            node = self._nodes[index]
            c = word[i]
            if c < node.key:
                index = node.lo
            elif c > node.key:
                index = node.hi
            elif i < len(word) - 1:
                i += 1
                index = node.eq
            else:
                return index
        return NIL

    def _walk(self, start: int, terminal_only: bool = False) -> Iterator[Node]:
        """In-order traversal (lo, self, eq, hi) of the subtree rooted at ``start``."""
        # Stack entries: (index, expanded). An expanded entry yields its node.
        stack = [(start, False)] if start != NIL else []
        while stack:
            index, expanded = stack.pop()
            node = self._nodes[index]
            if expanded:
                if node.terminal or not terminal_only:
                    yield node
                continue
            if node.hi != NIL:
                stack.append((node.hi, False))
            if node.eq != NIL:
                stack.append((node.eq, False))
            stack.append((index, True))
            if node.lo != NIL:
                stack.append((node.lo, False))
