import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from colored_logger import get_colored_logger
from .errors import MalformedRecordError

logger = get_colored_logger(__name__)

RECORD_END = "</note>"


@dataclass
class NoteRecord:
    """Fields of a note record as supplied on the wire."""

    guid: str
    created: datetime
    tags: List[str]
    content: str


class NoteRecordParser:
    """
    Reads ``<note>...</note>`` records.

    Expected shape (one element per line is typical but not required; only the
    closing ``</note>`` must sit on its own line)::

        <note>
          <guid>n1</guid>
          <created>2014-01-03T12:00:00Z</created>
          <tag>work</tag>
          <content>Remember the milk</content>
        </note>

    ``guid`` and ``created`` are required, ``tag`` may repeat, ``content`` may
    span lines and defaults to empty.
    """

    def __init__(self, timestamp_format: str = "%Y-%m-%dT%H:%M:%SZ"):
        self.timestamp_format = timestamp_format
        self.patterns = {
            "note": re.compile(r"<note>(.*)</note>", re.DOTALL),
            "guid": re.compile(r"<guid>(.*?)</guid>", re.DOTALL),
            "created": re.compile(r"<created>(.*?)</created>", re.DOTALL),
            "tag": re.compile(r"<tag>(.*?)</tag>", re.DOTALL),
            "content": re.compile(r"<content>(.*?)</content>", re.DOTALL),
        }

    def read_block(self, lines: Iterator[str]) -> str:
        """
        Consume lines up to and including the closing ``</note>`` line.

        Raises:
            MalformedRecordError: if input ends before the record is closed
        """
        block = []
        for line in lines:
            line = line.rstrip("\r\n")
            block.append(line)
            if line.strip() == RECORD_END:
                return "\n".join(block)
        raise MalformedRecordError("note", "is not terminated before end of input")

    def read(self, lines: Iterator[str]) -> NoteRecord:
        """Read and parse the next record from ``lines``."""
        return self.parse(self.read_block(lines))

    def parse(self, text: str) -> NoteRecord:
        """
        Parse a complete record.

        Raises:
            MalformedRecordError: on a missing required field or bad timestamp
        """
        note_match = self.patterns["note"].search(text)
        if not note_match:
            raise MalformedRecordError("note", "element not found")
        note = note_match.group(1)

        guid = self._required(note, "guid")
        created_text = self._required(note, "created")
        try:
            created = datetime.strptime(created_text, self.timestamp_format)
        except ValueError as e:
            raise MalformedRecordError(
                "created", f"has unparseable timestamp '{created_text}'"
            ) from e
        created = created.replace(tzinfo=timezone.utc)

        tags = [tag.strip() for tag in self.patterns["tag"].findall(note)]
        tags = [tag for tag in tags if tag]

        content = self._optional(note, "content") or ""

        logger.trace("Parsed note %s with %d tag(s)", guid, len(tags))
        return NoteRecord(guid=guid, created=created, tags=tags, content=content)

    def _required(self, note: str, field: str) -> str:
        value = self._optional(note, field)
        if value is None:
            raise MalformedRecordError(field, "is missing")
        if not value:
            raise MalformedRecordError(field, "is empty")
        return value

    def _optional(self, note: str, field: str) -> Optional[str]:
        match = self.patterns[field].search(note)
        return match.group(1).strip() if match else None
