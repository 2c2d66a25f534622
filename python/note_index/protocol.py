import sys
from dataclasses import dataclass
from typing import Iterable, List, Optional, TextIO

from colored_logger import get_colored_logger
from .errors import MalformedQueryError, MalformedRecordError, NoteIndexError
from .record_parser import NoteRecordParser
from .session import NoteSession

logger = get_colored_logger(__name__)

CMD_CREATE = "CREATE"
CMD_SEARCH = "SEARCH"
CMD_UPDATE = "UPDATE"
CMD_DELETE = "DELETE"


@dataclass
class ProtocolSummary:
    """Outcome of one protocol session."""

    commands: int = 0
    errors: int = 0
    terminator: Optional[str] = None


def format_results(doc_ids: List[str], separator: str = ",") -> str:
    """Render ordered ids the way SEARCH prints them: ``n1,n2``."""
    return separator.join(doc_ids)


class CommandProcessor:
    """
    Drives a ``NoteSession`` from a line-oriented command stream.

    Commands (one keyword per line):

    - ``CREATE`` then a note record
    - ``SEARCH`` then one query line; prints the matching ids
    - ``UPDATE`` then a note record; replaces the document with that id
    - ``DELETE`` then one line with a document id

    Any other line, or end of input, ends the session. A failing command is
    logged and counted; it never stops the loop.
    """

    def __init__(
        self,
        session: NoteSession,
        output: TextIO = None,
        parser: NoteRecordParser = None,
        separator: str = ",",
    ):
        self.session = session
        self.output = output or sys.stdout
        self.parser = parser or NoteRecordParser()
        self.separator = separator

        self._handlers = {
            CMD_CREATE: self._cmd_create,
            CMD_SEARCH: self._cmd_search,
            CMD_UPDATE: self._cmd_update,
            CMD_DELETE: self._cmd_delete,
        }

    def run(self, lines: Iterable[str]) -> ProtocolSummary:
        """
        Process commands until a non-command line or end of input.

        Args:
            lines: Any iterable of text lines (a file, ``sys.stdin``, a list)

        Returns:
            ProtocolSummary with command and error counts
        """
        summary = ProtocolSummary()
        stream = iter(lines)

        for line in stream:
            command = line.strip()
            handler = self._handlers.get(command)
            if handler is None:
                summary.terminator = command
                logger.debug("Session ended by line '%s'", command)
                break

            summary.commands += 1
            try:
                handler(stream)
            except NoteIndexError as e:
                summary.errors += 1
                self._report(command, e)

        logger.info(
            "Processed %d command(s) with %d error(s)", summary.commands, summary.errors
        )
        return summary

    def _cmd_create(self, stream) -> None:
        record = self.parser.read(stream)
        self.session.create_from_record(record)

    def _cmd_update(self, stream) -> None:
        record = self.parser.read(stream)
        self.session.update_from_record(record)

    def _cmd_delete(self, stream) -> None:
        doc_id = self._next_line(stream, CMD_DELETE).strip()
        self.session.delete(doc_id)

    def _cmd_search(self, stream) -> None:
        query = self._next_line(stream, CMD_SEARCH)
        try:
            results = self.session.search(query)
        except MalformedQueryError:
            # A SEARCH always answers with one line, even when it fails
            self._emit("")
            raise
        self._emit(format_results(results, self.separator))

    def _next_line(self, stream, command: str) -> str:
        line = next(stream, None)
        if line is None:
            if command == CMD_SEARCH:
                self._emit("")
            raise NoteIndexError(f"{command}: argument line missing at end of input")
        return line.rstrip("\r\n")

    def _emit(self, text: str) -> None:
        self.output.write(text + "\n")
        self.output.flush()

    def _report(self, command: str, error: NoteIndexError) -> None:
        if isinstance(error, MalformedRecordError):
            logger.error("%s skipped: %s", command, error)
        else:
            logger.warning("%s failed: %s", command, error)
