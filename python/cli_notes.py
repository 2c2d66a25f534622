#!/usr/bin/env python3

import argparse
import sys
from typing import List

from colored_logger import setup_colored_logging, get_colored_logger
from note_index import CommandProcessor, NoteRecordParser, NoteSession
from settings import ConfigError, Settings

logger = get_colored_logger(__name__)


class NoteIndexCLI:
    """
    Command-line entry point for the note index.

    Reads CREATE / SEARCH / UPDATE / DELETE commands from a file or stdin,
    writes SEARCH results to stdout and logs to stderr.
    """

    def __init__(self, output=None):
        self.output = output or sys.stdout

    def run(self, args: List[str] = None) -> int:
        """
        Run the CLI with the given arguments.

        Args:
            args: Command line arguments. If None, uses sys.argv.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        parser = self._create_parser()
        parsed_args = parser.parse_args(args)

        try:
            settings = Settings(parsed_args.config)
        except ConfigError as e:
            setup_colored_logging(level="INFO")
            logger.error("%s", e)
            return 1

        level = "DEBUG" if parsed_args.verbose else settings.log_level
        setup_colored_logging(level=level, use_colors=settings.log_colors)

        try:
            return self._serve(parsed_args, settings)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 1

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="note-index",
            description="Index notes and answer searches from a command stream",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Commands read from the input, one keyword per line:
  CREATE   followed by a <note>...</note> record
  SEARCH   followed by a query line, e.g. "tag:work mi* created:20140101"
  UPDATE   followed by a <note>...</note> record
  DELETE   followed by a note id
Any other line ends the session.

Examples:
  %(prog)s notes.txt                 # Run the commands in notes.txt
  %(prog)s -v --stats < notes.txt    # Verbose, with index statistics at exit
            """,
        )
        parser.add_argument(
            "input",
            nargs="?",
            default="-",
            help="Command file to read (default: stdin)",
        )
        parser.add_argument(
            "-v", "--verbose", action="store_true", help="Enable verbose logging"
        )
        parser.add_argument(
            "-c", "--config", default=None, help="Path to a YAML config file"
        )
        parser.add_argument(
            "--stats",
            action="store_true",
            help="Log index statistics when the session ends",
        )
        return parser

    def _serve(self, args, settings: Settings) -> int:
        session = NoteSession(date_format=settings.date_format)
        processor = CommandProcessor(
            session,
            output=self.output,
            parser=NoteRecordParser(settings.timestamp_format),
            separator=settings.result_separator,
        )

        # Undecodable bytes become U+FFFD instead of aborting the session
        if args.input == "-":
            if hasattr(sys.stdin, "reconfigure"):
                sys.stdin.reconfigure(errors="replace")
            processor.run(sys.stdin)
        else:
            try:
                with open(args.input, "r", encoding="utf-8", errors="replace") as f:
                    processor.run(f)
            except OSError as e:
                logger.error("Cannot read %s: %s", args.input, e)
                return 1

        if args.stats or settings.report_stats_on_exit:
            self._report_stats(session, settings)
        return 0

    def _report_stats(self, session: NoteSession, settings: Settings) -> None:
        stats = session.stats(include_process=settings.include_process_stats)
        logger.success(
            "Index: %d document(s), %d live, %d deleted",
            stats["documents"],
            stats["live_documents"],
            stats["deleted_documents"],
        )
        logger.info(
            "Content tree: %d node(s), %d word(s); tag tree: %d node(s), %d tag(s)",
            stats["content_nodes"],
            stats["content_words"],
            stats["tag_nodes"],
            stats["tag_words"],
        )
        if "process_rss_mb" in stats:
            logger.info(
                "Process memory: %.2f MB RSS (system %.1f%% used)",
                stats["process_rss_mb"],
                stats["system_memory_percent"],
            )


def main():
    """Main entry point for the note-index CLI."""
    cli = NoteIndexCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
