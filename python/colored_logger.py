import logging
import sys
from typing import Union

# Custom logging levels
TRACE_LEVEL = 5
SUCCESS_LEVEL = 25
NOTICE_LEVEL = 35

logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")
logging.addLevelName(NOTICE_LEVEL, "NOTICE")


class ColoredFormatter(logging.Formatter):
    """Formatter that colors log lines by level when stderr is a terminal."""

    COLORS = {
        "TRACE": "\033[90m",  # Bright Black (Gray)
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "SUCCESS": "\033[92m",  # Bright Green
        "WARNING": "\033[33m",  # Yellow
        "NOTICE": "\033[96m",  # Bright Cyan
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: str = None, datefmt: str = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        if self.use_colors and sys.stderr.isatty():
            level_color = self.COLORS.get(record.levelname, "")
            return f"{level_color}{message}{self.COLORS['RESET']}"

        return message


def setup_colored_logging(
    level: Union[int, str] = logging.INFO, use_colors: bool = True
) -> None:
    """
    Configure the root logger to write colored lines to stderr.

    stdout is left alone: it carries protocol output only.

    Args:
        level: Logging level, numeric or a name such as "DEBUG" or "TRACE"
        use_colors: Disable to always emit plain text
    """
    unknown_level = None
    if isinstance(level, str):
        name = level.strip()
        if name.isdigit():
            level = int(name)
        else:
            level = logging.getLevelName(name.upper())
            if not isinstance(level, int):
                unknown_level = name
                level = logging.INFO

    formatter = ColoredFormatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        use_colors=use_colors,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if unknown_level is not None:
        root_logger.warning("Unknown log level '%s', using INFO", unknown_level)


class EnhancedLogger:
    """Logger wrapper adding the custom level methods."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def trace(self, msg, *args, **kwargs):
        """Log with TRACE level (gray) - per-node and per-token detail."""
        self._logger.log(TRACE_LEVEL, msg, *args, **kwargs)

    def success(self, msg, *args, **kwargs):
        """Log with SUCCESS level (bright green)."""
        self._logger.log(SUCCESS_LEVEL, msg, *args, **kwargs)

    def notice(self, msg, *args, **kwargs):
        """Log with NOTICE level (bright cyan)."""
        self._logger.log(NOTICE_LEVEL, msg, *args, **kwargs)

    # Delegate debug/info/warning/error/... to the wrapped logger
    def __getattr__(self, name):
        return getattr(self._logger, name)


def get_colored_logger(name: str) -> EnhancedLogger:
    """
    Get an enhanced logger instance with custom level methods.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Enhanced logger instance
    """
    return EnhancedLogger(logging.getLogger(name))
