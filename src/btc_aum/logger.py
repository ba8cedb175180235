"""Console logging configuration for btc-aum."""

import logging
import os
import sys

# Finer than DEBUG; also unmutes urllib3
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class ColoredFormatter(logging.Formatter):
    """Bold, per-level ANSI coloring of the level name.

    Coloring is skipped when ``use_color`` is false, e.g. when stderr is
    redirected to a file next to a JSON report.
    """

    LEVEL_COLORS = {
        "TRACE": "\033[90m",
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def __init__(self, *args, use_color: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if not self.use_color or levelname not in self.LEVEL_COLORS:
            return super().format(record)

        color = self.LEVEL_COLORS[levelname]
        record.levelname = f"{color}{self.BOLD}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def resolve_level(log_level: str | None = None) -> int:
    """Map a level name to its numeric value, defaulting to INFO."""
    name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if name == "TRACE":
        return TRACE
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_level: str | None = None) -> None:
    """Configure logging for the application.

    Uses ``log_level`` when given, else the LOG_LEVEL environment variable
    (defaults to INFO). Logs go to stderr so JSON reports on stdout stay
    machine-readable.

    urllib3 is held at WARNING unless the level is TRACE.
    """
    level = resolve_level(log_level)

    handler = logging.StreamHandler(sys.stderr)
    formatter = ColoredFormatter(
        use_color=sys.stderr.isatty(),
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )

    if level == TRACE:
        logging.getLogger("urllib3").setLevel(TRACE)
    else:
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name``; handlers come from ``setup_logging``."""
    return logging.getLogger(name)
