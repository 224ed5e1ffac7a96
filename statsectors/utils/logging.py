import logging
import re
import sys
from pathlib import Path


def strip_ansi_codes(text: str) -> str:
    """Remove ANSI escape codes from text.

    Removes sequences like [31m, [1;33m, etc.
    """
    ansi_escape = re.compile(r"\033\[[0-9;]*m")
    return ansi_escape.sub("", text)


class ColoredFormatter(logging.Formatter):
    """Logging formatter that adds colors and icons based on level and logger name."""

    # ANSI Escape Codes
    RESET = "\033[0m"
    BOLD = "\033[1m"

    COLORS = {
        "DEBUG": "\033[37m",  # White
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[1;31m",  # Bold Red
    }

    # Icons and colors per component
    COMPONENT_THEMES = {
        "statsectors.loaders": ("📂", "\033[1;36m"),  # Bold Cyan
        "statsectors.triples.mapper": ("🔗", "\033[1;32m"),  # Bold Green
        "statsectors.triples.identifiers": ("🏷️ ", "\033[1;35m"),  # Bold Magenta
        "statsectors.triples.geometry": ("📐", "\033[1;33m"),  # Bold Yellow
        "statsectors.triples.serializer": ("💾", "\033[1;34m"),  # Bold Blue
        "statsectors.triples.validator": ("✅", "\033[1;33m"),  # Bold Yellow
        "statsectors.pipeline": ("⚙️ ", "\033[1;34m"),  # Bold Blue
        "statsectors.main": ("🚀", "\033[1;32m"),  # Bold Green
        "__main__": ("🚀", "\033[1;32m"),  # Bold Green
        "root": ("⚙️ ", "\033[1;90m"),  # Dark Gray
    }

    def format(self, record):
        icon, component_color = "", ""
        for name, theme in self.COMPONENT_THEMES.items():
            if record.name.startswith(name):
                icon, component_color = theme
                break

        # Fallback for other loggers
        if not icon:
            icon = "•"
            component_color = self.BOLD

        level_color = self.COLORS.get(record.levelname, self.RESET)
        level_name = f"{level_color}{record.levelname:8}{self.RESET}"

        short_name = record.name.split(".")[-1]
        component_display = f"{component_color}{icon} {short_name:12}{self.RESET}"

        message = record.getMessage()
        if record.levelno >= logging.WARNING:
            message = f"{level_color}{message}{self.RESET}"

        timestamp = self.formatTime(record, self.datefmt)
        return f"{timestamp} | {level_name} | {component_display} | {message}"


class PlainFormatter(logging.Formatter):
    """Plain text formatter for file logging (no ANSI codes)."""

    def format(self, record):
        timestamp = self.formatTime(record, self.datefmt)
        short_name = record.name.split(".")[-1]
        message = strip_ansi_codes(record.getMessage())
        return f"{timestamp} | {record.levelname:8} | {short_name:12} | {message}"


# Global file handler reference (to allow adding it later)
_file_handler: logging.FileHandler | None = None


def setup_colored_logging(level=logging.INFO, log_file: str | Path | None = None):
    """
    Sets up global logging with the ColoredFormatter.

    Console output goes to stderr so that it never mixes with data written
    to stdout.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to log file for persistent logging
    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(datefmt="%H:%M:%S"))

    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing handlers
    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)

    # File handler (plain text, no colors)
    if log_file:
        add_file_handler(log_file, level)

    # Silence noisy loggers
    logging.getLogger("pyogrio").setLevel(logging.WARNING)
    logging.getLogger("fiona").setLevel(logging.WARNING)
    logging.getLogger("rdflib").setLevel(logging.WARNING)


def add_file_handler(log_file: str | Path, level=logging.DEBUG) -> logging.FileHandler:
    """
    Add a file handler to the root logger.

    Args:
        log_file: Path to the log file
        level: Logging level for file (default: DEBUG for maximum detail)

    Returns:
        The created FileHandler
    """
    global _file_handler

    if _file_handler:
        remove_file_handler()

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    _file_handler = logging.FileHandler(str(log_path), mode="w", encoding="utf-8")
    _file_handler.setLevel(level)
    _file_handler.setFormatter(PlainFormatter(datefmt="%Y-%m-%d %H:%M:%S"))

    logging.getLogger().addHandler(_file_handler)
    logging.getLogger(__name__).info("File logging enabled: %s", log_path)

    return _file_handler


def remove_file_handler() -> None:
    """Remove the file handler from the root logger."""
    global _file_handler

    if _file_handler:
        logging.getLogger().removeHandler(_file_handler)
        _file_handler.close()
        _file_handler = None
