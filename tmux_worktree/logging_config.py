"""Logging configuration for tmux-worktree"""
import logging
import sys
from pathlib import Path

LOG_DIR = Path.home() / ".tmux-worktree"
LOG_FILE_NAME = "tmux-worktree.log"

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that flood DEBUG output during a refresh pass
QUIET_LOGGERS = ('git', 'asyncio')


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name when stderr is a terminal."""

    # ANSI escapes per level
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        if sys.stderr.isatty():
            levelname = record.levelname
            if levelname in self.COLORS:
                record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        return super().format(record)


def _file_handler() -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(LOG_DIR / LOG_FILE_NAME, mode='w')  # One log per run
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(verbose: bool = False, debug: bool = False, tui_mode: bool = False) -> None:
    """
    Configure logging for the application.

    The TUI owns the terminal, so in TUI mode everything goes to
    ~/.tmux-worktree/tmux-worktree.log instead of stderr.

    Args:
        verbose: If True, show INFO level messages
        debug: If True, show DEBUG level messages and write the log file
        tui_mode: If True, log to file only
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    # Handlers filter on their own level; the file wants everything in TUI mode
    root_logger.setLevel(logging.DEBUG if tui_mode else level)

    # Repeated setup (tests, re-entry) must not stack handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if tui_mode or debug:
        root_logger.addHandler(_file_handler())

    if not tui_mode:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)

        if debug:
            formatter = ColoredFormatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT)
        else:
            # Short "[module] message" lines for warnings during normal runs
            formatter = ColoredFormatter(fmt='[%(name)s] %(message)s')

        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # GitPython logs every command it runs at DEBUG
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a tmux_worktree module.

    "tmux_worktree.services.tmux_service" logs as "tmux_service",
    "tmux_worktree.core.session_keeper" as "core.session_keeper".

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Logger instance
    """
    for prefix in ('tmux_worktree.', 'services.'):
        if name.startswith(prefix):
            name = name[len(prefix):]

    return logging.getLogger(name)
