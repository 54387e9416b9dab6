"""Shared constants for tmux-worktree."""

from typing import Dict

from tmux_worktree.models.session import Classification

# A detached session with activity inside this window is "alive", otherwise "idle"
ALIVE_THRESHOLD_SECONDS = 600

# Slug used for the repository's primary checkout
ROOT_SLUG = "main"

# Association keys for sessions whose working directory matches no worktree
ORPHAN_KEY_PREFIX = "orphan:"

# Session names are "<repo>_<slug>"
SESSION_NAME_SEPARATOR = "_"

DEFAULT_WORKTREES_DIR = ".worktrees"


# Symbol constants
SYMBOL_ATTACHED = "●"
SYMBOL_ALIVE = "◉"
SYMBOL_IDLE = "○"
SYMBOL_STOPPED = "◌"
SYMBOL_ORPHAN = "⚠"
SYMBOL_ERROR = "✗"
SYMBOL_DIRTY = "*"

CLASSIFICATION_SYMBOLS: Dict[Classification, str] = {
    Classification.ATTACHED: SYMBOL_ATTACHED,
    Classification.ALIVE: SYMBOL_ALIVE,
    Classification.IDLE: SYMBOL_IDLE,
    Classification.STOPPED: SYMBOL_STOPPED,
    Classification.ORPHAN: SYMBOL_ORPHAN,
}

# CLI colors (Rich color names)
CLI_COLORS: Dict[Classification, str] = {
    Classification.ATTACHED: "green",
    Classification.ALIVE: "cyan",
    Classification.IDLE: "yellow",
    Classification.STOPPED: "dim",
    Classification.ORPHAN: "red",
}

ERROR_COLOR = "bold red"

LEGEND_TEXT = """
Legend:
● = Attached (a client is connected)
◉ = Alive (activity in the last 10 minutes)
○ = Idle
◌ = Stopped (worktree without a session)
⚠ = Orphan (session points at no known worktree)
* = Uncommitted changes      M/A/D = modified/added/deleted files
"""
