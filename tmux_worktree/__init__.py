"""
tmux-worktree - Reconcile tmux sessions with the git worktrees they belong to
"""

from .__version__ import __version__
from .core import SessionKeeper, reconcile
from .cli.main import main

__all__ = ["SessionKeeper", "reconcile", "main", "__version__"]
