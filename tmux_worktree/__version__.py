"""Version information for tmux-worktree."""

__version__ = "0.3.0"
