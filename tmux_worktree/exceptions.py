"""Custom exceptions for tmux-worktree"""

from typing import Optional


class TmuxWorktreeError(Exception):
    """Base exception for all tmux-worktree errors."""
    pass


class SourceUnavailableError(TmuxWorktreeError):
    """Exception raised when an external source (tmux, git) cannot be queried at all."""

    def __init__(self, source: str, message: Optional[str] = None):
        self.source = source
        self.message = message

        error_msg = f"Source '{source}' is unavailable"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class PathResolutionError(TmuxWorktreeError):
    """Exception raised when a working directory cannot be normalized."""

    def __init__(self, path: Optional[str], message: Optional[str] = None):
        self.path = path
        self.message = message

        error_msg = f"Cannot resolve path {path!r}"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class ReconcileError(TmuxWorktreeError):
    """Exception raised when a repository cannot be reconciled."""

    def __init__(self, repo_name: str, cause: Optional[Exception] = None):
        self.repo_name = repo_name
        self.cause = cause

        error_msg = f"Could not reconcile repository '{repo_name}'"
        if cause:
            error_msg += f": {cause}"

        super().__init__(error_msg)


class TmuxCommandError(TmuxWorktreeError):
    """Exception raised for failed tmux write operations."""

    def __init__(self, operation: str, session: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.session = session
        self.message = message

        error_msg = f"tmux operation '{operation}' failed"
        if session:
            error_msg += f" for session '{session}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)
