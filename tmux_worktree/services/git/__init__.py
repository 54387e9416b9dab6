"""Git adapters: worktree listing and working tree status."""

from .status import GitStatusService, parse_status_porcelain
from .worktrees import WorktreeService, get_repo_name, get_repo_root, parse_worktree_porcelain

__all__ = [
    "GitStatusService",
    "WorktreeService",
    "get_repo_name",
    "get_repo_root",
    "parse_status_porcelain",
    "parse_worktree_porcelain",
]
