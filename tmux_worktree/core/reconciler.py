"""Reconciliation of tmux sessions and git worktrees into a presentation tree"""

from typing import List, Mapping, Optional, Sequence

from tmux_worktree.constants import ALIVE_THRESHOLD_SECONDS, DEFAULT_WORKTREES_DIR
from tmux_worktree.models.node import ErrorNode, FilterCategory, Node
from tmux_worktree.models.session import SessionFact
from tmux_worktree.models.worktree import GitStatusFact, WorktreeFact
from tmux_worktree.services.association_service import associate, select_repo_sessions
from tmux_worktree.services.grouping_service import build_nodes, dedup_nodes
from tmux_worktree.services.view_service import filter_nodes, sort_nodes
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)


def reconcile(
    sessions: Sequence[SessionFact],
    worktrees: Sequence[WorktreeFact],
    git_statuses: Optional[Mapping[str, GitStatusFact]],
    filter_category: FilterCategory,
    now: int,
    repo_name: str,
    alive_threshold: int = ALIVE_THRESHOLD_SECONDS,
    worktrees_dir: str = DEFAULT_WORKTREES_DIR,
    recent_times: Optional[Mapping[str, int]] = None,
) -> List[Node]:
    """Build the ordered, filtered node list for one repository.

    Deterministic for fixed inputs and free of side effects; sessions that
    do not carry the repository's name prefix are ignored.

    Args:
        sessions: All tmux sessions (other repositories' sessions are skipped)
        worktrees: Worktrees of the repository
        git_statuses: Git status facts keyed by normalized worktree path
        filter_category: Category to keep
        now: Current Unix time
        repo_name: Repository name (basename of its root)
        alive_threshold: Seconds of inactivity before a session is idle
        worktrees_dir: Directory name holding the secondary worktrees
        recent_times: Last file change per normalized worktree path; shown,
            never used for ordering

    Returns:
        Sorted and filtered list of nodes
    """
    repo_sessions = select_repo_sessions(sessions, repo_name)
    logger.debug(
        f"Reconciling {repo_name}: {len(repo_sessions)}/{len(sessions)} sessions, "
        f"{len(worktrees)} worktrees"
    )

    associations = associate(
        repo_sessions,
        worktrees,
        repo_name,
        git_statuses=git_statuses,
        now=now,
        alive_threshold=alive_threshold,
        recent_times=recent_times,
    )
    nodes = dedup_nodes(build_nodes(associations, repo_name, worktrees_dir))
    return filter_nodes(sort_nodes(nodes), filter_category)


def error_nodes(repo_name: str, message: str) -> List[Node]:
    """The whole tree of a repository whose sources could not be read."""
    return [ErrorNode(key=f"error:{repo_name}", label=repo_name, message=message)]
