"""Session status evaluation and classification"""

from typing import Mapping, Optional

from tmux_worktree.constants import ALIVE_THRESHOLD_SECONDS
from tmux_worktree.models.session import Classification, SessionFact, SessionStatus
from tmux_worktree.models.worktree import GitStatusFact
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)


def evaluate_status(
    session: SessionFact,
    path: Optional[str] = None,
    git_statuses: Optional[Mapping[str, GitStatusFact]] = None,
) -> SessionStatus:
    """Compute the runtime status of a session.

    Args:
        session: Session as reported by tmux
        path: Normalized worktree path the session belongs to, if any
        git_statuses: Git status facts keyed by normalized path

    Returns:
        SessionStatus; git counts are zero when no status is known for the path
    """
    git_status = None
    if path is not None and git_statuses:
        git_status = git_statuses.get(path)
    if git_status is None:
        git_status = GitStatusFact()

    return SessionStatus(
        attached=session.attached,
        pane_count=session.pane_count,
        last_activity=session.last_activity,
        git_dirty=git_status.dirty,
        git_modified=git_status.modified,
        git_added=git_status.added,
        git_deleted=git_status.deleted,
        git_untracked=git_status.untracked,
    )


def classify(
    status: SessionStatus, now: int, alive_threshold: int = ALIVE_THRESHOLD_SECONDS
) -> Classification:
    """Classify a session that belongs to a known worktree.

    Orphan detection is the associator's job; it overrides whatever this returns.
    """
    if status.attached:
        return Classification.ATTACHED
    if now - status.last_activity < alive_threshold:
        return Classification.ALIVE
    return Classification.IDLE
