"""Working tree change counts from ``git status --porcelain``"""

import os
from typing import Optional

import git

from tmux_worktree.models.worktree import GitStatusFact
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)


def parse_status_porcelain(output: str) -> GitStatusFact:
    """Count changed files in porcelain v1 output.

    Each line starts with a two character XY code. A file is counted once,
    in the first matching bucket.
    """
    modified = added = deleted = untracked = 0

    for line in output.splitlines():
        if len(line) < 2:
            continue
        code = line[:2]

        if code == "??":
            untracked += 1
        elif code == "UU":
            modified += 1
        elif "A" in code:
            added += 1
        elif "M" in code:
            modified += 1
        elif "D" in code:
            deleted += 1
        elif code[0] in ("R", "C"):
            modified += 1

    return GitStatusFact(modified=modified, added=added, deleted=deleted, untracked=untracked)


class GitStatusService:
    """Reads change counts for worktree directories."""

    def __init__(self, timeout: float = 2.0):
        """Initialize the status service.

        Args:
            timeout: Seconds before a ``git status`` call is killed
        """
        self.timeout = timeout

    def get_status(self, path: str) -> Optional[GitStatusFact]:
        """Change counts for the worktree at ``path``.

        Returns:
            GitStatusFact, or None when the path is gone or git fails
        """
        if not os.path.isdir(path):
            logger.debug(f"Skipping git status for missing path {path}")
            return None

        try:
            output = git.Git(path).execute(
                ["git", "status", "--porcelain"],
                kill_after_timeout=self.timeout,
                strip_newline_in_stdout=False,
            )
        except git.exc.GitCommandError as e:
            stderr = (e.stderr or "").strip()
            logger.debug(f"git status failed in {path}: {stderr or e}")
            return None

        status = parse_status_porcelain(output)
        logger.debug(
            f"git status {path}: M={status.modified} A={status.added} "
            f"D={status.deleted} ?={status.untracked}"
        )
        return status
