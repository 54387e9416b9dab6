"""Worktree listing and removal for tmux-worktree."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import git

from tmux_worktree.exceptions import SourceUnavailableError
from tmux_worktree.models.worktree import WorktreeFact
from tmux_worktree.logging_config import get_logger

logger = get_logger(__name__)


def get_repo_root(path: str) -> str:
    """Find the main worktree root of the repository containing ``path``.

    Works from inside a secondary worktree too: the common git directory of
    every worktree lives in the main checkout.

    Raises:
        SourceUnavailableError: If ``path`` is not inside a git repository
    """
    try:
        repo = git.Repo(path, search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        raise SourceUnavailableError("git", f"not a git repository: {path}") from e

    try:
        common_dir = Path(repo.common_dir).resolve()
        if common_dir.name == ".git":
            return str(common_dir.parent)
        if repo.working_tree_dir is None:
            raise SourceUnavailableError("git", f"bare repository at {common_dir}")
        return str(repo.working_tree_dir)
    finally:
        repo.close()


def get_repo_name(repo_root: str) -> str:
    """Repository name: the basename of its root directory."""
    return os.path.basename(os.path.normpath(repo_root))


def _entry_to_fact(entry: Dict[str, Any]) -> Optional[WorktreeFact]:
    path = entry.get("path", "")
    if not path:
        return None
    return WorktreeFact(
        path=path,
        branch=entry.get("branch", ""),
        is_main=entry.get("is_main", False),
        prunable=entry.get("prunable", False),
        head=entry.get("HEAD", ""),
    )


def parse_worktree_porcelain(output: str) -> List[WorktreeFact]:
    """Parse ``git worktree list --porcelain`` output.

    Format, one block per worktree separated by blank lines:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "detached")
        prunable gitdir file points to non-existent location   (optional)

    The first block is always the main worktree.
    """
    worktrees: List[WorktreeFact] = []
    current: Dict[str, Any] = {}

    for line in output.split("\n") + [""]:
        line = line.strip()

        if not line:
            fact = _entry_to_fact(current) if current else None
            if fact is not None:
                worktrees.append(fact)
            current = {}
            continue

        if line.startswith("worktree "):
            current["path"] = line.split(" ", 1)[1]
            current["is_main"] = not worktrees
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith("refs/heads/"):
                current["branch"] = branch_ref[len("refs/heads/"):]
            else:
                current["branch"] = ""
        elif line == "detached":
            current["branch"] = ""
        elif line == "prunable" or line.startswith("prunable "):
            current["prunable"] = True

    return worktrees


class WorktreeService:
    """Service for reading and removing git worktrees."""

    def __init__(self, repo_path: str):
        """Initialize the worktree service.

        Args:
            repo_path: Path to the git repository
        """
        self.repo_path = repo_path

    def _get_repo(self):
        """Open a fresh git.Repo instance (one per call, safe across threads)."""
        return git.Repo(self.repo_path)

    def list_worktrees(self) -> List[WorktreeFact]:
        """List every worktree of the repository, prunable ones included.

        Raises:
            SourceUnavailableError: If the repository cannot be inspected
        """
        try:
            repo = self._get_repo()
            output = repo.git.worktree("list", "--porcelain")
        except git.exc.GitCommandError as e:
            stderr = (e.stderr or str(e)).strip()
            raise SourceUnavailableError("git worktree", stderr) from e
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise SourceUnavailableError("git worktree", f"not a git repository: {self.repo_path}") from e

        worktrees = parse_worktree_porcelain(output)
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def remove_worktree(self, path: str, force: bool = False) -> tuple[bool, Optional[str]]:
        """Remove a worktree at the specified path.

        Args:
            path: Path to the worktree directory
            force: Force removal even if working tree is dirty or locked

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        try:
            repo = self._get_repo()
            args = ["remove", path]
            if force:
                args.append("--force")

            repo.git.worktree(*args)
            logger.info(f"Removed worktree at {path}")
            return True, None
        except git.exc.GitCommandError as e:
            stderr = (e.stderr if hasattr(e, "stderr") else str(e)).strip()
            status = e.status if hasattr(e, "status") else "unknown"

            if stderr:
                error_msg = f"git worktree remove failed (exit {status}): {stderr}"
            else:
                error_msg = f"git worktree remove failed with exit code {status}"

            logger.error(f"Failed to remove worktree at {path}: {error_msg}")
            return False, error_msg
